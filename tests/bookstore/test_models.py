"""
Unit tests for catalog models.
Tests validation and document conversion.
"""

import pytest
from bson import ObjectId
from pydantic import ValidationError

from bookstore.models import Book, BookCreate, Review, ReviewAction, UserRecord


class TestBookCreate:
    """Test cases for BookCreate model."""

    def test_valid_book(self):
        """Test creating a book without reviews."""
        book = BookCreate(isbn="123", title="The Hobbit", author="J.R.R. Tolkien")

        assert book.isbn == "123"
        assert book.reviews == []

    def test_blank_fields_rejected(self):
        """Test that whitespace-only title is refused."""
        with pytest.raises(ValidationError) as exc_info:
            BookCreate(isbn="123", title="   ", author="Someone")

        assert "must not be blank" in str(exc_info.value)

    def test_missing_author_rejected(self):
        with pytest.raises(ValidationError):
            BookCreate(isbn="123", title="Dune")

    def test_fields_are_stripped(self):
        """Test surrounding whitespace is removed."""
        book = BookCreate(isbn=" 123 ", title=" Dune ", author=" Frank Herbert ")

        assert book.isbn == "123"
        assert book.title == "Dune"
        assert book.author == "Frank Herbert"

    def test_duplicate_reviewer_rejected(self):
        """Test that one user cannot hold two reviews on a book."""
        with pytest.raises(ValidationError) as exc_info:
            BookCreate(
                isbn="123",
                title="Dune",
                author="Frank Herbert",
                reviews=[
                    Review(user="u1", review="Great"),
                    Review(user="u1", review="Still great"),
                ]
            )

        assert "only review a book once" in str(exc_info.value)

    def test_to_document(self):
        """Test serialization for insertion."""
        book = BookCreate(isbn="123", title="Dune", author="Frank Herbert")

        assert book.to_document() == {
            "isbn": "123",
            "title": "Dune",
            "author": "Frank Herbert",
            "reviews": [],
        }


class TestBook:
    """Test cases for loading stored books."""

    def test_from_document_drops_driver_fields(self):
        """Test conversion from a raw MongoDB document."""
        document = {
            "_id": ObjectId(),
            "__v": 0,
            "isbn": "123",
            "title": "Dune",
            "author": "Frank Herbert",
            "reviews": [{"user": "u1", "review": "Great book"}],
        }

        book = Book.from_document(document)

        assert book.reviews == [Review(user="u1", review="Great book")]
        assert "_id" in document

    def test_from_document_keeps_duplicate_reviewers(self):
        """Test stored data is loaded even when a user appears twice."""
        book = Book.from_document({
            "isbn": "123",
            "title": "Dune",
            "author": "Frank Herbert",
            "reviews": [
                {"user": "u1", "review": "Great"},
                {"user": "u1", "review": "Still great"},
            ],
        })

        assert [review.review for review in book.reviews] == ["Great", "Still great"]

    def test_from_document_accepts_sparse_document(self):
        """Test blank or missing fields are loaded as stored."""
        book = Book.from_document({"_id": ObjectId(), "isbn": "998", "title": ""})

        assert book.title == ""
        assert book.author == ""
        assert book.reviews == []


class TestUserRecord:
    """Test cases for UserRecord model."""

    def test_from_document(self):
        object_id = ObjectId()
        user = UserRecord.from_document({"_id": object_id, "username": "alice", "password": "$2b$hash"})

        assert user.user_id == str(object_id)
        assert user.username == "alice"
        assert user.password_hash == "$2b$hash"


def test_review_action_values():
    assert ReviewAction.CREATED.value == "created"
    assert ReviewAction.UPDATED.value == "updated"
