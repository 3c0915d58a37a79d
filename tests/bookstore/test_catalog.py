"""
Tests for catalog lookups and the bulk import path.
"""

import pytest
from unittest.mock import AsyncMock
from pymongo.errors import BulkWriteError

from bookstore.catalog import CatalogStore
from bookstore.errors import DuplicateBook, NotFound
from bookstore.models import BookCreate


class TestCatalogLookups:
    """Read operations against the seeded in-memory database."""

    @pytest.mark.asyncio
    async def test_list_all(self, catalog):
        books = await catalog.list_all()

        assert {book.isbn for book in books} == {"123", "456", "789"}

    @pytest.mark.asyncio
    async def test_find_by_isbn(self, catalog):
        book = await catalog.find_by_isbn("789")

        assert book.title == "Dune"
        assert book.author == "Frank Herbert"

    @pytest.mark.asyncio
    async def test_find_by_isbn_missing(self, catalog):
        with pytest.raises(NotFound):
            await catalog.find_by_isbn("000")

    @pytest.mark.asyncio
    async def test_find_by_author_exact_match(self, catalog):
        """Test author lookup matches the full name only."""
        books = await catalog.find_by_author("J.R.R. Tolkien")
        partial = await catalog.find_by_author("Tolkien")

        assert sorted(book.isbn for book in books) == ["123", "456"]
        assert partial == []

    @pytest.mark.asyncio
    async def test_find_by_title_exact_match(self, catalog):
        books = await catalog.find_by_title("Dune")
        other_case = await catalog.find_by_title("dune")

        assert [book.isbn for book in books] == ["789"]
        assert other_case == []

    @pytest.mark.asyncio
    async def test_get_reviews_missing_book(self, catalog):
        with pytest.raises(NotFound):
            await catalog.get_reviews("000")

    @pytest.mark.asyncio
    async def test_add_book_duplicate_isbn(self, catalog):
        with pytest.raises(DuplicateBook):
            await catalog.add_book(BookCreate(isbn="123", title="Another", author="Someone"))

        assert await catalog.count() == 3

    @pytest.mark.asyncio
    async def test_add_book(self, catalog):
        await catalog.add_book(BookCreate(isbn="999", title="Emma", author="Jane Austen"))

        book = await catalog.find_by_isbn("999")
        assert book.reviews == []


class TestImportBooks:
    """Bulk import against a mocked collection."""

    @pytest.fixture
    def collection(self):
        return AsyncMock()

    @pytest.fixture
    def books(self):
        return [
            BookCreate(isbn="1", title="A", author="X"),
            BookCreate(isbn="2", title="B", author="Y"),
            BookCreate(isbn="3", title="C", author="Z"),
        ]

    @pytest.mark.asyncio
    async def test_empty_import(self, collection):
        result = await CatalogStore(collection).import_books([])

        assert result == {"inserted": 0, "duplicates": 0}
        collection.insert_many.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_import_all_new(self, collection, books):
        collection.insert_many.return_value.inserted_ids = ["a", "b", "c"]

        result = await CatalogStore(collection).import_books(books)

        assert result == {"inserted": 3, "duplicates": 0}
        assert collection.insert_many.await_args.kwargs == {"ordered": False}

    @pytest.mark.asyncio
    async def test_import_skips_existing_isbns(self, collection, books):
        """Test duplicate key errors are counted, not raised."""
        collection.insert_many.side_effect = BulkWriteError({
            "nInserted": 2,
            "writeErrors": [{"index": 1, "code": 11000, "errmsg": "duplicate key"}],
        })

        result = await CatalogStore(collection).import_books(books)

        assert result == {"inserted": 2, "duplicates": 1}

    @pytest.mark.asyncio
    async def test_import_other_write_errors_raise(self, collection, books):
        collection.insert_many.side_effect = BulkWriteError({
            "nInserted": 0,
            "writeErrors": [{"index": 0, "code": 121, "errmsg": "validation failed"}],
        })

        with pytest.raises(BulkWriteError):
            await CatalogStore(collection).import_books(books)
