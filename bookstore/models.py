"""
Pydantic models for catalog documents stored in MongoDB.
Implements the Book, Review and User schemas.

``Book`` and ``Review`` describe stored documents as they are and accept
whatever the collection holds. ``BookCreate`` carries the rules a new
catalog entry must satisfy.
"""

from enum import Enum
from typing import Any, Dict, List

from pydantic import BaseModel, Field, validator


class ReviewAction(str, Enum):
    """Outcome of a review upsert."""
    CREATED = "created"
    UPDATED = "updated"


class Review(BaseModel):
    """A single user's review, embedded in its book."""
    user: str = Field("", description="Identifier of the reviewing user")
    review: str = Field("", description="Review text")


class Book(BaseModel):
    """
    Catalog entry as stored. The ISBN is the primary lookup key and is unique.
    """
    isbn: str = Field(..., description="International Standard Book Number")
    title: str = Field("", description="Book title")
    author: str = Field("", description="Book author")
    reviews: List[Review] = Field(default_factory=list, description="Reviews, in submission order")

    @classmethod
    def from_document(cls, document: Dict[str, Any]) -> "Book":
        """Build a Book from a raw MongoDB document."""
        document = dict(document)
        document.pop("_id", None)
        document.pop("__v", None)
        return cls(**document)

    def to_document(self) -> Dict[str, Any]:
        """Serialize for insertion into MongoDB."""
        return self.model_dump()

    class Config:
        """Pydantic configuration."""
        json_schema_extra = {
            "example": {
                "isbn": "9780140449136",
                "title": "Crime and Punishment",
                "author": "Fyodor Dostoevsky",
                "reviews": [
                    {"user": "65f1c0ffee0000000000abcd", "review": "Great book"}
                ]
            }
        }


class BookCreate(Book):
    """
    A new catalog entry. Fields must be non-blank and each user may
    appear at most once among the reviews.
    """
    isbn: str = Field(..., min_length=1, description="International Standard Book Number")
    title: str = Field(..., min_length=1, description="Book title")
    author: str = Field(..., min_length=1, description="Book author")

    @validator('isbn', 'title', 'author')
    def strip_text(cls, v):
        """Reject values that are only whitespace."""
        v = v.strip()
        if not v:
            raise ValueError('must not be blank')
        return v

    @validator('reviews')
    def validate_one_review_per_user(cls, v):
        """A book holds at most one review per user."""
        users = [review.user for review in v]
        if len(users) != len(set(users)):
            raise ValueError('a user may only review a book once')
        return v


class UserRecord(BaseModel):
    """
    Stored user credentials. ``user_id`` is the string form of the document _id.
    """
    user_id: str = Field(..., description="Stable user identifier")
    username: str = Field(..., description="Unique login name")
    password_hash: str = Field(..., description="bcrypt hash of the password")

    @classmethod
    def from_document(cls, document: Dict[str, Any]) -> "UserRecord":
        """Build a UserRecord from a raw MongoDB document."""
        return cls(
            user_id=str(document["_id"]),
            username=document["username"],
            password_hash=document["password"],
        )
