"""
Read access to the book catalog, plus the out-of-band insert path
used by the management script.
"""

from typing import Any, Dict, List

import structlog
from motor.motor_asyncio import AsyncIOMotorCollection
from pymongo.errors import BulkWriteError, DuplicateKeyError

from .errors import DuplicateBook, NotFound
from .models import Book, BookCreate, Review

logger = structlog.get_logger(__name__)

# Projection shared by every read; the driver-level _id never leaves the store
BOOK_PROJECTION = {"_id": 0, "isbn": 1, "title": 1, "author": 1, "reviews": 1}


class CatalogStore:
    """Catalog lookups backed by the books collection."""

    def __init__(self, collection: AsyncIOMotorCollection):
        self.collection = collection

    async def _find_many(self, query: Dict[str, Any]) -> List[Book]:
        cursor = self.collection.find(query, BOOK_PROJECTION)
        return [Book.from_document(document) async for document in cursor]

    async def list_all(self) -> List[Book]:
        """Return every book in the catalog."""
        try:
            books = await self._find_many({})
            logger.debug("Listed books", count=len(books))
            return books
        except Exception as e:
            logger.error("Failed to list books", error=str(e))
            raise

    async def find_by_isbn(self, isbn: str) -> Book:
        """
        Get a single book by ISBN.

        Raises:
            NotFound: If no book has this ISBN
        """
        try:
            document = await self.collection.find_one({"isbn": isbn}, BOOK_PROJECTION)
        except Exception as e:
            logger.error("Failed to get book by ISBN", isbn=isbn, error=str(e))
            raise

        if document is None:
            raise NotFound()
        return Book.from_document(document)

    async def find_by_author(self, author: str) -> List[Book]:
        """Books whose author matches exactly."""
        try:
            return await self._find_many({"author": author})
        except Exception as e:
            logger.error("Failed to get books by author", author=author, error=str(e))
            raise

    async def find_by_title(self, title: str) -> List[Book]:
        """Books whose title matches exactly."""
        try:
            return await self._find_many({"title": title})
        except Exception as e:
            logger.error("Failed to get books by title", title=title, error=str(e))
            raise

    async def get_reviews(self, isbn: str) -> List[Review]:
        """
        Reviews of one book, in submission order.

        Raises:
            NotFound: If no book has this ISBN
        """
        book = await self.find_by_isbn(isbn)
        return book.reviews

    async def add_book(self, book: BookCreate) -> None:
        """
        Insert a single book.

        Raises:
            DuplicateBook: If the ISBN is already in the catalog
        """
        try:
            await self.collection.insert_one(book.to_document())
            logger.info("Book added", isbn=book.isbn, title=book.title)
        except DuplicateKeyError:
            logger.warning("Book already exists", isbn=book.isbn)
            raise DuplicateBook(f"Book with ISBN '{book.isbn}' already exists")

    async def import_books(self, books: List[BookCreate]) -> Dict[str, int]:
        """
        Insert many books, skipping ISBNs already present.

        Returns:
            Dict with inserted and duplicate counts
        """
        if not books:
            return {"inserted": 0, "duplicates": 0}

        documents = [book.to_document() for book in books]
        try:
            result = await self.collection.insert_many(documents, ordered=False)
            inserted = len(result.inserted_ids)
        except BulkWriteError as e:
            write_errors = e.details.get("writeErrors", [])
            # 11000 is MongoDB's duplicate key error code
            if any(error.get("code") != 11000 for error in write_errors):
                logger.error("Book import failed", error=str(e))
                raise
            inserted = e.details.get("nInserted", len(books) - len(write_errors))

        duplicates = len(books) - inserted
        logger.info("Book import completed", total=len(books), inserted=inserted, duplicates=duplicates)
        return {"inserted": inserted, "duplicates": duplicates}

    async def count(self) -> int:
        """Get total number of books in the catalog."""
        return await self.collection.count_documents({})
