"""
Review mutations: one review per user per book.

Every write is a single conditional MongoDB update on the book document, so
the "at most one review per user" rule holds under concurrent requests
without reading the book first.
"""

from typing import Optional

import structlog
from motor.motor_asyncio import AsyncIOMotorCollection

from .errors import NotFound, ReviewConflict, Unauthorized
from .models import ReviewAction

logger = structlog.get_logger(__name__)


class ReviewManager:
    """Adds, replaces and removes a user's review on a book."""

    def __init__(self, collection: AsyncIOMotorCollection, max_attempts: int = 3):
        """
        Args:
            collection: The books collection
            max_attempts: How many set/push cycles to try when the book's
                reviews change between the two conditional updates
        """
        self.collection = collection
        self.max_attempts = max_attempts

    async def _replace_existing(self, isbn: str, user_id: str, text: str) -> bool:
        result = await self.collection.update_one(
            {"isbn": isbn, "reviews.user": user_id},
            {"$set": {"reviews.$.review": text}}
        )
        return result.matched_count > 0

    async def _append_new(self, isbn: str, user_id: str, text: str) -> bool:
        result = await self.collection.update_one(
            {"isbn": isbn, "reviews.user": {"$ne": user_id}},
            {"$push": {"reviews": {"user": user_id, "review": text}}}
        )
        return result.matched_count > 0

    async def _book_exists(self, isbn: str) -> bool:
        return await self.collection.find_one({"isbn": isbn}, {"_id": 1}) is not None

    async def upsert_review(self, isbn: str, user_id: Optional[str], text: str) -> ReviewAction:
        """
        Insert the user's review for a book, or replace its text if one exists.

        Args:
            isbn: Book ISBN
            user_id: Reviewing user, as resolved from the token
            text: Review text

        Returns:
            ReviewAction.CREATED or ReviewAction.UPDATED

        Raises:
            Unauthorized: If no user identity is given
            NotFound: If the book does not exist
            ReviewConflict: If concurrent writes kept invalidating both updates
        """
        if not user_id:
            raise Unauthorized()

        for attempt in range(1, self.max_attempts + 1):
            if await self._replace_existing(isbn, user_id, text):
                logger.info("Review updated", isbn=isbn, user_id=user_id)
                return ReviewAction.UPDATED

            if await self._append_new(isbn, user_id, text):
                logger.info("Review created", isbn=isbn, user_id=user_id)
                return ReviewAction.CREATED

            # Neither filter matched: no such book, or the user's review was
            # added or removed between the two updates
            if not await self._book_exists(isbn):
                raise NotFound()

            logger.warning("Review changed concurrently, retrying",
                           isbn=isbn, user_id=user_id, attempt=attempt)

        logger.error("Giving up on review write", isbn=isbn, user_id=user_id,
                     attempts=self.max_attempts)
        raise ReviewConflict()

    async def delete_review(self, isbn: str, user_id: Optional[str]) -> bool:
        """
        Remove the user's review from a book. Deleting a review that does not
        exist is a no-op.

        Returns:
            True if a review was removed, False otherwise

        Raises:
            Unauthorized: If no user identity is given
            NotFound: If the book does not exist
        """
        if not user_id:
            raise Unauthorized()

        result = await self.collection.update_one(
            {"isbn": isbn},
            {"$pull": {"reviews": {"user": user_id}}}
        )
        if result.matched_count == 0:
            raise NotFound()

        removed = result.modified_count > 0
        logger.info("Review deleted", isbn=isbn, user_id=user_id, removed=removed)
        return removed
