"""
MongoDB connection management for the bookstore.
Handles the client lifecycle, index creation and health checks.
"""

from typing import Any, Callable, Dict, Optional

import structlog
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection, AsyncIOMotorDatabase
from pymongo.errors import ConnectionFailure

from utilities.config import BookstoreConfig

logger = structlog.get_logger(__name__)


class MongoDBManager:
    """
    Async MongoDB manager owning the client and the two collections
    the service works with (books and users).
    """

    def __init__(
        self,
        config: BookstoreConfig,
        client_factory: Callable[[str], Any] = AsyncIOMotorClient
    ):
        """
        Initialize MongoDB manager.

        Args:
            config: Service configuration
            client_factory: Callable building a motor-compatible client from a URL
        """
        self.config = config
        self.client_factory = client_factory
        self.client: Optional[AsyncIOMotorClient] = None
        self.database: Optional[AsyncIOMotorDatabase] = None
        self.books: Optional[AsyncIOMotorCollection] = None
        self.users: Optional[AsyncIOMotorCollection] = None

    def bind(self, database: AsyncIOMotorDatabase) -> None:
        """Point the manager at an already opened database."""
        self.database = database
        self.books = database[self.config.books_collection]
        self.users = database[self.config.users_collection]

    async def connect(self) -> None:
        """Establish connection to MongoDB and make sure indexes exist."""
        try:
            self.client = self.client_factory(self.config.mongodb_url)
            self.bind(self.client[self.config.mongodb_database])

            await self.client.admin.command('ping')
            logger.info("Successfully connected to MongoDB",
                        database=self.config.mongodb_database)

            await self.create_indexes()

        except ConnectionFailure as e:
            logger.error("Failed to connect to MongoDB", error=str(e))
            raise

    async def disconnect(self) -> None:
        """Close MongoDB connection."""
        if self.client:
            self.client.close()
            self.client = None
            logger.info("Disconnected from MongoDB")

    async def create_indexes(self) -> None:
        """
        Create the indexes lookups rely on.
        ISBN and username are unique; author and title serve exact-match queries.
        """
        try:
            await self.books.create_index("isbn", unique=True)
            await self.books.create_index("author")
            await self.books.create_index("title")
            await self.users.create_index("username", unique=True)

            logger.info("Successfully created MongoDB indexes")

        except Exception as e:
            logger.error("Failed to create indexes", error=str(e))
            raise

    async def health_check(self) -> Dict[str, Any]:
        """
        Perform database health check.

        Returns:
            Dictionary with health status
        """
        if self.database is None:
            return {"status": "unavailable"}

        try:
            await self.database.command("ping")
            return {
                "status": "healthy",
                "books_count": await self.books.count_documents({}),
                "users_count": await self.users.count_documents({}),
            }
        except Exception as e:
            logger.error("Database health check failed", error=str(e))
            return {"status": "unhealthy"}
