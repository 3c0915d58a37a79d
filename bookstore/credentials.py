"""
User credential storage. Passwords are kept only as bcrypt hashes.
"""

import asyncio

import bcrypt
import structlog
from motor.motor_asyncio import AsyncIOMotorCollection
from pymongo.errors import DuplicateKeyError

from .errors import AuthFailure, DuplicateUser
from .models import UserRecord

logger = structlog.get_logger(__name__)


def hash_password(password: str, rounds: int) -> str:
    """Salted one-way hash of a plaintext password."""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def check_password(password: str, password_hash: str) -> bool:
    """Compare a plaintext password against a stored bcrypt hash."""
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash
        return False


class CredentialStore:
    """Registers users and validates login attempts."""

    def __init__(self, collection: AsyncIOMotorCollection, bcrypt_rounds: int = 10):
        self.collection = collection
        self.bcrypt_rounds = bcrypt_rounds

    async def register(self, username: str, password: str) -> str:
        """
        Create a user.

        Args:
            username: Unique login name
            password: Plaintext password, hashed before storage

        Returns:
            The new user's identifier

        Raises:
            DuplicateUser: If the username is taken
        """
        password_hash = await asyncio.to_thread(hash_password, password, self.bcrypt_rounds)
        try:
            result = await self.collection.insert_one({"username": username, "password": password_hash})
        except DuplicateKeyError:
            logger.warning("Registration with existing username", username=username)
            raise DuplicateUser()

        user_id = str(result.inserted_id)
        logger.info("User registered", username=username, user_id=user_id)
        return user_id

    async def verify(self, username: str, password: str) -> str:
        """
        Check a login attempt.

        Returns:
            The user's identifier

        Raises:
            AuthFailure: If the user is unknown or the password does not match
        """
        document = await self.collection.find_one({"username": username})
        if document is None:
            logger.info("Login for unknown user", username=username)
            raise AuthFailure()

        user = UserRecord.from_document(document)
        if not await asyncio.to_thread(check_password, password, user.password_hash):
            logger.info("Login with wrong password", username=username)
            raise AuthFailure()

        return user.user_id
