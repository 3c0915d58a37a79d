"""
Configuration management using environment variables.
Holds every setting the bookstore service needs, with validation and defaults.
"""

from typing import List, Optional
from pathlib import Path

from pydantic import Field, validator
from pydantic_settings import BaseSettings


DEFAULT_SECRET_KEY = "change-me-bookstore-secret-key-32b"


class BookstoreConfig(BaseSettings):
    """
    Configuration for the bookstore API, its stores and the token layer.
    Uses pydantic BaseSettings for environment variable management.
    """

    # API Settings
    api_title: str = Field(default="Bookstore Review API")
    api_version: str = Field(default="1.0.0")

    # Server Settings
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=5000)
    debug: bool = Field(default=False)

    # MongoDB Configuration
    mongodb_url: str = Field(default="mongodb://localhost:27017")
    mongodb_database: str = Field(default="bookstore")
    books_collection: str = Field(default="books")
    users_collection: str = Field(default="users")

    # Security Settings
    secret_key: str = Field(default=DEFAULT_SECRET_KEY)
    algorithm: str = Field(default="HS256")
    token_expire_minutes: int = Field(default=1440, ge=0)
    token_header: str = Field(default="token")
    bcrypt_rounds: int = Field(default=10)

    # Review writes
    review_write_attempts: int = Field(default=3, ge=1)

    # CORS Settings
    cors_origins: List[str] = Field(default_factory=lambda: ["*"])

    # Logging Configuration
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="json")
    log_file: Optional[str] = Field(default=None)

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }

    @validator('secret_key')
    def validate_secret_key(cls, v):
        """Refuse to sign tokens with an empty key."""
        if not v or not v.strip():
            raise ValueError('secret_key must not be empty')
        return v

    @validator('algorithm')
    def validate_algorithm(cls, v):
        """Only symmetric HMAC algorithms are supported."""
        valid_algorithms = ['HS256', 'HS384', 'HS512']
        if v.upper() not in valid_algorithms:
            raise ValueError(f'algorithm must be one of: {valid_algorithms}')
        return v.upper()

    @validator('bcrypt_rounds')
    def validate_bcrypt_rounds(cls, v):
        """Ensure the bcrypt work factor is within the library's range."""
        if v < 4 or v > 31:
            raise ValueError('bcrypt_rounds must be between 4 and 31')
        return v

    @validator('log_level')
    def validate_log_level(cls, v):
        """Ensure log level is valid."""
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in valid_levels:
            raise ValueError(f'log_level must be one of: {valid_levels}')
        return v.upper()

    @validator('log_format')
    def validate_log_format(cls, v):
        """Ensure log format is valid."""
        valid_formats = ['json', 'console']
        if v.lower() not in valid_formats:
            raise ValueError(f'log_format must be one of: {valid_formats}')
        return v.lower()

    def get_log_file_path(self) -> Optional[Path]:
        """Get log file path as Path object."""
        if self.log_file:
            return Path(self.log_file)
        return None

    def tokens_expire(self) -> bool:
        """Whether issued tokens carry an expiry claim."""
        return self.token_expire_minutes > 0

    def uses_default_secret(self) -> bool:
        """Whether tokens are signed with the built-in development key."""
        return self.secret_key == DEFAULT_SECRET_KEY


def load_config(**overrides) -> BookstoreConfig:
    """
    Build the service configuration.

    Environment variables and ``.env`` supply values; keyword overrides win
    over both. Call this once at startup and pass the result along.
    """
    return BookstoreConfig(**overrides)
