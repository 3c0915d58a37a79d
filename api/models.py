"""
API request and response schemas.
"""

from datetime import datetime

from pydantic import BaseModel, Field, validator

from bookstore.models import ReviewAction

# bcrypt only looks at the first 72 bytes of a password
MAX_PASSWORD_BYTES = 72


class CredentialsRequest(BaseModel):
    """Body of /register and /login."""
    username: str = Field(..., min_length=1, max_length=64, description="Login name")
    password: str = Field(..., min_length=1, description="Plaintext password")

    @validator('username')
    def validate_username(cls, v):
        """Usernames are compared exactly, so surrounding whitespace is refused."""
        if v != v.strip():
            raise ValueError('username must not start or end with whitespace')
        return v

    @validator('password')
    def validate_password_length(cls, v):
        """Reject passwords bcrypt would silently truncate."""
        if len(v.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValueError(f'password must be at most {MAX_PASSWORD_BYTES} bytes')
        return v


class ReviewRequest(BaseModel):
    """Body of POST /books/{isbn}/review."""
    review: str = Field(..., min_length=1, max_length=10000, description="Review text")


class TokenResponse(BaseModel):
    """Login response."""
    token: str = Field(..., description="Identity token to send in the token header")


class MessageResponse(BaseModel):
    """Plain confirmation."""
    message: str = Field(..., description="Confirmation message")


class ReviewUpsertResponse(MessageResponse):
    """Confirmation of a review add/modify."""
    action: ReviewAction = Field(..., description="Whether the review was created or updated")


class ReviewDeleteResponse(MessageResponse):
    """Confirmation of a review delete."""
    removed: bool = Field(..., description="Whether a review existed and was removed")


class ErrorResponse(BaseModel):
    """Error response model."""
    error: str = Field(..., description="Error message")
    code: str = Field(..., description="Stable error code")
    status_code: int = Field(..., description="HTTP status code")


class HealthResponse(BaseModel):
    """Health check response model."""
    status: str = Field(..., description="Service status")
    timestamp: datetime = Field(..., description="Current timestamp")
    version: str = Field(..., description="API version")
    database_status: str = Field(..., description="Database connection status")
