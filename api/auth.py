"""
Token issuing and verification for the bookstore API.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict

import jwt
import structlog
from fastapi import Request

from bookstore.errors import InvalidToken, Unauthorized
from utilities.config import BookstoreConfig

logger = structlog.get_logger(__name__)


class TokenManager:
    """Issues and checks signed identity tokens."""

    def __init__(self, config: BookstoreConfig):
        self.secret_key = config.secret_key
        self.algorithm = config.algorithm
        self.expire_minutes = config.token_expire_minutes

    def issue(self, user_id: str) -> str:
        """
        Issue a token binding ``user_id``.

        Args:
            user_id: Identity to embed in the token

        Returns:
            Encoded JWT
        """
        now = datetime.now(timezone.utc)
        payload: Dict[str, Any] = {"sub": user_id, "iat": now}
        if self.expire_minutes > 0:
            payload["exp"] = now + timedelta(minutes=self.expire_minutes)

        token = jwt.encode(payload, self.secret_key, algorithm=self.algorithm)
        logger.debug("Token issued", user_id=user_id, expires=self.expire_minutes > 0)
        return token

    def verify(self, token: str) -> str:
        """
        Verify a token and extract the identity it carries.

        Args:
            token: Encoded JWT

        Returns:
            The user identifier

        Raises:
            InvalidToken: If the token is missing, malformed, forged or expired
        """
        if not token:
            raise InvalidToken()

        try:
            payload = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                options={"require": ["sub"]},
            )
        except jwt.ExpiredSignatureError:
            logger.info("Expired token presented")
            raise InvalidToken("Token has expired")
        except jwt.InvalidTokenError as e:
            logger.warning("Invalid token presented", error=str(e))
            raise InvalidToken()

        user_id = payload.get("sub")
        if not isinstance(user_id, str) or not user_id:
            raise InvalidToken()
        return user_id


async def require_user(request: Request) -> str:
    """
    FastAPI dependency resolving the caller's identity from the raw token header.

    Raises:
        Unauthorized: If the header is absent
        InvalidToken: If the token does not verify
    """
    header = request.app.state.config.token_header
    token = request.headers.get(header)
    if not token:
        logger.info("Protected request without token", path=request.url.path)
        raise Unauthorized()

    return request.app.state.tokens.verify(token)
