"""
JWT session token creation and verification.

Tokens are HS256-signed JWTs (PyJWT) carrying the user id plus the
standard ``iat`` / ``exp`` claims. Secret key is loaded from
``config.jwt_secret`` (env var: ``JWT_SECRET``).
"""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone

import jwt
from pydantic import BaseModel, ValidationError

from config.settings import config
from utils.errors import AppError

_TOKEN_SECRET = config.jwt_secret
_TOKEN_ALGORITHM = config.jwt_algorithm
_TOKEN_EXPIRY_SECONDS = config.jwt_expiry_seconds


class TokenPayload(BaseModel):
    """Decoded token claims."""

    id: str
    iat: int
    exp: int


def sign_token(user_id: str | uuid.UUID) -> str:
    """Create a signed token for ``user_id``."""
    now = datetime.now(timezone.utc)
    payload = {
        "id": str(user_id),
        "iat": now,
        "exp": now + timedelta(seconds=_TOKEN_EXPIRY_SECONDS),
    }
    return jwt.encode(payload, _TOKEN_SECRET, algorithm=_TOKEN_ALGORITHM)


def decode_token(token: str) -> TokenPayload:
    """
    Verify token and return its claims.

    Raises ``AppError(401)`` on invalid or expired tokens.
    """
    try:
        payload = jwt.decode(
            token,
            _TOKEN_SECRET,
            algorithms=[_TOKEN_ALGORITHM],
            options={"require": ["id", "iat", "exp"]},
        )
        return TokenPayload(**payload)
    except jwt.ExpiredSignatureError:
        raise AppError("Your token has expired! Please log in again.", 401)
    except (jwt.InvalidTokenError, ValidationError):
        raise AppError("Invalid token. Please log in again!", 401)
