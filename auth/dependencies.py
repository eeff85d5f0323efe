"""
FastAPI dependencies for authentication.

Provides ``db_session``, ``protect`` and ``restrict_to``, the guards used
across all protected routes.
"""

from __future__ import annotations

import logging
from typing import AsyncGenerator, Callable, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from auth.jwt import decode_token
from auth.models import User
from database.helpers import get_user_by_id
from database.session import get_db_session
from utils.errors import AppError

logger = logging.getLogger(__name__)

_bearer_scheme = HTTPBearer(auto_error=False)


async def db_session(
    session: AsyncSession = Depends(get_db_session),
) -> AsyncGenerator[AsyncSession, None]:
    """Yield a DB session for route handlers."""
    yield session


async def protect(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
    session: AsyncSession = Depends(db_session),
) -> User:
    """
    Resolve the Bearer token to a live ``User``.

    Rejects with 401 when the token is missing or invalid, when its user
    is gone, or when the password was changed after the token was issued.
    """
    if credentials is None or not credentials.credentials:
        raise AppError("You are not logged in! Please log in to get access.", 401)

    payload = decode_token(credentials.credentials)

    user = await get_user_by_id(session, payload.id)
    if user is None:
        raise AppError("The user belonging to this token does no longer exist.", 401)

    if user.changed_password_after(payload.iat):
        raise AppError("User recently changed password! Please log in again.", 401)

    return user


def restrict_to(*roles: str) -> Callable:
    """Build a dependency that only lets users with one of ``roles`` through."""

    async def _check_role(user: User = Depends(protect)) -> User:
        if user.role not in roles:
            logger.info("Denied %s (role=%s), needs one of %s", user.user_id, user.role, roles)
            raise AppError("You do not have permission to perform this action", 403)
        return user

    return _check_role
