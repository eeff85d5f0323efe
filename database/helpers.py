"""
Database helper functions — user lookups shared by the auth routes.

"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from database.models import User



def _to_uuid(value: str | uuid.UUID) -> uuid.UUID:
    return uuid.UUID(value) if isinstance(value, str) else value



async def get_user_by_email(session: AsyncSession, email: str) -> Optional[User]:
    result = await session.execute(
        select(User).where(User.email == email.strip().lower())
    )
    return result.scalar_one_or_none()


async def get_user_by_id(session: AsyncSession, user_id: str | uuid.UUID) -> Optional[User]:
    """Return the user or ``None``; malformed ids count as missing."""
    try:
        uid = _to_uuid(user_id)
    except ValueError:
        return None
    result = await session.execute(select(User).where(User.user_id == uid))
    return result.scalar_one_or_none()


async def get_user_by_reset_token(
    session: AsyncSession,
    hashed_token: str,
) -> Optional[User]:
    """Find the user owning *hashed_token*, provided it has not expired yet."""
    result = await session.execute(
        select(User).where(
            User.password_reset_token == hashed_token,
            User.password_reset_expires_at > datetime.now(timezone.utc),
        )
    )
    return result.scalar_one_or_none()


async def list_users(session: AsyncSession) -> List[User]:
    result = await session.execute(select(User).order_by(User.created_at.asc()))
    return list(result.scalars().all())
