"""
User API routes guarded by ``protect`` / ``restrict_to``.

Route prefix: /api/v1/users
"""

from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from auth.dependencies import db_session, protect, restrict_to
from auth.models import Role, User
from database.helpers import list_users

router = APIRouter(tags=["users"])


@router.get("/me")
async def get_me(user: User = Depends(protect)) -> Dict[str, Any]:
    """Profile of the logged-in user."""
    return {"status": "success", "data": {"user": user.to_public_dict()}}


@router.get("")
async def get_all_users(
    _: User = Depends(restrict_to(Role.ADMIN.value, Role.LEAD_GUIDE.value)),
    session: AsyncSession = Depends(db_session),
) -> Dict[str, Any]:
    users = await list_users(session)
    return {
        "status": "success",
        "results": len(users),
        "data": {"users": [u.to_public_dict() for u in users]},
    }
