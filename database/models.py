"""
SQLAlchemy ORM models.
"""

from __future__ import annotations

import secrets
import uuid
from datetime import datetime, timedelta, timezone
from enum import Enum

from sqlalchemy import Column, DateTime, String, Uuid
from sqlalchemy.orm import DeclarativeBase

from auth.password import hash_password, hash_reset_token, verify_password
from config.settings import config


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything is stored in UTC
    return value.replace(tzinfo=timezone.utc) if value.tzinfo is None else value


class Base(DeclarativeBase):
    pass


class Role(str, Enum):
    USER = "user"
    GUIDE = "guide"
    LEAD_GUIDE = "lead-guide"
    ADMIN = "admin"


class User(Base):
    __tablename__ = "users"

    user_id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(128), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    photo = Column(String(255), nullable=False, default="default.jpg")
    role = Column(String(16), nullable=False, default=Role.USER.value)
    password_hash = Column(String(255), nullable=False, default="")
    password_changed_at = Column(DateTime(timezone=True), nullable=True)
    password_reset_token = Column(String(64), nullable=True, index=True)
    password_reset_expires_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow)

    def set_password(self, password: str) -> None:
        """Hash and store *password*, stamping the change time on updates."""
        is_update = bool(self.password_hash)
        self.password_hash = hash_password(password)
        if is_update:
            # one second back so a token signed right after the save stays valid
            self.password_changed_at = _utcnow() - timedelta(seconds=1)

    def correct_password(self, candidate: str) -> bool:
        return verify_password(candidate, self.password_hash or "")

    def changed_password_after(self, jwt_iat: int) -> bool:
        """True when the password was changed after a token issued at *jwt_iat*."""
        if self.password_changed_at is None:
            return False
        changed_ts = int(_as_utc(self.password_changed_at).timestamp())
        return jwt_iat < changed_ts

    def create_password_reset_token(self) -> str:
        """
        Generate a one-time reset token.

        Only the SHA-256 digest is kept on the row; the plain token is
        returned so it can be emailed to the user.
        """
        reset_token = secrets.token_hex(32)
        self.password_reset_token = hash_reset_token(reset_token)
        self.password_reset_expires_at = _utcnow() + timedelta(
            minutes=config.password_reset_expires_minutes
        )
        return reset_token

    def clear_password_reset_token(self) -> None:
        self.password_reset_token = None
        self.password_reset_expires_at = None

    def to_public_dict(self) -> dict:
        return {
            "id": str(self.user_id),
            "name": self.name,
            "email": self.email,
            "photo": self.photo,
            "role": self.role,
        }
