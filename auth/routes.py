"""
Auth API routes — signup, login, password reset and password update.

Route prefix: /api/v1/users
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator
from sqlalchemy.ext.asyncio import AsyncSession

from auth.dependencies import db_session, protect
from auth.jwt import sign_token
from auth.models import Role, User
from auth.password import hash_reset_token
from config.settings import config
from database.helpers import get_user_by_email, get_user_by_reset_token
from utils import email as mailer
from utils.errors import AppError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])

MAX_PASSWORD_BYTES = 72


# ── Request / response schemas ─────────────────────────────────────────


class _NewPassword(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    password: str = Field(..., min_length=8, max_length=128)
    password_confirm: str = Field(..., alias="passwordConfirm")

    @field_validator("password")
    @classmethod
    def _fits_bcrypt(cls, value: str) -> str:
        # bcrypt only accepts up to 72 bytes of input
        if len(value.encode()) > MAX_PASSWORD_BYTES:
            raise ValueError(f"Password cannot be longer than {MAX_PASSWORD_BYTES} bytes")
        return value

    @model_validator(mode="after")
    def _passwords_match(self):
        if self.password != self.password_confirm:
            raise ValueError("Passwords are not the same!")
        return self


class SignupRequest(_NewPassword):
    name: str = Field(..., min_length=1, max_length=128)
    email: EmailStr
    photo: Optional[str] = Field(None, max_length=255)
    role: Role = Role.USER


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class ForgotPasswordRequest(BaseModel):
    email: str


class ResetPasswordRequest(_NewPassword):
    pass


class UpdatePasswordRequest(_NewPassword):
    password_current: str = Field(..., alias="passwordCurrent")


def create_send_token(user: User, status_code: int) -> JSONResponse:
    """Issue a session token for ``user`` and send it with the public profile."""
    token = sign_token(user.user_id)
    return JSONResponse(
        status_code=status_code,
        content={
            "status": "success",
            "token": token,
            "data": {"user": user.to_public_dict()},
        },
    )


# ── Endpoints ──────────────────────────────────────────────────────────


@router.post("/signup", status_code=status.HTTP_201_CREATED)
async def signup(
    req: SignupRequest,
    session: AsyncSession = Depends(db_session),
) -> JSONResponse:
    """Register a new user and log them in."""
    email = req.email.lower()
    if await get_user_by_email(session, email) is not None:
        raise AppError("Duplicate field value. Please use another value!", 400)

    role = req.role.value if config.allow_signup_role else Role.USER.value
    user = User(
        name=req.name,
        email=email,
        photo=req.photo or "default.jpg",
        role=role,
    )
    user.set_password(req.password)
    session.add(user)
    await session.flush()

    logger.info("Signed up user %s (%s, role=%s)", user.user_id, email, role)
    return create_send_token(user, status.HTTP_201_CREATED)


@router.post("/login")
async def login(
    req: Optional[LoginRequest] = None,
    session: AsyncSession = Depends(db_session),
) -> JSONResponse:
    """Login with email + password."""
    req = req or LoginRequest()
    if not req.email or not req.password:
        raise AppError("Please provide email and password", 400)

    user = await get_user_by_email(session, req.email)
    if user is None or not user.correct_password(req.password):
        logger.info("Failed login for %s", req.email)
        raise AppError("Incorrect email or password", 401)

    logger.info("Login: %s (%s)", user.email, user.user_id)
    return create_send_token(user, status.HTTP_200_OK)


@router.post("/forgotPassword")
async def forgot_password(
    req: ForgotPasswordRequest,
    request: Request,
    session: AsyncSession = Depends(db_session),
) -> dict:
    """Email the user a one-time link for resetting their password."""
    user = await get_user_by_email(session, req.email)
    if user is None:
        raise AppError("There is no user with that email address.", 404)

    reset_token = user.create_password_reset_token()
    await session.commit()

    reset_url = str(request.url_for("reset_password", token=reset_token))
    message = (
        "Forgot your password? Submit a PATCH request with your new password "
        f"and passwordConfirm to: {reset_url}.\n"
        "If you didn't forget your password, please ignore this email!"
    )

    try:
        await mailer.send_email(
            email=user.email,
            subject=(
                "Your password reset token "
                f"(valid for {config.password_reset_expires_minutes} min)"
            ),
            message=message,
        )
    except Exception as exc:
        logger.error("Could not send reset email to %s: %s", user.email, exc)
        user.clear_password_reset_token()
        await session.commit()
        raise AppError(
            "There was an error sending the email. Try again later!", 500
        ) from exc

    logger.info("Password reset requested for %s", user.user_id)
    return {"status": "success", "message": "Token sent to email!"}


@router.patch("/resetPassword/{token}")
async def reset_password(
    token: str,
    req: ResetPasswordRequest,
    session: AsyncSession = Depends(db_session),
) -> JSONResponse:
    """Set a new password using an emailed reset token, then log in."""
    user = await get_user_by_reset_token(session, hash_reset_token(token))
    if user is None:
        raise AppError("Token is invalid or has expired", 400)

    user.set_password(req.password)
    user.clear_password_reset_token()
    await session.flush()

    logger.info("Password reset completed for %s", user.user_id)
    return create_send_token(user, status.HTTP_200_OK)


@router.patch("/updateMyPassword")
async def update_password(
    req: UpdatePasswordRequest,
    user: User = Depends(protect),
    session: AsyncSession = Depends(db_session),
) -> JSONResponse:
    """Change the logged-in user's password after re-checking the current one."""
    if not user.correct_password(req.password_current):
        raise AppError("Your current password is wrong", 401)

    user.set_password(req.password)
    await session.flush()

    logger.info("Password updated for %s", user.user_id)
    return create_send_token(user, status.HTTP_200_OK)
