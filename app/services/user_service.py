# app/services/user_service.py
from __future__ import annotations

"""
👤 VidTube · Account service
============================

Registration, credential checks and profile edits. Token issuing / rotation
lives in `TokenService`; routers only set cookies from the returned pair.

Flow (register)
---------------
    [1] validate text fields (non-blank, password length)
    [2] reject taken username / email                      → 409
    [3] require the avatar part                            → 400
    [4] upload avatar (required) + cover image (optional)
    [5] insert, then reload the public projection          → 500 if missing
"""

from pathlib import Path
from typing import Optional
from uuid import UUID

from fastapi import UploadFile
from loguru import logger
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import defer

from app.core.config import Settings
from app.core.exceptions import (
    BadRequestException,
    ConflictException,
    InternalServerException,
    NotFoundException,
    UnauthorizedException,
)
from app.core.security import get_password_hash, verify_password
from app.db.models.user import User
from app.services.common import insert_unique, update_fields
from app.services.upload_service import Uploader, has_file, upload_optional, upload_required

USER_EXISTS = "User with email or username already exists"


def _norm(value: Optional[str]) -> str:
    return (value or "").strip()


async def _public_user(db: AsyncSession, user_id: UUID) -> Optional[User]:
    stmt = (
        select(User)
        .where(User.id == user_id)
        .options(
            defer(User.hashed_password, raiseload=True),
            defer(User.refresh_token_hash, raiseload=True),
        )
        .execution_options(populate_existing=True)
    )
    return (await db.execute(stmt)).scalar_one_or_none()


# ─────────────────────────────────────────────────────────────────────────────
# 📝 Register
# ─────────────────────────────────────────────────────────────────────────────

async def register_user(
    db: AsyncSession,
    settings: Settings,
    uploader: Uploader,
    *,
    username: Optional[str],
    email: Optional[str],
    fullname: Optional[str],
    password: Optional[str],
    avatar: Optional[UploadFile],
    cover_image: Optional[UploadFile],
) -> User:
    # [Step 1] Text fields
    username, email, fullname = _norm(username).lower(), _norm(email).lower(), _norm(fullname)
    if not all([username, email, fullname, password]):
        raise BadRequestException("All fields are required")
    if "@" not in email:
        raise BadRequestException("Invalid email address")
    if len(password) < settings.PASSWORD_MIN_LENGTH:
        raise BadRequestException(f"Password must be at least {settings.PASSWORD_MIN_LENGTH} characters")

    # [Step 2] Uniqueness (constraints still settle races)
    taken = await db.execute(
        select(User.id).where(or_(User.username == username, User.email == email)).limit(1)
    )
    if taken.first() is not None:
        raise ConflictException(USER_EXISTS)

    # [Step 3] Avatar part must be present before anything is uploaded
    if not has_file(avatar):
        raise BadRequestException("Avatar file is required")

    # [Step 4] Uploads
    temp_dir = Path(settings.UPLOAD_TEMP_DIR)
    avatar_result = await upload_required(uploader, avatar, temp_dir, label="Avatar")
    cover_result = await upload_optional(uploader, cover_image, temp_dir)

    # [Step 5] Insert + reload the public projection
    user = User(
        username=username,
        email=email,
        fullname=fullname,
        avatar=avatar_result.url,
        cover_image=cover_result.url if cover_result else None,
        hashed_password=get_password_hash(password),
    )
    await insert_unique(db, user, conflict_message=USER_EXISTS)

    created = await _public_user(db, user.id)
    if created is None:
        raise InternalServerException("Something went wrong while registering the user")
    logger.info(f"User registered | user_id={created.id} | username={created.username}")
    return created


# ─────────────────────────────────────────────────────────────────────────────
# 🔐 Credentials
# ─────────────────────────────────────────────────────────────────────────────

async def authenticate(db: AsyncSession, *, email: Optional[str], username: Optional[str], password: str) -> User:
    """Resolve a user by email or username and check the password."""
    email, username = _norm(email).lower(), _norm(username).lower()
    if not email and not username:
        raise BadRequestException("username or email is required")

    criteria = []
    if email:
        criteria.append(User.email == email)
    if username:
        criteria.append(User.username == username)
    stmt = select(User).where(or_(*criteria)).limit(1).execution_options(populate_existing=True)
    user = (await db.execute(stmt)).scalar_one_or_none()
    if user is None:
        raise NotFoundException("User does not exist")

    if not verify_password(password, user.hashed_password):
        logger.info(f"Login rejected (bad password) | user_id={user.id}")
        raise UnauthorizedException("Invalid user credentials")
    return user


async def change_password(
    db: AsyncSession,
    settings: Settings,
    user_id: UUID,
    *,
    old_password: str,
    new_password: str,
) -> None:
    stored = (await db.execute(select(User.hashed_password).where(User.id == user_id))).scalar_one_or_none()
    if stored is None:
        raise NotFoundException("User not found")
    if not verify_password(old_password, stored):
        raise BadRequestException("Invalid old password")
    if len(new_password) < settings.PASSWORD_MIN_LENGTH:
        raise BadRequestException(f"Password must be at least {settings.PASSWORD_MIN_LENGTH} characters")

    await update_fields(db, User, user_id, {"hashed_password": get_password_hash(new_password)})
    logger.info(f"Password changed | user_id={user_id}")


# ─────────────────────────────────────────────────────────────────────────────
# ✏️ Profile edits
# ─────────────────────────────────────────────────────────────────────────────

async def update_account(
    db: AsyncSession,
    user_id: UUID,
    *,
    fullname: Optional[str] = None,
    email: Optional[str] = None,
) -> User:
    patch = {}
    if fullname is not None:
        if not fullname.strip():
            raise BadRequestException("Fullname cannot be blank")
        patch["fullname"] = fullname.strip()
    if email is not None:
        patch["email"] = email.strip().lower()
    if not patch:
        raise BadRequestException("All fields are required")

    await update_fields(db, User, user_id, patch, conflict_message=USER_EXISTS)
    return await _reload(db, user_id)


async def update_avatar(
    db: AsyncSession,
    settings: Settings,
    uploader: Uploader,
    user_id: UUID,
    avatar: Optional[UploadFile],
) -> User:
    if not has_file(avatar):
        raise BadRequestException("Avatar file is missing")
    result = await upload_required(uploader, avatar, Path(settings.UPLOAD_TEMP_DIR), label="Avatar")
    await update_fields(db, User, user_id, {"avatar": result.url})
    return await _reload(db, user_id)


async def update_cover_image(
    db: AsyncSession,
    settings: Settings,
    uploader: Uploader,
    user_id: UUID,
    cover_image: Optional[UploadFile],
) -> User:
    if not has_file(cover_image):
        raise BadRequestException("Cover image file is missing")
    result = await upload_required(uploader, cover_image, Path(settings.UPLOAD_TEMP_DIR), label="Cover image")
    await update_fields(db, User, user_id, {"cover_image": result.url})
    return await _reload(db, user_id)


async def _reload(db: AsyncSession, user_id: UUID) -> User:
    user = await _public_user(db, user_id)
    if user is None:
        raise NotFoundException("User not found")
    return user


__all__ = [
    "register_user",
    "authenticate",
    "change_password",
    "update_account",
    "update_avatar",
    "update_cover_image",
]
