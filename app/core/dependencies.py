# app/core/dependencies.py
from __future__ import annotations

"""
Request dependencies · VidTube
==============================

The authorization guard plus small accessors for the objects `create_app`
builds once and parks on `app.state` (settings, token service, uploader).

Highlights
----------
- `get_current_user`: access token from the `accessToken` cookie or a Bearer
  header → verified → user loaded **without** password / refresh-token
  columns (deferred with raiseload) → attached to `request.state`.
- `get_optional_user`: same, but anonymous requests resolve to `None`.
- `parse_uuid`: opaque-id parsing with a 400 on bad input.

Duplication Policy
------------------
Token decoding and Bearer parsing live in `app.core.jwt` / the token service.
This module only *uses* them.
"""

from typing import Optional, Union
from uuid import UUID

from fastapi import Depends, Request
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import defer

from app.core.config import Settings
from app.core.exceptions import BadRequestException, UnauthorizedException
from app.core.jwt import get_access_token
from app.db.models.user import User
from app.db.session import get_async_db
from app.services.token_service import TokenService
from app.services.upload_service import Uploader

__all__ = [
    "parse_uuid",
    "get_app_settings",
    "get_token_service",
    "get_uploader",
    "get_current_user",
    "get_optional_user",
]


# ──────────────────────────────────────────────────────────────
# 🔧 Utility: UUID parsing with clear error mapping
# ──────────────────────────────────────────────────────────────
def parse_uuid(value: Union[str, UUID], field_name: str) -> UUID:
    """Parse a UUID and raise **400 Bad Request** if it is not one.

    Parameters
    ----------
    value : str | UUID
        The candidate value to coerce into a UUID.
    field_name : str
        Human-readable field name used in the error message.
    """
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except ValueError:
        raise BadRequestException(f"Invalid {field_name}")


# ──────────────────────────────────────────────────────────────
# 🧩 App-scoped singletons
# ──────────────────────────────────────────────────────────────
def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


def get_uploader(request: Request) -> Uploader:
    return request.app.state.uploader


# ──────────────────────────────────────────────────────────────
# 🔐 Authorization guard
# ──────────────────────────────────────────────────────────────
async def _load_user(db: AsyncSession, user_id: UUID) -> Optional[User]:
    stmt = (
        select(User)
        .where(User.id == user_id)
        .options(
            defer(User.hashed_password, raiseload=True),
            defer(User.refresh_token_hash, raiseload=True),
        )
    )
    return (await db.execute(stmt)).scalar_one_or_none()


async def _authenticate(request: Request, token: str, db: AsyncSession, tokens: TokenService) -> User:
    # [Step 1] Verify signature / expiry / type
    payload = tokens.decode_access(token)
    try:
        user_id = UUID(str(payload["sub"]))
    except ValueError:
        raise UnauthorizedException("Invalid access token")

    # [Step 2] Load the identity (sensitive columns excluded)
    user = await _load_user(db, user_id)
    if user is None:
        raise UnauthorizedException("Invalid access token")

    # [Step 3] Attach to the request
    request.state.user = user
    request.state.user_id = str(user.id)
    return user


async def get_current_user(
    request: Request,
    db: AsyncSession = Depends(get_async_db),
    tokens: TokenService = Depends(get_token_service),
) -> User:
    """Resolve the authenticated user or fail with 401."""
    token = get_access_token(request)
    if not token:
        raise UnauthorizedException("Unauthorized request")
    return await _authenticate(request, token, db, tokens)


async def get_optional_user(
    request: Request,
    db: AsyncSession = Depends(get_async_db),
    tokens: TokenService = Depends(get_token_service),
) -> Optional[User]:
    """Like `get_current_user`, but anonymous requests resolve to `None`."""
    token = get_access_token(request)
    if not token:
        return None
    return await _authenticate(request, token, db, tokens)
