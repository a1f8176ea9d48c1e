# app/services/token_service.py
from __future__ import annotations

"""
VidTube · Token lifecycle (issue · renew · revoke)
==================================================

- **Access token**: short-lived, stateless, carries an identity snapshot.
- **Refresh token**: long-lived, carries only the user id; its SHA-256 digest
  is stored on the user row, so there is exactly one live refresh token per
  user. Issuing a new one overwrites (and so invalidates) the previous one.
- **Rotation** is a compare-and-swap UPDATE keyed on the presented digest.
  A superseded token matches no row, so a replay (or a concurrent renewal
  with the same stale token) fails with 401.

Persisting the digest is a targeted `UPDATE users SET refresh_token_hash=…`;
no other column is read or validated.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple
from uuid import UUID

from loguru import logger
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import Settings
from app.core.exceptions import UnauthorizedException
from app.core.jwt import decode_token
from app.core.security import (
    ACCESS_TOKEN_TYPE,
    REFRESH_TOKEN_TYPE,
    create_access_token,
    create_refresh_token,
    hash_token,
)
from app.db.models.user import User


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str


class TokenService:
    """Issues and validates credentials; built once with the app settings."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    # ── Decoding ────────────────────────────────────────────────────────────
    def decode_access(self, token: Optional[str]) -> Dict[str, Any]:
        return decode_token(
            token,
            secret=self.settings.ACCESS_TOKEN_SECRET.get_secret_value(),
            algorithm=self.settings.JWT_ALGORITHM,
            expected_type=ACCESS_TOKEN_TYPE,
        )

    def decode_refresh(self, token: Optional[str]) -> Dict[str, Any]:
        return decode_token(
            token,
            secret=self.settings.REFRESH_TOKEN_SECRET.get_secret_value(),
            algorithm=self.settings.JWT_ALGORITHM,
            expected_type=REFRESH_TOKEN_TYPE,
        )

    # ── Issue ───────────────────────────────────────────────────────────────
    def mint(self, user: User) -> TokenPair:
        return TokenPair(
            access_token=create_access_token(self.settings, user),
            refresh_token=create_refresh_token(self.settings, user.id),
        )

    async def issue(self, db: AsyncSession, user: User) -> TokenPair:
        """Mint a fresh pair and store the refresh digest (overwrites the old one)."""
        pair = self.mint(user)
        await db.execute(
            update(User)
            .where(User.id == user.id)
            .values(refresh_token_hash=hash_token(pair.refresh_token))
            .execution_options(synchronize_session=False)
        )
        await db.commit()
        return pair

    # ── Renew ───────────────────────────────────────────────────────────────
    async def renew(self, db: AsyncSession, presented: Optional[str]) -> Tuple[User, TokenPair]:
        """
        Exchange a refresh token for a fresh pair (rotation, never reuse).

        Steps:
            [1] Verify signature / expiry / type.
            [2] Load the user from `sub` (401 if gone).
            [3] Compare the presented digest with the stored one (401 on mismatch).
            [4] Compare-and-swap the stored digest to the new token's digest.
        """
        # [Step 1] Verify
        payload = self.decode_refresh(presented)
        try:
            user_id = UUID(str(payload["sub"]))
        except ValueError:
            raise UnauthorizedException("Invalid refresh token")

        # [Step 2] Load user
        stmt = select(User).where(User.id == user_id).execution_options(populate_existing=True)
        user = (await db.execute(stmt)).scalar_one_or_none()
        if user is None:
            raise UnauthorizedException("Invalid refresh token")

        # [Step 3] Presented must be the live token
        presented_hash = hash_token(presented or "")
        if user.refresh_token_hash != presented_hash:
            logger.warning(f"Refresh token reuse detected | user_id={user_id}")
            raise UnauthorizedException("Refresh token is expired or used")

        # [Step 4] Rotate atomically
        pair = self.mint(user)
        new_hash = hash_token(pair.refresh_token)
        result = await db.execute(
            update(User)
            .where(User.id == user_id, User.refresh_token_hash == presented_hash)
            .values(refresh_token_hash=new_hash)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            await db.rollback()
            logger.warning(f"Concurrent refresh lost the race | user_id={user_id}")
            raise UnauthorizedException("Refresh token is expired or used")
        await db.commit()
        return user, pair

    # ── Revoke ──────────────────────────────────────────────────────────────
    async def revoke(self, db: AsyncSession, user_id: UUID) -> None:
        """Forget the live refresh token (logout)."""
        await db.execute(
            update(User)
            .where(User.id == user_id)
            .values(refresh_token_hash=None)
            .execution_options(synchronize_session=False)
        )
        await db.commit()


__all__ = ["TokenPair", "TokenService"]
