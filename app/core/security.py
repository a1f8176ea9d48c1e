# app/core/security.py
from __future__ import annotations

"""
VidTube · Authentication & Security Primitives
==============================================
- bcrypt password hashing (passlib)
- JWT creation for access and refresh tokens (python-jose), each with its own
  secret and a random `jti` so two tokens minted in the same second differ
- SHA-256 digest for storing the live refresh token server-side

Token *decoding* lives in `app.core.jwt`; the lifecycle (issue / renew /
revoke) lives in `app.services.token_service`.
"""

from datetime import datetime, timedelta, timezone
from hashlib import sha256
from typing import Any, Dict
from uuid import UUID, uuid4

from jose import jwt
from passlib.context import CryptContext

from app.core.config import Settings
from app.db.models.user import User

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


# ───────────────────────────────────────────────
# 🔐 Password Hashing Utilities
# ───────────────────────────────────────────────
def get_password_hash(password: str) -> str:
    """Return a salted hash using Passlib's bcrypt."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Constant-time verify of a plaintext password against a stored hash."""
    return pwd_context.verify(plain_password, hashed_password)


def hash_token(token: str) -> str:
    """Hex SHA-256 of a token (what we persist instead of the raw value)."""
    return sha256(token.encode("utf-8")).hexdigest()


# ───────────────────────────────────────────────
# 🪪 JWT: Access Token Generation
# ───────────────────────────────────────────────
def create_access_token(settings: Settings, user: User) -> str:
    """Signed access token carrying an identity snapshot (stateless)."""
    now = datetime.now(timezone.utc)
    payload: Dict[str, Any] = {
        "sub": str(user.id),
        "email": user.email,
        "username": user.username,
        "fullname": user.fullname,
        "iat": now,
        "exp": now + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
        "jti": uuid4().hex,
        "token_type": ACCESS_TOKEN_TYPE,
    }
    return jwt.encode(payload, settings.ACCESS_TOKEN_SECRET.get_secret_value(), algorithm=settings.JWT_ALGORITHM)


# ───────────────────────────────────────────────
# 🎟️ JWT: Refresh Token Generation
# ───────────────────────────────────────────────
def create_refresh_token(settings: Settings, user_id: UUID) -> str:
    """Signed refresh token carrying only the user id."""
    now = datetime.now(timezone.utc)
    payload: Dict[str, Any] = {
        "sub": str(user_id),
        "iat": now,
        "exp": now + timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS),
        "jti": uuid4().hex,
        "token_type": REFRESH_TOKEN_TYPE,
    }
    return jwt.encode(payload, settings.REFRESH_TOKEN_SECRET.get_secret_value(), algorithm=settings.JWT_ALGORITHM)


__all__ = [
    "ACCESS_TOKEN_TYPE",
    "REFRESH_TOKEN_TYPE",
    "pwd_context",
    "get_password_hash",
    "verify_password",
    "hash_token",
    "create_access_token",
    "create_refresh_token",
]
