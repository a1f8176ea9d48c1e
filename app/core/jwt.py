# app/core/jwt.py
from __future__ import annotations

"""
VidTube · JWT helpers
=====================
- `decode_token` with expected-type enforcement and neutral 401 errors
- Case-insensitive Bearer token extraction
- Access token lookup from the `accessToken` cookie or the Authorization header

Notes
-----
- Token *creation* lives in `app.core.security`.
- Standard `exp`/`iat` checks apply (python-jose); no leeway.
"""

from typing import Any, Dict, Optional

from fastapi import Request
from jose import ExpiredSignatureError, JWTError, jwt
from loguru import logger

from app.core.exceptions import UnauthorizedException

ACCESS_COOKIE = "accessToken"
REFRESH_COOKIE = "refreshToken"


def decode_token(
    token: Optional[str],
    *,
    secret: str,
    algorithm: str,
    expected_type: str,
) -> Dict[str, Any]:
    """
    Verify signature/expiry and return the claims.

    Raises:
        UnauthorizedException: when the token is missing, expired, malformed,
        of the wrong type, or lacks a subject.
    """
    if not token:
        raise UnauthorizedException("Unauthorized request")
    try:
        payload = jwt.decode(token, secret, algorithms=[algorithm])
    except ExpiredSignatureError:
        logger.info(f"[JWT] expired {expected_type} token")
        raise UnauthorizedException(f"{expected_type.capitalize()} token expired")
    except JWTError as e:
        logger.info(f"[JWT] invalid {expected_type} token: {e}")
        raise UnauthorizedException(f"Invalid {expected_type} token")

    if payload.get("token_type") != expected_type:
        raise UnauthorizedException(f"Invalid {expected_type} token")
    if not payload.get("sub"):
        raise UnauthorizedException(f"Invalid {expected_type} token")
    return payload


def get_bearer_token(request: Request) -> Optional[str]:
    """Return the token from `Authorization: Bearer <token>` (case-insensitive)."""
    auth = request.headers.get("authorization") or ""
    scheme, _, value = auth.partition(" ")
    if scheme.lower() != "bearer":
        return None
    return value.strip() or None


def get_access_token(request: Request) -> Optional[str]:
    """Access token from the secure cookie first, then the Bearer header."""
    return request.cookies.get(ACCESS_COOKIE) or get_bearer_token(request)


__all__ = [
    "ACCESS_COOKIE",
    "REFRESH_COOKIE",
    "decode_token",
    "get_bearer_token",
    "get_access_token",
]
