# app/core/exceptions.py
from __future__ import annotations

"""
VidTube · Application Exceptions
================================
A small, consistent layer on top of FastAPI/Starlette's `HTTPException` that
carries structured metadata and renders into the uniform error envelope from
`app.core.exception_handlers`.

Key ideas
---------
- One base `AppException` that carries `code`, `message`, `errors`.
- One subclass per failure class (400/401/403/404/409/500) with sane defaults.
- `to_envelope()` renders `{statusCode, message, success: false, errors?}`.
- Callers already catching `HTTPException` keep working.

Usage
-----
    raise NotFoundException("Video not found")
    raise ConflictException("User with email or username already exists")
"""

from typing import Any, Dict, List, Optional

from fastapi import HTTPException, status

__all__ = [
    "AppException",
    "BadRequestException",
    "UnauthorizedException",
    "ForbiddenException",
    "NotFoundException",
    "ConflictException",
    "InternalServerException",
]


# ──────────────────────────────────────────────────────────────
# 📦 Core: AppException
# ──────────────────────────────────────────────────────────────
class AppException(HTTPException):
    """Base application-level exception with optional metadata.

    Attributes
    -----------
    status_code : int
        HTTP status code (400/401/403/404/409/500).
    message : str
        Human-readable error message (also exposed as `detail`).
    code : int
        Typed error code. Defaults to `status_code`.
    errors : list | None
        Machine-readable error items (e.g., validation problems).
    headers : dict | None
        Optional headers (e.g., `{"WWW-Authenticate": "Bearer"}`).
    """

    default_status: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Something went wrong"

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        status_code: Optional[int] = None,
        code: Optional[int] = None,
        errors: Optional[List[Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> None:
        status_code = int(status_code or self.default_status)
        message = message or self.default_message
        super().__init__(status_code=status_code, detail=message, headers=headers)
        self.code: int = int(code or status_code)
        self.message: str = message
        self.errors: Optional[List[Any]] = errors

    # ── [Helper] Canonical body used by handlers ───────────────────────────
    def to_envelope(self) -> Dict[str, Any]:
        """Return the error envelope for this exception."""
        body: Dict[str, Any] = {
            "statusCode": self.status_code,
            "message": self.message,
            "success": False,
        }
        if self.errors:
            body["errors"] = self.errors
        return body


# ──────────────────────────────────────────────────────────────
# 🧱 Failure classes
# ──────────────────────────────────────────────────────────────
class BadRequestException(AppException):
    """Malformed or missing input, invalid identifier, failed upload."""

    default_status = status.HTTP_400_BAD_REQUEST
    default_message = "Bad request"


class UnauthorizedException(AppException):
    """Missing, invalid or expired credential."""

    default_status = status.HTTP_401_UNAUTHORIZED
    default_message = "Unauthorized request"

    def __init__(self, message: Optional[str] = None, **kwargs: Any) -> None:
        kwargs.setdefault("headers", {"WWW-Authenticate": "Bearer"})
        super().__init__(message, **kwargs)


class ForbiddenException(AppException):
    """Authenticated, but not allowed to touch the resource."""

    default_status = status.HTTP_403_FORBIDDEN
    default_message = "Forbidden"


class NotFoundException(AppException):
    default_status = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found"


class ConflictException(AppException):
    """Uniqueness violation (username, email, playlist name, toggle race)."""

    default_status = status.HTTP_409_CONFLICT
    default_message = "Resource already exists"


class InternalServerException(AppException):
    default_status = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal Server Error"
