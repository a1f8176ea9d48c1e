from __future__ import annotations

"""
Error envelope exception handlers.

FastAPI wires these via `install_exception_handlers(app)` from app/main.py.
Every failure leaves the API as `{statusCode, message, success: false, errors?}`
with the matching status code; stack traces and driver errors are logged,
never returned.
"""

from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.exceptions import AppException


def _envelope(
    status_code: int,
    message: str,
    *,
    errors: Optional[List[Any]] = None,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    body: Dict[str, Any] = {"statusCode": status_code, "message": message, "success": False}
    if errors:
        body["errors"] = errors
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body), headers=headers)


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:  # type: ignore
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content=jsonable_encoder(exc.to_envelope()),
        headers=getattr(exc, "headers", None),
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:  # type: ignore
    detail = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    return _envelope(exc.status_code, detail, headers=getattr(exc, "headers", None))


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:  # type: ignore
    errors = [
        {
            "loc": list(err.get("loc", ())),
            "msg": err.get("msg", ""),
            "type": err.get("type", ""),
        }
        for err in exc.errors()
    ]
    return _envelope(status.HTTP_400_BAD_REQUEST, "Validation failed", errors=errors)


async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:  # type: ignore
    # Unique constraints back every toggle and name rule; never echo the driver text.
    logger.warning(f"Integrity violation on {request.method} {request.url.path}: {exc.orig!r}")
    return _envelope(status.HTTP_409_CONFLICT, "Resource already exists")


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:  # type: ignore
    return _envelope(status.HTTP_429_TOO_MANY_REQUESTS, f"Rate limit exceeded: {exc.detail}")


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:  # type: ignore
    logger.opt(exception=exc).error(f"Unhandled error on {request.method} {request.url.path}")
    return _envelope(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal Server Error")


def install_exception_handlers(app: FastAPI) -> None:
    """Register every handler on `app` (most specific first)."""
    app.add_exception_handler(AppException, app_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, validation_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(IntegrityError, integrity_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, global_exception_handler)  # type: ignore[arg-type]


__all__ = [
    "app_exception_handler",
    "http_exception_handler",
    "validation_exception_handler",
    "integrity_error_handler",
    "rate_limit_exceeded_handler",
    "global_exception_handler",
    "install_exception_handlers",
]
