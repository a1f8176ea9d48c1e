from __future__ import annotations

"""
# VidTube · Security Headers & CORS

- **Headers**: X-Content-Type-Options, X-Frame-Options, Referrer-Policy and
  (outside development) HSTS, appended idempotently by a pure ASGI middleware.
- **CORS installer**: allow-list from settings, credentials enabled so the
  browser sends the `accessToken` / `refreshToken` cookies.
- **Cache helper**: `set_sensitive_cache()` marks token-bearing responses
  `no-store`.

## Quick start
    install_security(app, settings)
    configure_cors(app, settings)
"""

from typing import Iterable, List, Optional, Tuple

from fastapi import Response
from starlette.middleware.cors import CORSMiddleware
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from app.core.config import Settings

_BASE_HEADERS: List[Tuple[str, str]] = [
    ("X-Content-Type-Options", "nosniff"),
    ("X-Frame-Options", "DENY"),
    ("Referrer-Policy", "strict-origin-when-cross-origin"),
    ("X-Permitted-Cross-Domain-Policies", "none"),
]


def _has_header(raw_headers: List[Tuple[bytes, bytes]], name: str) -> bool:
    lname = name.lower().encode("latin-1")
    return any(h[0].lower() == lname for h in raw_headers)


class SecurityHeadersMiddleware:
    """Append baseline security headers to every HTTP response."""

    def __init__(self, app: ASGIApp, *, hsts: bool = False, hsts_max_age: int = 31536000) -> None:
        self.app = app
        self.headers = list(_BASE_HEADERS)
        if hsts:
            self.headers.append(("Strict-Transport-Security", f"max-age={hsts_max_age}; includeSubDomains"))

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope.get("type") != "http":
            return await self.app(scope, receive, send)

        async def send_wrapper(message: Message) -> None:
            if message.get("type") == "http.response.start":
                raw = message.setdefault("headers", [])
                for name, value in self.headers:
                    if not _has_header(raw, name):
                        raw.append((name.encode("latin-1"), value.encode("latin-1")))
            await send(message)

        await self.app(scope, receive, send_wrapper)


def set_sensitive_cache(response: Response) -> None:
    """Mark a response as non-cacheable (idempotent)."""
    response.headers.setdefault("Cache-Control", "no-store")
    response.headers.setdefault("Pragma", "no-cache")
    response.headers.setdefault("Expires", "0")


def configure_cors(
    app,
    settings: Settings,
    *,
    allow_methods: Optional[Iterable[str]] = None,
    allow_headers: Optional[Iterable[str]] = None,
) -> None:
    """Install strict CORS from the configured allow-list (never '*')."""
    allow_methods = allow_methods or ["GET", "HEAD", "OPTIONS", "POST", "PUT", "PATCH", "DELETE"]
    allow_headers = allow_headers or ["Authorization", "Content-Type", "X-Request-ID"]

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_origin_regex=settings.ALLOW_ORIGINS_REGEX,
        allow_credentials=True,
        allow_methods=list(allow_methods),
        allow_headers=list(allow_headers),
        expose_headers=["X-Request-ID", "Retry-After"],
        max_age=3600,
    )


def install_security(app, settings: Settings) -> None:
    """Add the security headers middleware (HSTS only outside development)."""
    app.add_middleware(SecurityHeadersMiddleware, hsts=settings.ENV == "production")


__all__ = [
    "SecurityHeadersMiddleware",
    "install_security",
    "configure_cors",
    "set_sensitive_cache",
]
