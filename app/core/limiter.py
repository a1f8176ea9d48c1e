from __future__ import annotations

"""
VidTube · HTTP Rate Limiting (SlowAPI)
======================================

Highlights
----------
- **User/IP aware** keying: per-user when the guard set `request.state.user_id`,
  else per-client-IP (X-Forwarded-For / X-Real-IP / client.host).
- Applied to the credential endpoints (register, login, refresh).
- **Backends**: `RATELIMIT_STORAGE_URI` (memory by default, Redis URI works).
- `install_rate_limiter(app, settings)` toggles the limiter from settings;
  when disabled, decorated routes run untouched.

Usage
-----
    from app.core.limiter import rate_limit

    @router.post("/login")
    @rate_limit("10/minute")
    async def login(request: Request, ...): ...
"""

import os
from typing import Callable, List

from loguru import logger
from slowapi import Limiter
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address
from starlette.requests import Request

from app.core.config import Settings

STORAGE_URI = os.getenv("RATELIMIT_STORAGE_URI", "").strip() or "memory://"
DEFAULT_LIMIT = os.getenv("DEFAULT_RATE_LIMIT", "100/minute").strip()


# ──────────────────────────────────────────────────────────────
# 🧠 Keying
# ──────────────────────────────────────────────────────────────
def _client_ip(request: Request) -> str:
    """Best-effort client IP: XFF first hop, then X-Real-IP, then ASGI client."""
    xff = request.headers.get("x-forwarded-for")
    if xff:
        ip = xff.split(",")[0].strip()
        if ip:
            return ip
    xri = request.headers.get("x-real-ip")
    if xri:
        return xri.strip()
    return get_remote_address(request) or "unknown"


def get_user_rate_limit_key(request: Request) -> str:
    """`user:<id>` when authenticated, else `ip:<addr>`."""
    user_id = getattr(request.state, "user_id", None)
    if user_id:
        return f"user:{user_id}"
    return f"ip:{_client_ip(request)}"


# ──────────────────────────────────────────────────────────────
# 🧰 Limiter instance
# ──────────────────────────────────────────────────────────────
def _build_default_limits() -> List[str]:
    return [chunk.strip() for chunk in DEFAULT_LIMIT.split(",") if chunk.strip()]


limiter = Limiter(
    key_func=get_user_rate_limit_key,
    default_limits=_build_default_limits(),
    storage_uri=STORAGE_URI,
    headers_enabled=False,
)


# ──────────────────────────────────────────────────────────────
# 🎛 Decorators
# ──────────────────────────────────────────────────────────────
def _chain(decorators: List[Callable]) -> Callable:
    def _apply(fn: Callable) -> Callable:
        for deco in reversed(decorators):
            fn = deco(fn)
        return fn
    return _apply


def rate_limit(*limits: str) -> Callable:
    """
    Apply per-route limits.

    Examples
    --------
    @rate_limit("10/minute")
    @rate_limit("5/second", "100/minute")
    """
    selected = list(limits) if limits else _build_default_limits()
    return _chain([limiter.limit(limit_value) for limit_value in selected])


def rate_limit_exempt() -> Callable:
    """Explicitly exempt a route from limiting."""
    return limiter.exempt


# ──────────────────────────────────────────────────────────────
# 🔧 Installer
# ──────────────────────────────────────────────────────────────
def install_rate_limiter(app, settings: Settings) -> None:
    """Enable/disable the limiter from settings and attach SlowAPI middleware."""
    limiter.enabled = settings.RATE_LIMIT_ENABLED
    app.state.limiter = limiter
    if not settings.RATE_LIMIT_ENABLED:
        logger.info("RateLimiter disabled by settings; middleware not installed")
        return
    app.add_middleware(SlowAPIMiddleware)
    logger.info(f"RateLimiter ready | default={_build_default_limits()} | storage={STORAGE_URI}")


__all__ = ["limiter", "rate_limit", "rate_limit_exempt", "install_rate_limiter", "get_user_rate_limit_key"]
