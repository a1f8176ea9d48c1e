"""
🧭 VidTube • API v1 Router Aggregator
====================================

Exports the combined `router` plus a `build_v1_router()` factory.

Quick usage
-----------
    from app.api.v1.routers import build_v1_router
    app.include_router(build_v1_router(), prefix=settings.API_V1_STR)

Security notes
--------------
- 🔐 This layer is a pure aggregator; auth and rate limits live in child routers.
"""

from fastapi import APIRouter

from .comments import router as comments_router
from .dashboard import health_router, router as dashboard_router
from .likes import router as likes_router
from .playlists import router as playlists_router
from .subscriptions import router as subscriptions_router
from .tweets import router as tweets_router
from .users import router as users_router
from .videos import router as videos_router


def build_v1_router() -> APIRouter:
    """Compose the API v1 surface into a single `APIRouter` (no prefix)."""
    r = APIRouter()
    r.include_router(health_router)
    r.include_router(users_router)
    r.include_router(videos_router)
    r.include_router(comments_router)
    r.include_router(tweets_router)
    r.include_router(likes_router)
    r.include_router(subscriptions_router)
    r.include_router(playlists_router)
    r.include_router(dashboard_router)
    return r


router = build_v1_router()

__all__ = [
    "router",
    "build_v1_router",
    "users_router",
    "videos_router",
    "comments_router",
    "tweets_router",
    "likes_router",
    "subscriptions_router",
    "playlists_router",
    "dashboard_router",
    "health_router",
]
