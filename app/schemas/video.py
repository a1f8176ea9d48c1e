# app/schemas/video.py
from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from app.schemas.common import CamelModel, OwnerOut


# ──────────────── Video ────────────────
class VideoOut(CamelModel):
    id: UUID
    video_file: str
    thumbnail: str
    title: str
    description: str
    duration: float = 0.0
    views: int = 0
    is_published: bool = True
    owner_id: UUID
    created_at: datetime
    updated_at: datetime


class VideoWithOwner(VideoOut):
    owner: Optional[OwnerOut] = None


class VideoDetailOut(VideoWithOwner):
    likes_count: int = 0
    is_liked: bool = False
    subscribers_count: int = 0
    is_subscribed: bool = False


class LikedVideoOut(VideoWithOwner):
    liked_at: datetime


class PlaylistVideoOut(VideoWithOwner):
    position: int


class DashboardVideoOut(VideoOut):
    likes_count: int = 0
    comments_count: int = 0


__all__ = [
    "VideoOut",
    "VideoWithOwner",
    "VideoDetailOut",
    "LikedVideoOut",
    "PlaylistVideoOut",
    "DashboardVideoOut",
]
