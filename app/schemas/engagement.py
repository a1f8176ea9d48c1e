# app/schemas/engagement.py
from __future__ import annotations

"""
Comments, tweets, likes and subscriptions: request and response models.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import Field

from app.schemas.common import CamelModel, OwnerOut

CONTENT_MAX = 5000
TWEET_MAX = 280


# ──────────────── Comments ────────────────
class CommentIn(CamelModel):
    content: str = Field(min_length=1, max_length=CONTENT_MAX)


class CommentOut(CamelModel):
    id: UUID
    content: str
    video_id: UUID
    owner_id: UUID
    created_at: datetime
    updated_at: datetime


class CommentView(CamelModel):
    id: UUID
    content: str
    video_id: UUID
    owner: Optional[OwnerOut] = None
    likes_count: int = 0
    is_liked: bool = False
    created_at: datetime
    updated_at: datetime


# ──────────────── Tweets ────────────────
class TweetIn(CamelModel):
    content: str = Field(min_length=1, max_length=TWEET_MAX)


class TweetOut(CamelModel):
    id: UUID
    content: str
    owner_id: UUID
    created_at: datetime
    updated_at: datetime


class TweetView(CamelModel):
    id: UUID
    content: str
    owner: Optional[OwnerOut] = None
    likes_count: int = 0
    is_liked: bool = False
    created_at: datetime
    updated_at: datetime


# ──────────────── Likes ────────────────
class LikeToggleOut(CamelModel):
    is_liked: bool


# ──────────────── Subscriptions ────────────────
class SubscriptionToggleOut(CamelModel):
    is_subscribed: bool


class _Party(OwnerOut):
    email: Optional[str] = None


class SubscriberOut(CamelModel):
    id: UUID
    subscribed_since: datetime
    subscriber: _Party


class SubscribedChannelOut(CamelModel):
    id: UUID
    subscribed_since: datetime
    channel: _Party


__all__ = [
    "CommentIn",
    "CommentOut",
    "CommentView",
    "TweetIn",
    "TweetOut",
    "TweetView",
    "LikeToggleOut",
    "SubscriptionToggleOut",
    "SubscriberOut",
    "SubscribedChannelOut",
]
