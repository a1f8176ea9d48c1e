# app/schemas/user.py
from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import EmailStr, Field, model_validator

from app.schemas.common import CamelModel
from app.schemas.video import VideoWithOwner


# ──────────────── Account ────────────────
class UserOut(CamelModel):
    """Public account view (never password or refresh token)."""

    id: UUID
    username: str
    email: str
    fullname: str
    avatar: str
    cover_image: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class UpdateAccountRequest(CamelModel):
    fullname: Optional[str] = Field(default=None, min_length=1, max_length=120)
    email: Optional[EmailStr] = None

    @model_validator(mode="after")
    def _at_least_one(self) -> "UpdateAccountRequest":
        if self.fullname is None and self.email is None:
            raise ValueError("At least one of fullname or email is required")
        return self


class ChangePasswordRequest(CamelModel):
    old_password: str = Field(min_length=1)
    new_password: str = Field(min_length=1, max_length=128)


# ──────────────── Channel ────────────────
class ChannelProfileOut(CamelModel):
    id: UUID
    username: str
    fullname: str
    email: str
    avatar: str
    cover_image: Optional[str] = None
    created_at: datetime
    subscribers_count: int = 0
    channels_subscribed_to_count: int = 0
    is_subscribed: bool = False


class WatchHistoryItem(VideoWithOwner):
    watched_at: datetime


__all__ = [
    "UserOut",
    "UpdateAccountRequest",
    "ChangePasswordRequest",
    "ChannelProfileOut",
    "WatchHistoryItem",
]
