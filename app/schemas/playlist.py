# app/schemas/playlist.py
from __future__ import annotations

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import Field, model_validator

from app.schemas.common import CamelModel, OwnerOut
from app.schemas.video import PlaylistVideoOut


class PlaylistCreate(CamelModel):
    name: str = Field(min_length=1, max_length=120)
    description: str = Field(default="", max_length=2000)


class PlaylistUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=120)
    description: Optional[str] = Field(default=None, max_length=2000)

    @model_validator(mode="after")
    def _at_least_one(self) -> "PlaylistUpdate":
        if self.name is None and self.description is None:
            raise ValueError("At least one of name or description is required")
        return self


class PlaylistOut(CamelModel):
    id: UUID
    name: str
    description: str
    owner_id: UUID
    created_at: datetime
    updated_at: datetime


class PlaylistView(CamelModel):
    """Playlist with owner, resolved videos and totals."""

    id: UUID
    name: str
    description: str
    owner: Optional[OwnerOut] = None
    videos: List[PlaylistVideoOut] = []
    total_videos: int = 0
    total_views: int = 0
    created_at: datetime
    updated_at: datetime


__all__ = ["PlaylistCreate", "PlaylistUpdate", "PlaylistOut", "PlaylistView"]
