# app/db/models/playlist.py
from __future__ import annotations

"""
📃 VidTube · Playlist + ordered entries
=======================================

• `Playlist.name` is unique per owner.
• `PlaylistVideo` keeps the ordered video references: composite PK
  (playlist_id, video_id) so a video appears once; `position` orders them.
"""

from datetime import datetime
import uuid

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base_class import Base, TimestampMixin, UUIDPKMixin, utcnow


class Playlist(UUIDPKMixin, TimestampMixin, Base):
    __tablename__ = "playlists"

    name: Mapped[str] = mapped_column(String(120), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    owner_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )

    __table_args__ = (
        UniqueConstraint("owner_id", "name", name="uq_playlists_owner_name"),
    )


class PlaylistVideo(Base):
    __tablename__ = "playlist_videos"

    playlist_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("playlists.id", ondelete="CASCADE"), primary_key=True
    )
    video_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("videos.id", ondelete="CASCADE"), primary_key=True, index=True
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    added_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
