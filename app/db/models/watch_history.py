# app/db/models/watch_history.py
from __future__ import annotations

"""
🕘 VidTube · WatchHistory (user ↔ video, most recent first)
===========================================================

Composite PK (user_id, video_id): re-watching bumps `watched_at` instead of
adding a duplicate, so the ordered history holds each video once.
"""

from datetime import datetime
import uuid

from sqlalchemy import DateTime, ForeignKey, Index, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base_class import Base, utcnow


class WatchHistory(Base):
    __tablename__ = "watch_history"

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True
    )
    video_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("videos.id", ondelete="CASCADE"), primary_key=True
    )
    watched_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (
        Index("ix_watch_history_user_watched", "user_id", "watched_at"),
    )
