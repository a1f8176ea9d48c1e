# app/db/models/video.py
from __future__ import annotations

"""
🎬 VidTube · Video
==================

An uploaded video owned by a single user. Visibility is a publish flag, not
deletion: unpublished videos stay visible to their owner only.
"""

import uuid

from sqlalchemy import Boolean, CheckConstraint, Float, ForeignKey, Index, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base_class import Base, TimestampMixin, UUIDPKMixin


class Video(UUIDPKMixin, TimestampMixin, Base):
    __tablename__ = "videos"

    video_file: Mapped[str] = mapped_column(String(1024), nullable=False)
    thumbnail: Mapped[str] = mapped_column(String(1024), nullable=False)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    duration: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    views: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_published: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    owner_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )

    __table_args__ = (
        CheckConstraint("views >= 0", name="views_non_negative"),
        CheckConstraint("duration >= 0", name="duration_non_negative"),
        Index("ix_videos_published_created", "is_published", "created_at"),
    )
