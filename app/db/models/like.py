# app/db/models/like.py
from __future__ import annotations

"""
❤️ VidTube · Like (toggle on a video, comment or tweet)
=======================================================

Why this design?
----------------
• **Exactly one target**: a check constraint requires exactly one of
  `video_id` / `comment_id` / `tweet_id` to be set.
• **Toggle, not counter**: one unique constraint per target kind on
  (liked_by, target). NULL targets never collide, so each constraint only
  bites for its own kind. Two racing "like" requests cannot both insert.
"""

import uuid
from typing import Optional

from sqlalchemy import CheckConstraint, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base_class import Base, TimestampMixin, UUIDPKMixin

_ONE_TARGET = (
    "(CASE WHEN video_id IS NULL THEN 0 ELSE 1 END)"
    " + (CASE WHEN comment_id IS NULL THEN 0 ELSE 1 END)"
    " + (CASE WHEN tweet_id IS NULL THEN 0 ELSE 1 END) = 1"
)


class Like(UUIDPKMixin, TimestampMixin, Base):
    __tablename__ = "likes"

    video_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("videos.id", ondelete="CASCADE"), nullable=True, index=True
    )
    comment_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("comments.id", ondelete="CASCADE"), nullable=True, index=True
    )
    tweet_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("tweets.id", ondelete="CASCADE"), nullable=True, index=True
    )
    liked_by_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )

    __table_args__ = (
        CheckConstraint(_ONE_TARGET, name="exactly_one_target"),
        UniqueConstraint("liked_by_id", "video_id", name="uq_likes_liked_by_video"),
        UniqueConstraint("liked_by_id", "comment_id", name="uq_likes_liked_by_comment"),
        UniqueConstraint("liked_by_id", "tweet_id", name="uq_likes_liked_by_tweet"),
    )
