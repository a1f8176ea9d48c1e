# app/db/models/tweet.py
from __future__ import annotations

"""🐦 VidTube · Tweet (short text post on a channel)."""

import uuid

from sqlalchemy import ForeignKey, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base_class import Base, TimestampMixin, UUIDPKMixin


class Tweet(UUIDPKMixin, TimestampMixin, Base):
    __tablename__ = "tweets"

    content: Mapped[str] = mapped_column(Text, nullable=False)
    owner_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
