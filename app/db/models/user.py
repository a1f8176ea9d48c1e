# app/db/models/user.py
from __future__ import annotations

"""
👤 VidTube · User (account + channel)
=====================================

A user is both an account and a channel (the owner side of videos, tweets
and subscriptions).

Why this design?
----------------
• **Lowercased, unique username** (check + unique constraint) and unique email.
• **Secrets never leave the row**: `hashed_password` (bcrypt) and
  `refresh_token_hash` (SHA-256 of the live renewal token) are deferred by
  the auth guard and excluded from every response schema.
• **Watch history** lives in `watch_history` (ordered by `watched_at`).
"""

from typing import Optional

from sqlalchemy import CheckConstraint, String
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base_class import Base, TimestampMixin, UUIDPKMixin


class User(UUIDPKMixin, TimestampMixin, Base):
    __tablename__ = "users"

    username: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    fullname: Mapped[str] = mapped_column(String(120), nullable=False)

    avatar: Mapped[str] = mapped_column(String(1024), nullable=False)
    cover_image: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)

    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)
    refresh_token_hash: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)

    __table_args__ = (
        CheckConstraint("username = lower(username)", name="username_lowercase"),
        CheckConstraint("email = lower(email)", name="email_lowercase"),
    )
