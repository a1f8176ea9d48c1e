# app/db/base.py
"""
VidTube · SQLAlchemy Base registry
==================================

Import all ORM models so their tables are registered on `Base.metadata`.
Used by Alembic autogeneration and by the test fixtures' `create_all`.

Tip: Keep this file import-only; no runtime logic.
"""

from app.db.base_class import Base

# ───────────────────────────────────────────────────────────────
# Accounts & channels
# ───────────────────────────────────────────────────────────────
from app.db.models.user import User
from app.db.models.subscription import Subscription
from app.db.models.watch_history import WatchHistory

# ───────────────────────────────────────────────────────────────
# Content & engagement
# ───────────────────────────────────────────────────────────────
from app.db.models.video import Video
from app.db.models.comment import Comment
from app.db.models.tweet import Tweet
from app.db.models.like import Like
from app.db.models.playlist import Playlist, PlaylistVideo

__all__ = [
    "Base",
    "User",
    "Subscription",
    "WatchHistory",
    "Video",
    "Comment",
    "Tweet",
    "Like",
    "Playlist",
    "PlaylistVideo",
]
