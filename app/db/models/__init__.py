# app/db/models/__init__.py
"""
VidTube · ORM models
====================

Import every model here so `Base.metadata` knows all tables.
"""

from .user import User
from .video import Video
from .comment import Comment
from .tweet import Tweet
from .like import Like
from .subscription import Subscription
from .playlist import Playlist, PlaylistVideo
from .watch_history import WatchHistory

__all__ = [
    "User",
    "Video",
    "Comment",
    "Tweet",
    "Like",
    "Subscription",
    "Playlist",
    "PlaylistVideo",
    "WatchHistory",
]
