# app/services/like_service.py
from __future__ import annotations

"""
❤️ VidTube · Like toggles
=========================

A like is a toggle, not a counter: one row per (liker, target). Toggling
deletes the row when present and inserts it otherwise. Two racing inserts
are settled by the unique constraints; the loser is rolled back with 409.
Someone else's unpublished video cannot be liked (404, as on read).
"""

from typing import Dict, Tuple, Type
from uuid import UUID

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.base_class import Base
from app.db.models import Comment, Like, Tweet, Video
from app.db.models.user import User
from app.services.common import insert_unique
from app.services.ownership import get_or_404, get_visible_video_or_404

# target kind → (model, Like column name)
TARGETS: Dict[str, Tuple[Type[Base], str]] = {
    "video": (Video, "video_id"),
    "comment": (Comment, "comment_id"),
    "tweet": (Tweet, "tweet_id"),
}


async def toggle_like(db: AsyncSession, user: User, kind: str, target_id: UUID) -> bool:
    """Flip the like state on a target; returns the new `is_liked`."""
    model, column = TARGETS[kind]
    if kind == "video":
        await get_visible_video_or_404(db, target_id, user)
    else:
        await get_or_404(db, model, target_id, resource=kind)

    like_col = getattr(Like, column)
    result = await db.execute(
        delete(Like)
        .where(like_col == target_id, Like.liked_by_id == user.id)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount:
        await db.commit()
        return False

    await insert_unique(
        db,
        Like(liked_by_id=user.id, **{column: target_id}),
        conflict_message="Like already recorded",
    )
    return True


__all__ = ["TARGETS", "toggle_like"]
