# app/services/comment_service.py
from __future__ import annotations

"""💬 VidTube · Comment writes (reads live in `app.services.views`)."""

from uuid import UUID

from loguru import logger
from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import BadRequestException
from app.db.models import Comment
from app.db.models.user import User
from app.services.common import update_fields
from app.services.ownership import get_owned_or_404, get_visible_video_or_404


def _content(value: str) -> str:
    content = (value or "").strip()
    if not content:
        raise BadRequestException("Content is required")
    return content


async def add_comment(db: AsyncSession, user: User, video_id: UUID, content: str) -> Comment:
    content = _content(content)
    await get_visible_video_or_404(db, video_id, user)

    comment = Comment(content=content, video_id=video_id, owner_id=user.id)
    db.add(comment)
    await db.commit()
    return comment


async def update_comment(db: AsyncSession, user: User, comment_id: UUID, content: str) -> Comment:
    await get_owned_or_404(db, Comment, comment_id, user, resource="comment")
    return await update_fields(db, Comment, comment_id, {"content": _content(content)})


async def delete_comment(db: AsyncSession, user: User, comment_id: UUID) -> None:
    await get_owned_or_404(db, Comment, comment_id, user, resource="comment")
    await db.execute(delete(Comment).where(Comment.id == comment_id).execution_options(synchronize_session=False))
    await db.commit()
    logger.info(f"Comment deleted | comment_id={comment_id} | owner_id={user.id}")


__all__ = ["add_comment", "update_comment", "delete_comment"]
