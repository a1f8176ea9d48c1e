# app/api/v1/routers/comments.py
from __future__ import annotations

"""
Comments API · VidTube
======================

GET    /comments/{videoId}      paginated, oldest first (owner + like state)
POST   /comments/{videoId}      add a comment
PATCH  /comments/c/{commentId}  owner only
DELETE /comments/c/{commentId}  owner only
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.dependencies import get_current_user, parse_uuid
from app.core.exceptions import NotFoundException
from app.db.models import Video
from app.db.models.user import User
from app.db.session import get_async_db
from app.schemas.common import ApiResponse, Page, ok
from app.schemas.engagement import CommentIn, CommentOut, CommentView
from app.services import comment_service, views
from app.services.common import paginate_params

router = APIRouter(prefix="/comments", tags=["Comments"])


@router.get("/{video_id}", response_model=ApiResponse[Page[CommentView]], summary="List video comments")
async def list_comments(
    video_id: str,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    vid = parse_uuid(video_id, "video id")
    visible = await db.execute(select(Video.is_published, Video.owner_id).where(Video.id == vid))
    row = visible.first()
    if row is None or (not row.is_published and row.owner_id != user.id):
        raise NotFoundException("Video not found")

    page, limit = paginate_params(page, limit)
    comments = await views.video_comments(db, vid, user.id, page=page, limit=limit)
    return ok(comments, "Comments fetched successfully")


@router.post(
    "/{video_id}",
    response_model=ApiResponse[CommentOut],
    status_code=status.HTTP_201_CREATED,
    summary="Add a comment",
)
async def add_comment(
    video_id: str,
    payload: CommentIn,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    comment = await comment_service.add_comment(db, user, parse_uuid(video_id, "video id"), payload.content)
    return ok(CommentOut.model_validate(comment), "Comment added successfully", status.HTTP_201_CREATED)


@router.patch("/c/{comment_id}", response_model=ApiResponse[CommentOut], summary="Edit a comment")
async def update_comment(
    comment_id: str,
    payload: CommentIn,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    comment = await comment_service.update_comment(db, user, parse_uuid(comment_id, "comment id"), payload.content)
    return ok(CommentOut.model_validate(comment), "Comment updated successfully")


@router.delete("/c/{comment_id}", response_model=ApiResponse[Dict[str, Any]], summary="Delete a comment")
async def delete_comment(
    comment_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    await comment_service.delete_comment(db, user, parse_uuid(comment_id, "comment id"))
    return ok({}, "Comment deleted successfully")


__all__ = ["router"]
