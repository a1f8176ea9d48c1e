# app/api/v1/routers/likes.py
from __future__ import annotations

"""
Likes API · VidTube
===================

POST /likes/toggle/v/{videoId}    toggle a like on a video
POST /likes/toggle/c/{commentId}  toggle a like on a comment
POST /likes/toggle/t/{tweetId}    toggle a like on a tweet
GET  /likes/videos                videos the caller liked (most recent first)
"""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.dependencies import get_current_user, parse_uuid
from app.db.models.user import User
from app.db.session import get_async_db
from app.schemas.common import ApiResponse, ok
from app.schemas.engagement import LikeToggleOut
from app.schemas.video import LikedVideoOut
from app.services import views
from app.services.like_service import toggle_like

router = APIRouter(prefix="/likes", tags=["Likes"])


async def _toggle(db: AsyncSession, user: User, kind: str, raw_id: str):
    is_liked = await toggle_like(db, user, kind, parse_uuid(raw_id, f"{kind} id"))
    message = f"{kind.capitalize()} liked successfully" if is_liked else f"{kind.capitalize()} unliked successfully"
    return ok(LikeToggleOut(is_liked=is_liked), message)


@router.post("/toggle/v/{video_id}", response_model=ApiResponse[LikeToggleOut], summary="Toggle video like")
async def toggle_video_like(
    video_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    return await _toggle(db, user, "video", video_id)


@router.post("/toggle/c/{comment_id}", response_model=ApiResponse[LikeToggleOut], summary="Toggle comment like")
async def toggle_comment_like(
    comment_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    return await _toggle(db, user, "comment", comment_id)


@router.post("/toggle/t/{tweet_id}", response_model=ApiResponse[LikeToggleOut], summary="Toggle tweet like")
async def toggle_tweet_like(
    tweet_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    return await _toggle(db, user, "tweet", tweet_id)


@router.get("/videos", response_model=ApiResponse[List[LikedVideoOut]], summary="Liked videos")
async def liked_videos(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    videos = await views.liked_videos(db, user.id)
    return ok(videos, "Liked videos fetched successfully")


__all__ = ["router"]
