# app/api/v1/routers/videos.py
from __future__ import annotations

"""
Videos API · VidTube
====================

GET    /videos                          feed (query, userId, sortBy, sortType, page, limit)
POST   /videos                          publish (multipart: title, description, videoFile, thumbnail)
GET    /videos/{videoId}                detail; records a view + watch-history entry
PATCH  /videos/{videoId}                owner: title / description / thumbnail
DELETE /videos/{videoId}                owner
PATCH  /videos/toggle/publish/{videoId} owner: flip visibility

Unpublished videos are visible to their owner only.
"""

from typing import Any, Dict, Literal, Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import Settings
from app.core.dependencies import get_app_settings, get_current_user, get_uploader, parse_uuid
from app.core.exceptions import NotFoundException
from app.db.models.user import User
from app.db.session import get_async_db
from app.schemas.common import ApiResponse, Page, ok
from app.schemas.video import VideoDetailOut, VideoOut, VideoWithOwner
from app.services import video_service, views
from app.services.common import paginate_params
from app.services.upload_service import Uploader

router = APIRouter(prefix="/videos", tags=["Videos"])


@router.get("", response_model=ApiResponse[Page[VideoWithOwner]], summary="List videos")
async def list_videos(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1),
    query: Optional[str] = Query(None, max_length=200),
    sort_by: Literal["createdAt", "views", "duration", "title"] = Query("createdAt", alias="sortBy"),
    sort_type: Literal["asc", "desc"] = Query("desc", alias="sortType"),
    user_id: Optional[str] = Query(None, alias="userId"),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    page, limit = paginate_params(page, limit)
    owner_id = parse_uuid(user_id, "user id") if user_id else None
    feed = await views.video_feed(
        db,
        viewer_id=user.id,
        query=query,
        owner_id=owner_id,
        sort_by=sort_by,
        sort_type=sort_type,
        page=page,
        limit=limit,
    )
    return ok(feed, "Videos fetched successfully")


@router.post(
    "",
    response_model=ApiResponse[VideoOut],
    status_code=status.HTTP_201_CREATED,
    summary="Publish a video",
)
async def publish_video(
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    video_file: Optional[UploadFile] = File(None, alias="videoFile"),
    thumbnail: Optional[UploadFile] = File(None),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
    settings: Settings = Depends(get_app_settings),
    uploader: Uploader = Depends(get_uploader),
):
    video = await video_service.publish_video(
        db,
        settings,
        uploader,
        user,
        title=title,
        description=description,
        video_file=video_file,
        thumbnail=thumbnail,
    )
    return ok(VideoOut.model_validate(video), "Video published successfully", status.HTTP_201_CREATED)


@router.get("/{video_id}", response_model=ApiResponse[VideoDetailOut], summary="Video detail")
async def get_video(
    video_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    vid = parse_uuid(video_id, "video id")

    # [Step 1] Visible to this viewer?
    detail = await views.video_detail(db, vid, user.id)
    if detail is None:
        raise NotFoundException("Video not found")

    # [Step 2] Count the view + watch history, then reflect it in the payload
    await video_service.record_view(db, user.id, vid)
    detail["views"] = int(detail["views"] or 0) + 1
    return ok(detail, "Video fetched successfully")


@router.patch("/{video_id}", response_model=ApiResponse[VideoOut], summary="Update a video")
async def update_video(
    video_id: str,
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    thumbnail: Optional[UploadFile] = File(None),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
    settings: Settings = Depends(get_app_settings),
    uploader: Uploader = Depends(get_uploader),
):
    video = await video_service.update_video(
        db,
        settings,
        uploader,
        user,
        parse_uuid(video_id, "video id"),
        title=title,
        description=description,
        thumbnail=thumbnail,
    )
    return ok(VideoOut.model_validate(video), "Video updated successfully")


@router.delete("/{video_id}", response_model=ApiResponse[Dict[str, Any]], summary="Delete a video")
async def delete_video(
    video_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    await video_service.delete_video(db, user, parse_uuid(video_id, "video id"))
    return ok({}, "Video deleted successfully")


@router.patch("/toggle/publish/{video_id}", response_model=ApiResponse[VideoOut], summary="Toggle publish")
async def toggle_publish(
    video_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    video = await video_service.toggle_publish(db, user, parse_uuid(video_id, "video id"))
    return ok(VideoOut.model_validate(video), "Publish status toggled successfully")


__all__ = ["router"]
