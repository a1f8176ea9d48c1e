# app/services/video_service.py
from __future__ import annotations

"""
🎬 VidTube · Video service
==========================

Writes on videos plus the "watch" side effect of opening one.

- publish:     both media parts are checked **before** any upload or insert
- update:      title / description / thumbnail (owner only)
- delete:      owner only; comments, likes and playlist entries cascade
- toggle:      flip `is_published` (owner only)
- record_view: bump `views` and move the video to the front of the viewer's
               watch history (one row per user + video)
"""

from pathlib import Path
from typing import Any, Dict, Optional
from uuid import UUID

from fastapi import UploadFile
from loguru import logger
from sqlalchemy import delete, not_, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import Settings
from app.core.exceptions import BadRequestException
from app.db.base_class import utcnow
from app.db.models import Video, WatchHistory
from app.db.models.user import User
from app.services.common import update_fields
from app.services.ownership import get_owned_or_404
from app.services.upload_service import Uploader, has_file, upload_required


def _text(value: Optional[str]) -> str:
    return (value or "").strip()


async def publish_video(
    db: AsyncSession,
    settings: Settings,
    uploader: Uploader,
    owner: User,
    *,
    title: Optional[str],
    description: Optional[str],
    video_file: Optional[UploadFile],
    thumbnail: Optional[UploadFile],
) -> Video:
    # [Step 1] Validate everything up front (nothing is uploaded or stored on failure)
    title, description = _text(title), _text(description)
    if not title or not description:
        raise BadRequestException("Title and description are required")
    if not has_file(video_file) or not has_file(thumbnail):
        raise BadRequestException("Video file and thumbnail are required")

    # [Step 2] Upload media
    temp_dir = Path(settings.UPLOAD_TEMP_DIR)
    video_result = await upload_required(uploader, video_file, temp_dir, label="Video")
    thumb_result = await upload_required(uploader, thumbnail, temp_dir, label="Thumbnail")

    # [Step 3] Persist
    video = Video(
        title=title,
        description=description,
        video_file=video_result.url,
        thumbnail=thumb_result.url,
        duration=float(video_result.duration or 0.0),
        owner_id=owner.id,
    )
    db.add(video)
    await db.commit()
    logger.info(f"Video published | video_id={video.id} | owner_id={owner.id}")
    return video


async def update_video(
    db: AsyncSession,
    settings: Settings,
    uploader: Uploader,
    user: User,
    video_id: UUID,
    *,
    title: Optional[str] = None,
    description: Optional[str] = None,
    thumbnail: Optional[UploadFile] = None,
) -> Video:
    await get_owned_or_404(db, Video, video_id, user, resource="video")

    patch: Dict[str, Any] = {}
    if title is not None:
        if not title.strip():
            raise BadRequestException("Title cannot be blank")
        patch["title"] = title.strip()
    if description is not None:
        if not description.strip():
            raise BadRequestException("Description cannot be blank")
        patch["description"] = description.strip()
    if not patch and not has_file(thumbnail):
        raise BadRequestException("Nothing to update")

    if has_file(thumbnail):
        result = await upload_required(uploader, thumbnail, Path(settings.UPLOAD_TEMP_DIR), label="Thumbnail")
        patch["thumbnail"] = result.url

    return await update_fields(db, Video, video_id, patch)


async def delete_video(db: AsyncSession, user: User, video_id: UUID) -> None:
    await get_owned_or_404(db, Video, video_id, user, resource="video")
    await db.execute(delete(Video).where(Video.id == video_id).execution_options(synchronize_session=False))
    await db.commit()
    logger.info(f"Video deleted | video_id={video_id} | owner_id={user.id}")


async def toggle_publish(db: AsyncSession, user: User, video_id: UUID) -> Video:
    await get_owned_or_404(db, Video, video_id, user, resource="video")
    await db.execute(
        update(Video)
        .where(Video.id == video_id)
        .values(is_published=not_(Video.is_published))
        .execution_options(synchronize_session=False)
    )
    await db.commit()
    video = await db.get(Video, video_id, populate_existing=True)
    logger.info(f"Publish toggled | video_id={video_id} | is_published={video.is_published}")
    return video


def _upsert_watch(dialect: str, viewer_id: UUID, video_id: UUID):
    """INSERT ... ON CONFLICT (user_id, video_id) DO UPDATE SET watched_at."""
    insert = sqlite_insert if dialect == "sqlite" else pg_insert
    stmt = insert(WatchHistory).values(user_id=viewer_id, video_id=video_id, watched_at=utcnow())
    return stmt.on_conflict_do_update(
        index_elements=[WatchHistory.user_id, WatchHistory.video_id],
        set_={"watched_at": stmt.excluded.watched_at},
    )


async def record_view(db: AsyncSession, viewer_id: UUID, video_id: UUID) -> None:
    """Count one view and refresh the viewer's watch-history entry."""
    await db.execute(
        update(Video)
        .where(Video.id == video_id)
        .values(views=Video.views + 1, updated_at=Video.updated_at)
        .execution_options(synchronize_session=False)
    )
    # Single statement, so two first views from one viewer cannot collide
    await db.execute(_upsert_watch(db.get_bind().dialect.name, viewer_id, video_id))
    await db.commit()


__all__ = ["publish_video", "update_video", "delete_video", "toggle_publish", "record_view"]
