# app/services/playlist_service.py
from __future__ import annotations

"""
📃 VidTube · Playlist writes
============================

- Names are unique per owner (constraint → 409).
- Entries are ordered by `position`; new entries go to the end.
- Adding a video that is already listed is a no-op; so is removing one that
  is not listed.
- Only videos the caller can see (published, or their own) can be added.
"""

from typing import Any, Dict, Optional
from uuid import UUID

from loguru import logger
from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import BadRequestException
from app.db.models import Playlist, PlaylistVideo, Video
from app.db.models.user import User
from app.services.common import insert_unique, update_fields
from app.services.ownership import get_or_404, get_owned_or_404, get_visible_video_or_404

NAME_TAKEN = "A playlist with this name already exists"


def _name(value: str) -> str:
    name = (value or "").strip()
    if not name:
        raise BadRequestException("Playlist name is required")
    return name


async def create_playlist(db: AsyncSession, user: User, *, name: str, description: str = "") -> Playlist:
    playlist = Playlist(name=_name(name), description=(description or "").strip(), owner_id=user.id)
    return await insert_unique(db, playlist, conflict_message=NAME_TAKEN)


async def update_playlist(
    db: AsyncSession,
    user: User,
    playlist_id: UUID,
    *,
    name: Optional[str] = None,
    description: Optional[str] = None,
) -> Playlist:
    await get_owned_or_404(db, Playlist, playlist_id, user, resource="playlist")
    patch: Dict[str, Any] = {}
    if name is not None:
        patch["name"] = _name(name)
    if description is not None:
        patch["description"] = description.strip()
    return await update_fields(db, Playlist, playlist_id, patch, conflict_message=NAME_TAKEN)


async def delete_playlist(db: AsyncSession, user: User, playlist_id: UUID) -> None:
    await get_owned_or_404(db, Playlist, playlist_id, user, resource="playlist")
    await db.execute(delete(Playlist).where(Playlist.id == playlist_id).execution_options(synchronize_session=False))
    await db.commit()
    logger.info(f"Playlist deleted | playlist_id={playlist_id} | owner_id={user.id}")


async def add_video(db: AsyncSession, user: User, playlist_id: UUID, video_id: UUID) -> None:
    # [Step 1] Existence + ownership of the playlist, then the video
    await get_owned_or_404(db, Playlist, playlist_id, user, resource="playlist")
    await get_visible_video_or_404(db, video_id, user)

    # [Step 2] Idempotent: already listed → nothing to do
    listed = await db.execute(
        select(PlaylistVideo.video_id).where(
            PlaylistVideo.playlist_id == playlist_id,
            PlaylistVideo.video_id == video_id,
        )
    )
    if listed.first() is not None:
        return

    # [Step 3] Append at the end
    last = await db.execute(
        select(func.coalesce(func.max(PlaylistVideo.position), -1)).where(PlaylistVideo.playlist_id == playlist_id)
    )
    entry = PlaylistVideo(playlist_id=playlist_id, video_id=video_id, position=int(last.scalar_one()) + 1)
    await insert_unique(db, entry, conflict_message="Video already in playlist")


async def remove_video(db: AsyncSession, user: User, playlist_id: UUID, video_id: UUID) -> None:
    await get_owned_or_404(db, Playlist, playlist_id, user, resource="playlist")
    await get_or_404(db, Video, video_id, resource="video")
    await db.execute(
        delete(PlaylistVideo)
        .where(PlaylistVideo.playlist_id == playlist_id, PlaylistVideo.video_id == video_id)
        .execution_options(synchronize_session=False)
    )
    await db.commit()


__all__ = ["create_playlist", "update_playlist", "delete_playlist", "add_video", "remove_video"]
