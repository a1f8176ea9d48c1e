# app/api/v1/routers/playlists.py
from __future__ import annotations

"""
Playlists API · VidTube
=======================

POST   /playlists                          create (name unique per owner)
GET    /playlists/user/{userId}            a user's playlists, resolved
GET    /playlists/{playlistId}             playlist detail with totals
PATCH  /playlists/{playlistId}             owner: name / description
DELETE /playlists/{playlistId}             owner
PATCH  /playlists/add/{videoId}/{playlistId}     owner: append (idempotent)
PATCH  /playlists/remove/{videoId}/{playlistId}  owner: remove
"""

from typing import Any, Dict, List
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.dependencies import get_current_user, parse_uuid
from app.core.exceptions import NotFoundException
from app.db.models.user import User
from app.db.session import get_async_db
from app.schemas.common import ApiResponse, ok
from app.schemas.playlist import PlaylistCreate, PlaylistOut, PlaylistUpdate, PlaylistView
from app.services import playlist_service, views
from app.services.ownership import get_or_404

router = APIRouter(prefix="/playlists", tags=["Playlists"])


async def _detail(db: AsyncSession, playlist_id: UUID, viewer_id: UUID) -> Dict[str, Any]:
    playlist = await views.playlist_detail(db, playlist_id, viewer_id)
    if playlist is None:
        raise NotFoundException("Playlist not found")
    return playlist


@router.post("", response_model=ApiResponse[PlaylistOut], status_code=status.HTTP_201_CREATED, summary="Create playlist")
async def create_playlist(
    payload: PlaylistCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    playlist = await playlist_service.create_playlist(db, user, name=payload.name, description=payload.description)
    return ok(PlaylistOut.model_validate(playlist), "Playlist created successfully", status.HTTP_201_CREATED)


@router.get("/user/{user_id}", response_model=ApiResponse[List[PlaylistView]], summary="A user's playlists")
async def user_playlists(
    user_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    owner_id = parse_uuid(user_id, "user id")
    await get_or_404(db, User, owner_id, resource="user")
    playlists = await views.user_playlists(db, owner_id, user.id)
    return ok(playlists, "User playlists fetched successfully")


@router.get("/{playlist_id}", response_model=ApiResponse[PlaylistView], summary="Playlist detail")
async def get_playlist(
    playlist_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    playlist = await _detail(db, parse_uuid(playlist_id, "playlist id"), user.id)
    return ok(playlist, "Playlist fetched successfully")


@router.patch("/{playlist_id}", response_model=ApiResponse[PlaylistOut], summary="Update playlist")
async def update_playlist(
    playlist_id: str,
    payload: PlaylistUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    playlist = await playlist_service.update_playlist(
        db,
        user,
        parse_uuid(playlist_id, "playlist id"),
        name=payload.name,
        description=payload.description,
    )
    return ok(PlaylistOut.model_validate(playlist), "Playlist updated successfully")


@router.delete("/{playlist_id}", response_model=ApiResponse[Dict[str, Any]], summary="Delete playlist")
async def delete_playlist(
    playlist_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    await playlist_service.delete_playlist(db, user, parse_uuid(playlist_id, "playlist id"))
    return ok({}, "Playlist deleted successfully")


@router.patch("/add/{video_id}/{playlist_id}", response_model=ApiResponse[PlaylistView], summary="Add video")
async def add_video(
    video_id: str,
    playlist_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    pid = parse_uuid(playlist_id, "playlist id")
    await playlist_service.add_video(db, user, pid, parse_uuid(video_id, "video id"))
    return ok(await _detail(db, pid, user.id), "Video added to playlist successfully")


@router.patch("/remove/{video_id}/{playlist_id}", response_model=ApiResponse[PlaylistView], summary="Remove video")
async def remove_video(
    video_id: str,
    playlist_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    pid = parse_uuid(playlist_id, "playlist id")
    await playlist_service.remove_video(db, user, pid, parse_uuid(video_id, "video id"))
    return ok(await _detail(db, pid, user.id), "Video removed from playlist successfully")


__all__ = ["router"]
