# app/services/ownership.py
from __future__ import annotations

"""
VidTube · Ownership policy
==========================

Order of checks for every owner-restricted write:

    1) load the resource          → 404 when absent
    2) compare owner id to caller → 403 when different
    3) only then apply the change

Ids are `uuid.UUID` on both sides and compared by value.

Unpublished videos exist only for their owner: anyone else gets the same
404 as for a missing id.
"""

from typing import Type, TypeVar
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ForbiddenException, NotFoundException
from app.db.base_class import Base
from app.db.models.user import User
from app.db.models.video import Video

ModelT = TypeVar("ModelT", bound=Base)


def assert_owner(owner_id: UUID, user: User, *, resource: str) -> None:
    """Raise 403 unless `user` owns the resource."""
    if owner_id != user.id:
        raise ForbiddenException(f"You are not allowed to modify this {resource}")


async def get_or_404(db: AsyncSession, model: Type[ModelT], obj_id: UUID, *, resource: str) -> ModelT:
    obj = await db.get(model, obj_id, populate_existing=True)
    if obj is None:
        raise NotFoundException(f"{resource.capitalize()} not found")
    return obj


async def get_owned_or_404(
    db: AsyncSession,
    model: Type[ModelT],
    obj_id: UUID,
    user: User,
    *,
    resource: str,
    owner_attr: str = "owner_id",
) -> ModelT:
    """Existence first, ownership second."""
    obj = await get_or_404(db, model, obj_id, resource=resource)
    assert_owner(getattr(obj, owner_attr), user, resource=resource)
    return obj


async def get_visible_video_or_404(db: AsyncSession, video_id: UUID, user: User) -> Video:
    """Load a video the caller may see: published, or their own draft."""
    video = await get_or_404(db, Video, video_id, resource="video")
    if not video.is_published and video.owner_id != user.id:
        raise NotFoundException("Video not found")
    return video


__all__ = ["assert_owner", "get_or_404", "get_owned_or_404", "get_visible_video_or_404"]
