# app/services/common.py
from __future__ import annotations

"""
Shared persistence helpers for the resource services.

- `update_fields`: explicit `UPDATE … SET` for a patch, returning the fresh row
  (no mutate-then-save on live ORM objects).
- `insert_unique`: add + commit, mapping a unique-constraint hit to 409.
- `paginate_params`: clamp page / limit query values.
"""

from typing import Any, Mapping, Optional, Tuple, Type, TypeVar
from uuid import UUID

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ConflictException, NotFoundException
from app.db.base_class import Base

ModelT = TypeVar("ModelT", bound=Base)

MAX_PAGE_SIZE = 100


async def update_fields(
    db: AsyncSession,
    model: Type[ModelT],
    obj_id: UUID,
    patch: Mapping[str, Any],
    *,
    conflict_message: str = "Resource already exists",
) -> ModelT:
    """Apply `patch` to one row and return its new state."""
    if patch:
        try:
            result = await db.execute(
                update(model)
                .where(model.id == obj_id)
                .values(**patch)
                .execution_options(synchronize_session=False)
            )
            await db.commit()
        except IntegrityError:
            await db.rollback()
            raise ConflictException(conflict_message)
        if result.rowcount == 0:
            raise NotFoundException("Resource not found")
    obj = await db.get(model, obj_id, populate_existing=True)
    if obj is None:
        raise NotFoundException("Resource not found")
    return obj


async def insert_unique(db: AsyncSession, obj: ModelT, *, conflict_message: str) -> ModelT:
    """Persist a new row; unique-constraint violations become 409."""
    db.add(obj)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictException(conflict_message)
    return obj


def paginate_params(page: Optional[int], limit: Optional[int], *, default_limit: int = 10) -> Tuple[int, int]:
    page = max(1, int(page or 1))
    limit = min(MAX_PAGE_SIZE, max(1, int(limit or default_limit)))
    return page, limit


__all__ = ["update_fields", "insert_unique", "paginate_params", "MAX_PAGE_SIZE"]
