# app/schemas/common.py
from __future__ import annotations

"""
Shared schema pieces · VidTube
==============================

- `CamelModel`: every API model renders camelCase and accepts both camelCase
  and snake_case on input.
- `ApiResponse[T]`: the success envelope `{statusCode, data, message, success}`.
- `Page[T]`: paginated list payload.
- `OwnerOut`: the public owner projection nested into videos, comments, etc.
"""

from typing import Any, Generic, List, Optional, TypeVar
from uuid import UUID

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# ──────────────── Envelope ────────────────
class ApiResponse(CamelModel, Generic[T]):
    status_code: int
    data: Optional[T] = None
    message: str = "Success"
    success: bool = True


def ok(data: Any = None, message: str = "Success", status_code: int = 200) -> ApiResponse[Any]:
    """Build a success envelope (`success` follows the status code)."""
    return ApiResponse[Any](
        status_code=status_code,
        data=data,
        message=message,
        success=status_code < 400,
    )


# ──────────────── Pagination ────────────────
class Page(CamelModel, Generic[T]):
    items: List[T]
    total: int
    page: int
    limit: int
    total_pages: int


# ──────────────── Projections ────────────────
class OwnerOut(CamelModel):
    id: UUID
    username: str
    fullname: str
    avatar: Optional[str] = None


__all__ = ["CamelModel", "ApiResponse", "ok", "Page", "OwnerOut"]
