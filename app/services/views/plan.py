# app/services/views/plan.py
from __future__ import annotations

"""
VidTube · ViewPlan (typed join / filter / project steps)
========================================================

Read models are described as a short chain of steps and compiled to one
SQLAlchemy `Select`, so the same plan runs on PostgreSQL or SQLite:

    plan = (
        ViewPlan(Video, video_fields(Video))                 # scope + projection
        .lookup("owner", owner, Video.owner_id == owner.id,  # left-outer join,
                owner_fields(owner))                         #   nested under "owner"
        .count("likes_count", Like, Like.video_id == Video.id)
        .match(Video.is_published.is_(True))
        .sort(Video.created_at.desc())
        .page(1, 10)
    )
    rows = await plan.all(db)      # list[dict] with row["owner"] = {...} | None

Lookup columns are labeled `<alias>__<field>`; `collapse()` folds them back
into a nested dict and turns an all-NULL partner (no match) into `None`.
Only the listed fields are ever selected, so secrets cannot leak through a
plan that does not name them.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from sqlalchemy import Select, exists, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql.elements import ColumnElement

SEP = "__"


@dataclass
class _Join:
    target: Any
    on: ColumnElement
    outer: bool


@dataclass
class ViewPlan:
    """Builder for a single read-model query."""

    root: Any
    fields: Mapping[str, Any] = field(default_factory=dict)
    _columns: List[Any] = field(default_factory=list, init=False)
    _joins: List[_Join] = field(default_factory=list, init=False)
    _where: List[ColumnElement] = field(default_factory=list, init=False)
    _order: List[Any] = field(default_factory=list, init=False)
    _group: List[Any] = field(default_factory=list, init=False)
    _nested: List[str] = field(default_factory=list, init=False)
    _limit: Optional[int] = field(default=None, init=False)
    _offset: Optional[int] = field(default=None, init=False)

    def __post_init__(self) -> None:
        self._columns = [col.label(name) for name, col in self.fields.items()]

    # ── Steps ───────────────────────────────────────────────────────────────
    def match(self, *criteria: ColumnElement) -> "ViewPlan":
        self._where.extend(criteria)
        return self

    def join(self, target: Any, on: ColumnElement, *, outer: bool = False) -> "ViewPlan":
        """Join without projecting anything (used for scoping)."""
        self._joins.append(_Join(target, on, outer))
        return self

    def lookup(
        self,
        alias: str,
        target: Any,
        on: ColumnElement,
        fields: Mapping[str, Any],
        *,
        outer: bool = True,
    ) -> "ViewPlan":
        """Join `target` and nest `fields` under `alias` (single expected match)."""
        self._joins.append(_Join(target, on, outer))
        self._columns.extend(col.label(f"{alias}{SEP}{name}") for name, col in fields.items())
        self._nested.append(alias)
        return self

    def count(self, label: str, model: Any, *criteria: ColumnElement) -> "ViewPlan":
        """Correlated `COUNT(*)` of `model` rows matching `criteria`."""
        sub = select(func.count()).select_from(model).where(*criteria).scalar_subquery()
        self._columns.append(sub.label(label))
        return self

    def exists(self, label: str, model: Any, *criteria: ColumnElement) -> "ViewPlan":
        """Correlated boolean: does any `model` row match `criteria`?"""
        self._columns.append(exists().select_from(model).where(*criteria).label(label))
        return self

    def project(self, **columns: Any) -> "ViewPlan":
        """Add computed columns to the root projection."""
        self._columns.extend(col.label(name) for name, col in columns.items())
        return self

    def group(self, *columns: Any) -> "ViewPlan":
        self._group.extend(columns)
        return self

    def sort(self, *order: Any) -> "ViewPlan":
        self._order.extend(order)
        return self

    def page(self, page: int, limit: int) -> "ViewPlan":
        self._limit = limit
        self._offset = (page - 1) * limit
        return self

    # ── Compilation ─────────────────────────────────────────────────────────
    def _from(self, stmt: Select) -> Select:
        stmt = stmt.select_from(self.root)
        for j in self._joins:
            stmt = stmt.join(j.target, j.on, isouter=j.outer)
        if self._where:
            stmt = stmt.where(*self._where)
        if self._group:
            stmt = stmt.group_by(*self._group)
        return stmt

    def to_select(self) -> Select:
        stmt = self._from(select(*self._columns))
        if self._order:
            stmt = stmt.order_by(*self._order)
        if self._limit is not None:
            stmt = stmt.limit(self._limit).offset(self._offset or 0)
        return stmt

    def count_select(self) -> Select:
        """`COUNT(*)` over the matched rows (ignores sort/paging)."""
        inner = self._from(select(*self._columns)).subquery()
        return select(func.count()).select_from(inner)

    # ── Execution ───────────────────────────────────────────────────────────
    def collapse(self, row: Mapping[str, Any]) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        nested: Dict[str, Dict[str, Any]] = {alias: {} for alias in self._nested}
        for key, value in row.items():
            alias, sep, name = key.partition(SEP)
            if sep and alias in nested:
                nested[alias][name] = value
            else:
                out[key] = value
        for alias, doc in nested.items():
            out[alias] = doc if any(v is not None for v in doc.values()) else None
        return out

    async def all(self, db: AsyncSession) -> List[Dict[str, Any]]:
        result = await db.execute(self.to_select())
        return [self.collapse(row) for row in result.mappings().all()]

    async def first(self, db: AsyncSession) -> Optional[Dict[str, Any]]:
        result = await db.execute(self.to_select().limit(1))
        row = result.mappings().first()
        return self.collapse(row) if row is not None else None

    async def total(self, db: AsyncSession) -> int:
        return int((await db.execute(self.count_select())).scalar_one() or 0)

    async def paginated(self, db: AsyncSession, page: int, limit: int) -> Tuple[List[Dict[str, Any]], int]:
        total = await self.total(db)
        items = await self.page(page, limit).all(db)
        return items, total


# ─────────────────────────────────────────────────────────────────────────────
# 🧾 Whitelisted projections
# ─────────────────────────────────────────────────────────────────────────────

def owner_fields(user: Any) -> Dict[str, Any]:
    """Public owner projection (never password / refresh token)."""
    return {
        "id": user.id,
        "username": user.username,
        "fullname": user.fullname,
        "avatar": user.avatar,
    }


def video_fields(video: Any) -> Dict[str, Any]:
    return {
        "id": video.id,
        "video_file": video.video_file,
        "thumbnail": video.thumbnail,
        "title": video.title,
        "description": video.description,
        "duration": video.duration,
        "views": video.views,
        "is_published": video.is_published,
        "owner_id": video.owner_id,
        "created_at": video.created_at,
        "updated_at": video.updated_at,
    }


def page_meta(items: Sequence[Any], total: int, page: int, limit: int) -> Dict[str, Any]:
    return {
        "items": list(items),
        "total": total,
        "page": page,
        "limit": limit,
        "total_pages": (total + limit - 1) // limit if limit else 0,
    }


__all__ = ["ViewPlan", "owner_fields", "video_fields", "page_meta"]
