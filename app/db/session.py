# app/db/session.py
from __future__ import annotations

"""
VidTube · Database Engines & Session Dependencies

- `build_engine(settings)` / `build_session_maker(engine)` are called once by
  `create_app`; the results live on `app.state`.
- `get_async_db` is the FastAPI dependency handing one `AsyncSession` per
  request (tests override it).
- SQLite (aiosqlite) is supported for dev/tests: pool knobs are skipped and
  foreign keys are switched on per connection so ON DELETE CASCADE works.
"""

from typing import Any, AsyncGenerator, Dict

from fastapi import Request
from loguru import logger
from sqlalchemy import event, text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from app.core.config import Settings


def enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:  # pragma: no cover
    """`connect` listener: SQLite ships with foreign keys disabled."""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


# ─────────────────────────────────────────────────────────────
# ⚡ Engine & session factory
# ─────────────────────────────────────────────────────────────

def build_engine(settings: Settings) -> AsyncEngine:
    """Create the async engine for `settings.DATABASE_URL`."""
    kwargs: Dict[str, Any] = {"echo": settings.DB_ECHO, "pool_pre_ping": True}
    if not settings.is_sqlite:
        kwargs.update(
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW,
            pool_recycle=settings.DB_POOL_RECYCLE,
            pool_timeout=30,
        )
    engine = create_async_engine(settings.DATABASE_URL, **kwargs)
    if settings.is_sqlite:
        event.listen(engine.sync_engine, "connect", enable_sqlite_foreign_keys)
    return engine


def build_session_maker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


# ─────────────────────────────────────────────────────────────
# 🔌 Dependencies & probes
# ─────────────────────────────────────────────────────────────

async def get_async_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency that yields an async SQLAlchemy session."""
    session_maker: async_sessionmaker[AsyncSession] = request.app.state.session_maker
    async with session_maker() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


async def db_healthcheck(engine: AsyncEngine) -> bool:
    """Quick SELECT 1 to verify DB connectivity (used by /readyz)."""
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True
    except Exception:
        logger.exception("DB healthcheck failed")
        return False


__all__ = [
    "build_engine",
    "build_session_maker",
    "enable_sqlite_foreign_keys",
    "get_async_db",
    "db_healthcheck",
]
