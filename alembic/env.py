"""
VidTube · Alembic environment

Target URL, first match wins:
    1) `sqlalchemy.url` set on the Alembic config (programmatic runs)
    2) `MIGRATIONS_DATABASE_URL` (one-off target, e.g. a staging copy)
    3) `Settings.DATABASE_URL`, already normalised to an async driver

Online runs go through an async engine; SQLite gets batch mode so ALTERs
work. Autogenerate drops revisions that would be empty.
"""

import asyncio
import os
from logging.config import fileConfig

from alembic import context
from sqlalchemy import pool
from sqlalchemy.ext.asyncio import create_async_engine

from app.core.config import get_settings
from app.db.base import Base

config = context.config

# Programmatic callers set `configure_logger=False` to keep their own logging
if config.config_file_name and config.attributes.get("configure_logger", True):
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def _database_url() -> str:
    return (
        config.get_main_option("sqlalchemy.url")
        or os.getenv("MIGRATIONS_DATABASE_URL")
        or get_settings().DATABASE_URL
    )


def _skip_empty_revisions(context_, revision, directives) -> None:
    if getattr(config.cmd_opts, "autogenerate", False) and directives[0].upgrade_ops.is_empty():
        directives[:] = []


def _configure(**kwargs) -> None:
    context.configure(
        target_metadata=target_metadata,
        compare_type=True,
        process_revision_directives=_skip_empty_revisions,
        **kwargs,
    )


# ───────────────────────────────────────────────
# 📴 Offline (emit SQL)
# ───────────────────────────────────────────────
def run_migrations_offline() -> None:
    _configure(url=_database_url(), literal_binds=True, dialect_opts={"paramstyle": "named"})
    with context.begin_transaction():
        context.run_migrations()


# ───────────────────────────────────────────────
# 🌐 Online (async engine)
# ───────────────────────────────────────────────
def _run_sync(connection) -> None:
    _configure(connection=connection, render_as_batch=connection.dialect.name == "sqlite")
    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online() -> None:
    engine = create_async_engine(_database_url(), poolclass=pool.NullPool)
    try:
        async with engine.connect() as connection:
            await connection.run_sync(_run_sync)
    finally:
        await engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
