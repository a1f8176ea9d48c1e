# tests/test_db/test_migrations.py

from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, inspect

from app.db.base import Base

ROOT = Path(__file__).resolve().parents[2]


def _alembic(url: str) -> Config:
    cfg = Config(str(ROOT / "alembic.ini"))
    cfg.set_main_option("script_location", str(ROOT / "alembic"))
    cfg.set_main_option("sqlalchemy.url", url)
    cfg.attributes["configure_logger"] = False
    return cfg


def _columns(db_file: Path) -> dict:
    engine = create_engine(f"sqlite:///{db_file}")
    try:
        insp = inspect(engine)
        return {t: {c["name"] for c in insp.get_columns(t)} for t in insp.get_table_names()}
    finally:
        engine.dispose()


def test_upgrade_matches_models_and_downgrade_empties(tmp_path: Path):
    db_file = tmp_path / "migrate.db"
    cfg = _alembic(f"sqlite+aiosqlite:///{db_file}")

    command.upgrade(cfg, "head")

    schema = _columns(db_file)
    for name, table in Base.metadata.tables.items():
        assert schema.get(name) == {c.name for c in table.columns}, name

    command.downgrade(cfg, "base")

    assert set(_columns(db_file)) == {"alembic_version"}
