# tests/fixtures/app.py

"""
🧩 App Fixture:
- Builds the real app through `create_app(settings)` with test settings
- Points DB engine / sessions at the in-memory test database
- Swaps the media uploader for a recording fake
- Returns HTTP client fixture for integration tests
"""

from pathlib import Path
from typing import AsyncGenerator, List, Optional, Tuple

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from app.core.config import Settings
from app.db.session import get_async_db
from app.main import create_app
from app.services.token_service import TokenService
from app.services.upload_service import UploadResult
from tests.fixtures.db import get_override_get_db


class FakeUploader:
    """
    Records every upload call.

    `calls` holds `(path, existed_at_upload_time)`; set `fail = True` to make
    every upload report failure (`None`), like a refusing media service.
    """

    def __init__(self) -> None:
        self.calls: List[Tuple[Path, bool]] = []
        self.fail = False
        self.duration: Optional[float] = 12.5

    async def upload(self, local_path: Path) -> Optional[UploadResult]:
        self.calls.append((local_path, local_path.exists()))
        if self.fail:
            return None
        return UploadResult(
            url=f"https://media.test/{local_path.name}",
            duration=self.duration,
        )

    @property
    def paths(self) -> List[Path]:
        return [p for p, _ in self.calls]


@pytest.fixture()
def test_settings(tmp_path: Path) -> Settings:
    return Settings(
        ENV="test",
        ACCESS_TOKEN_SECRET="test-access-secret",
        REFRESH_TOKEN_SECRET="test-refresh-secret",
        DATABASE_URL="sqlite+aiosqlite://",
        RATE_LIMIT_ENABLED=False,
        COOKIE_SECURE=False,
        UPLOAD_TEMP_DIR=tmp_path / "temp",
        MEDIA_ROOT=tmp_path / "media",
        LOG_LEVEL="WARNING",
    )


@pytest.fixture()
def uploader() -> FakeUploader:
    return FakeUploader()


@pytest.fixture()
async def app(test_settings: Settings, db_engine, session_maker, uploader: FakeUploader) -> AsyncGenerator[FastAPI, None]:
    """
    🧪 Real application wiring with test-specific DB + uploader.
    """
    app = create_app(test_settings)
    default_engine = app.state.engine

    app.state.engine = db_engine
    app.state.session_maker = session_maker
    app.state.uploader = uploader

    # 🔁 Override DB dependency with the test engine's sessions
    app.dependency_overrides[get_async_db] = get_override_get_db(session_maker)

    yield app

    app.dependency_overrides.clear()
    await default_engine.dispose()


@pytest.fixture()
def token_service(app: FastAPI) -> TokenService:
    return app.state.token_service


@pytest.fixture()
async def async_client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """
    🌐 Provides an HTTP client for sending requests to the test app.
    """
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
