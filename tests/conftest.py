# tests/conftest.py
"""
Global test bootstrap
- Test environment set BEFORE importing the app (module-level `app.main.app`
  builds settings from env on import)
- Rate limiting off, cookies not `secure` (plain http test client)
- Pulls in the shared fixtures (db, app, auth)
"""

from __future__ import annotations

import os
import tempfile
import warnings

from sqlalchemy.exc import SAWarning

# ──────────────────────────────────────────────────────────────────────────────
# 🌱 Test env
# ──────────────────────────────────────────────────────────────────────────────
os.environ.setdefault("ENV", "test")
os.environ.setdefault("ACCESS_TOKEN_SECRET", "test-access-secret")
os.environ.setdefault("REFRESH_TOKEN_SECRET", "test-refresh-secret")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("RATELIMIT_STORAGE_URI", "memory://")
os.environ.setdefault("COOKIE_SECURE", "false")
os.environ.setdefault("UPLOAD_TEMP_DIR", tempfile.mkdtemp(prefix="vidtube-temp-"))
os.environ.setdefault("MEDIA_ROOT", tempfile.mkdtemp(prefix="vidtube-media-"))
os.environ.setdefault("LOG_LEVEL", "WARNING")

warnings.filterwarnings("ignore", category=SAWarning)

# ──────────────────────────────────────────────────────────────────────────────
# 📦 Shared fixtures
# ──────────────────────────────────────────────────────────────────────────────
from tests.fixtures.db import *          # noqa: E402,F401,F403
from tests.fixtures.app import *         # noqa: E402,F401,F403
from tests.fixtures.auth import *        # noqa: E402,F401,F403
