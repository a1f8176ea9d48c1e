# app/main.py
from __future__ import annotations

"""
# VidTube API · Application Entrypoint (FastAPI)

ASGI application factory and lifecycle for the VidTube video-sharing backend.

## Design Goals
- Deterministic, testable **app factory** (`create_app(settings)`) with an
  explicit lifespan; everything built once lives on `app.state`:
  settings, DB engine + session factory, token service, uploader.
- Explicit **middleware order**:
  1) request id → 2) security headers → 3) CORS → 4) gzip → 5) rate limits.
- Centralized exception handling (one envelope for every error).

## Probes
- `/healthz`: liveness (process up).
- `/readyz`: readiness (quick DB `SELECT 1`).
- `/api/v1/healthcheck`: enveloped healthcheck.
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI
from loguru import logger
from starlette.middleware.gzip import GZipMiddleware
from starlette.responses import JSONResponse

from app.api.v1.routers import build_v1_router
from app.core.config import Settings, get_settings
from app.core.exception_handlers import install_exception_handlers
from app.core.limiter import install_rate_limiter, rate_limit_exempt
from app.core.logger import configure_logging
from app.db.session import build_engine, build_session_maker, db_healthcheck
from app.middleware.request_id import RequestIDMiddleware
from app.security_headers import configure_cors, install_security
from app.services.token_service import TokenService
from app.services.upload_service import build_uploader


# ─────────────────────────────────────────────────────────────────────────────
# 🔄 Lifespan: startup & shutdown
# ─────────────────────────────────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Startup:
        - Log a startup banner.
    Shutdown:
        - Dispose the DB engine.
    """
    settings: Settings = app.state.settings
    logger.info(f"✅ {settings.PROJECT_NAME} starting up | env={settings.ENV}")
    try:
        yield
    finally:
        await app.state.engine.dispose()
        logger.info("🛑 Database engine disposed")
        logger.info(f"🛑 {settings.PROJECT_NAME} shutting down")


# ─────────────────────────────────────────────────────────────────────────────
# 🏗️ App factory
# ─────────────────────────────────────────────────────────────────────────────
def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build and configure the FastAPI app instance.

    Args:
        settings: explicit configuration (tests pass their own); defaults to
            the process-wide `get_settings()`.

    Returns:
        FastAPI: fully wired application with middleware, exception handlers,
        routers, and health/readiness endpoints.
    """
    settings = settings or get_settings()
    configure_logging(settings)

    docs = settings.ENABLE_DOCS
    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.VERSION,
        docs_url="/docs" if docs else None,
        redoc_url="/redoc" if docs else None,
        openapi_url="/openapi.json" if docs else None,
        lifespan=lifespan,
    )

    # ── Shared services (built once) ───────────────────────────────────────
    app.state.settings = settings
    app.state.engine = build_engine(settings)
    app.state.session_maker = build_session_maker(app.state.engine)
    app.state.token_service = TokenService(settings)
    app.state.uploader = build_uploader(settings)

    # ── Middlewares (added innermost first; request id ends up outermost) ──
    install_rate_limiter(app, settings)                     # 5) Rate limits
    app.add_middleware(GZipMiddleware, minimum_size=1024)   # 4) GZip
    configure_cors(app, settings)                           # 3) CORS
    install_security(app, settings)                         # 2) Security headers
    app.add_middleware(RequestIDMiddleware)                 # 1) Correlation ID

    # ── Errors → envelope ──────────────────────────────────────────────────
    install_exception_handlers(app)

    # ── Routers (versioned API) ────────────────────────────────────────────
    app.include_router(build_v1_router(), prefix=settings.API_V1_STR)

    # ── Meta endpoints ─────────────────────────────────────────────────────
    @app.get("/healthz", tags=["meta"])
    @rate_limit_exempt()
    async def healthz() -> dict[str, bool]:
        """Liveness probe: `{"ok": True}` when the process is responsive."""
        return {"ok": True}

    @app.get("/readyz", tags=["meta"])
    @rate_limit_exempt()
    async def readyz() -> JSONResponse:
        """Readiness probe: 200 when the database answers, 503 otherwise."""
        db_ok = await db_healthcheck(app.state.engine)
        return JSONResponse(
            status_code=200 if db_ok else 503,
            content={"ready": db_ok, "db": db_ok},
        )

    logger.info(f"App created | api={settings.API_V1_STR} | uploads={settings.UPLOAD_BACKEND}")
    return app


app = create_app()
