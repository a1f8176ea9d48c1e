# app/core/logger.py
from __future__ import annotations

"""
VidTube · Logging (Loguru)
--------------------------
- Pretty console logs by default; JSON logs with `LOG_JSON=1`
- Request correlation: `request_id` bound by RequestIDMiddleware
- Intercepts stdlib/uvicorn/fastapi/starlette/sqlalchemy logs into Loguru
- Optional file sink with rotation

`configure_logging(settings)` is called once by `create_app`; importing this
module has no side effects.
"""

import json
import logging
import sys
from typing import Any, Dict

from loguru import logger

from app.core.config import Settings

_INTERCEPTED = ("uvicorn", "uvicorn.error", "fastapi", "starlette", "sqlalchemy.engine")


# ─────────────────────────────────────────────────────────────
# 🧾 Formatters
# ─────────────────────────────────────────────────────────────
def _fmt_pretty(record):
    """
    Colorized single-line formatter with request_id support.
    """
    record["extra"]["request_id"] = record["extra"].get("request_id", "N/A")
    safe_name = record["name"].replace("<", "[").replace(">", "]")
    safe_func = record["function"].replace("<", "[").replace(">", "]")
    return (
        f"<green>{record['time']:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
        f"<level>{record['level']:<8}</level> | "
        f"<cyan>{safe_name}</cyan>:<cyan>{safe_func}</cyan>:<cyan>{record['line']}</cyan> - "
        f"<level>{{message}}</level> | request_id={record['extra']['request_id']}\n{{exception}}"
    )


def _fmt_json(record):
    """
    Structured JSON logs, safe for ingestion (Datadog, Loki, ELK).
    """
    payload: Dict[str, Any] = {
        "ts": record["time"].timestamp(),
        "time": record["time"].strftime("%Y-%m-%dT%H:%M:%S.%f%z"),
        "level": record["level"].name,
        "logger": record["name"],
        "func": record["function"],
        "line": record["line"],
        "message": record["message"],
        "request_id": record["extra"].get("request_id", "N/A"),
    }
    for k, v in record["extra"].items():
        if k not in payload:
            payload[k] = v
    record["extra"]["_json"] = json.dumps(payload, ensure_ascii=False, default=str)
    return "{extra[_json]}\n{exception}"


# ─────────────────────────────────────────────────────────────
# 🔁 Intercept stdlib logging → Loguru
# ─────────────────────────────────────────────────────────────
class InterceptHandler(logging.Handler):
    """Route standard logging records into Loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno
        logger.opt(depth=6, exception=record.exc_info).log(level, record.getMessage())


# ─────────────────────────────────────────────────────────────
# 📤 Sinks
# ─────────────────────────────────────────────────────────────
def configure_logging(settings: Settings) -> None:
    """Install console (and optional file) sinks and patch stdlib loggers."""
    logger.remove()
    fmt = _fmt_json if settings.LOG_JSON else _fmt_pretty

    logger.add(
        sys.stdout,
        level=settings.LOG_LEVEL,
        format=fmt,
        enqueue=True,
        backtrace=settings.APP_DEBUG,
        diagnose=settings.APP_DEBUG,
    )

    if settings.LOG_TO_FILE:
        settings.LOG_DIR.mkdir(parents=True, exist_ok=True)
        logger.add(
            str(settings.LOG_DIR / settings.LOG_FILE),
            rotation=settings.LOG_ROTATION,
            level=settings.LOG_LEVEL,
            format=fmt,
            enqueue=True,
            backtrace=False,
            diagnose=False,
        )

    for name in _INTERCEPTED:
        std_logger = logging.getLogger(name)
        std_logger.handlers = [InterceptHandler()]
        std_logger.setLevel(settings.LOG_LEVEL if name != "sqlalchemy.engine" else "WARNING")
        std_logger.propagate = False


__all__ = ["configure_logging", "InterceptHandler"]
