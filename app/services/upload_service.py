# app/services/upload_service.py
from __future__ import annotations

"""
🧊 VidTube • Media uploads
==========================

Call contract
-------------
    result = await uploader.upload(local_path)   # -> UploadResult | None

`None` means the media service refused or failed; callers treat it as a
terminal failure for required assets (avatar, video file, thumbnail) and a
no-op for optional ones (cover image).

Pieces
------
- `Uploader` protocol + two implementations:
    • `S3Uploader`: boto3 `upload_file`, run in the threadpool
    • `LocalUploader`: copies into `MEDIA_ROOT` (dev / single-box)
- `build_uploader(settings)` picks one from `UPLOAD_BACKEND`.
- `stage_upload(file, temp_dir)` spools an incoming `UploadFile` to a temp
  path and **always** removes it on exit (success or failure).
- `upload_required` / `upload_optional` glue the two together for routers.
"""

from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path
import re
import shutil
from typing import Any, AsyncIterator, Dict, Optional, Protocol
from uuid import uuid4

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError
from fastapi import UploadFile
from loguru import logger
from starlette.concurrency import run_in_threadpool

from app.core.config import Settings
from app.core.exceptions import BadRequestException

_SUFFIX_RE = re.compile(r"^\.[A-Za-z0-9]{1,10}$")


@dataclass(frozen=True)
class UploadResult:
    url: str
    duration: Optional[float] = None


class Uploader(Protocol):
    async def upload(self, local_path: Path) -> Optional[UploadResult]: ...


# ─────────────────────────────────────────────────────────────────────────────
# 📦 S3
# ─────────────────────────────────────────────────────────────────────────────

class S3Uploader:
    """
    Thin boto3 wrapper: one object per upload under `S3_KEY_PREFIX/`.

    Credentials come from settings when both key id and secret are set,
    otherwise from the standard AWS chain (env, profile, role).
    """

    def __init__(self, settings: Settings, client: Any = None) -> None:
        if not settings.AWS_BUCKET_NAME:
            raise ValueError("AWS_BUCKET_NAME not configured")
        self.bucket = settings.AWS_BUCKET_NAME
        self.region = settings.AWS_REGION
        self.prefix = settings.S3_KEY_PREFIX.strip("/")
        self.public_base = settings.S3_PUBLIC_BASE_URL

        if client is None:
            cfg = BotoConfig(
                signature_version="s3v4",
                retries={"max_attempts": 5, "mode": "standard"},
                connect_timeout=3,
                read_timeout=60,
            )
            client_kwargs: Dict[str, Any] = {"config": cfg, "region_name": self.region}
            if settings.AWS_ACCESS_KEY_ID and settings.AWS_SECRET_ACCESS_KEY:
                client_kwargs["aws_access_key_id"] = settings.AWS_ACCESS_KEY_ID
                client_kwargs["aws_secret_access_key"] = settings.AWS_SECRET_ACCESS_KEY.get_secret_value()
            client = boto3.client("s3", **client_kwargs)
        self.client = client

    def object_url(self, key: str) -> str:
        if self.public_base:
            return f"{self.public_base}/{key}"
        return f"https://{self.bucket}.s3.{self.region}.amazonaws.com/{key}"

    async def upload(self, local_path: Path) -> Optional[UploadResult]:
        key = f"{self.prefix}/{uuid4().hex}{local_path.suffix.lower()}".lstrip("/")
        try:
            await run_in_threadpool(self.client.upload_file, str(local_path), self.bucket, key)
        except (BotoCoreError, ClientError, OSError) as e:
            logger.error(f"S3 upload failed | key={key} | err={e}")
            return None
        return UploadResult(url=self.object_url(key))

    def __repr__(self) -> str:  # pragma: no cover
        return f"S3Uploader(bucket={self.bucket}, region={self.region})"


# ─────────────────────────────────────────────────────────────────────────────
# 💾 Local disk
# ─────────────────────────────────────────────────────────────────────────────

class LocalUploader:
    """Copies uploads under `MEDIA_ROOT`, served from `MEDIA_BASE_URL`."""

    def __init__(self, settings: Settings) -> None:
        self.root = Path(settings.MEDIA_ROOT)
        self.base_url = settings.MEDIA_BASE_URL

    async def upload(self, local_path: Path) -> Optional[UploadResult]:
        name = f"{uuid4().hex}{local_path.suffix.lower()}"
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            await run_in_threadpool(shutil.copyfile, local_path, self.root / name)
        except OSError as e:
            logger.error(f"Local upload failed | path={local_path} | err={e}")
            return None
        return UploadResult(url=f"{self.base_url}/{name}")


def build_uploader(settings: Settings) -> Uploader:
    if settings.UPLOAD_BACKEND == "s3":
        return S3Uploader(settings)
    return LocalUploader(settings)


# ─────────────────────────────────────────────────────────────────────────────
# 🧹 Temp staging
# ─────────────────────────────────────────────────────────────────────────────

def has_file(file: Optional[UploadFile]) -> bool:
    """True for a real multipart file part (browsers send empty parts for blanks)."""
    return file is not None and bool(file.filename)


def _copy_to(file: UploadFile, target: Path) -> int:
    file.file.seek(0)
    with target.open("wb") as fh:
        shutil.copyfileobj(file.file, fh)
    return target.stat().st_size


@asynccontextmanager
async def stage_upload(file: UploadFile, temp_dir: Path) -> AsyncIterator[Path]:
    """Spool `file` to `temp_dir` and remove it on every exit path."""
    suffix = Path(file.filename or "").suffix
    if not _SUFFIX_RE.match(suffix):
        suffix = ""
    temp_dir.mkdir(parents=True, exist_ok=True)
    path = temp_dir / f"{uuid4().hex}{suffix}"
    try:
        size = await run_in_threadpool(_copy_to, file, path)
        logger.debug(f"Staged upload {file.filename!r} ({size} bytes) at {path}")
        yield path
    finally:
        path.unlink(missing_ok=True)


async def upload_optional(
    uploader: Uploader,
    file: Optional[UploadFile],
    temp_dir: Path,
) -> Optional[UploadResult]:
    """Stage + upload when a file was sent; `None` when absent or failed."""
    if not has_file(file):
        return None
    async with stage_upload(file, temp_dir) as path:
        return await uploader.upload(path)


async def upload_required(
    uploader: Uploader,
    file: Optional[UploadFile],
    temp_dir: Path,
    *,
    label: str,
) -> UploadResult:
    """Stage + upload a required asset; 400 when missing or when the upload fails."""
    if not has_file(file):
        raise BadRequestException(f"{label} file is required")
    result = await upload_optional(uploader, file, temp_dir)
    if result is None or not result.url:
        raise BadRequestException(f"Error while uploading {label.lower()}")
    return result


__all__ = [
    "UploadResult",
    "Uploader",
    "S3Uploader",
    "LocalUploader",
    "build_uploader",
    "has_file",
    "stage_upload",
    "upload_optional",
    "upload_required",
]
