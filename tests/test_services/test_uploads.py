# tests/test_services/test_uploads.py

from io import BytesIO
from pathlib import Path

import pytest
from botocore.exceptions import ClientError
from fastapi import UploadFile

from app.core.exceptions import BadRequestException
from app.services.upload_service import (
    LocalUploader,
    S3Uploader,
    has_file,
    stage_upload,
    upload_optional,
    upload_required,
)


def _upload(name: str = "clip.mp4", data: bytes = b"binary") -> UploadFile:
    return UploadFile(file=BytesIO(data), filename=name)


def test_has_file():
    assert has_file(_upload())
    assert not has_file(None)
    assert not has_file(_upload(name=""))


@pytest.mark.anyio
async def test_stage_upload_removes_file_on_error(tmp_path: Path):
    seen = {}
    with pytest.raises(RuntimeError):
        async with stage_upload(_upload(data=b"abc"), tmp_path) as path:
            seen["path"] = path
            assert path.read_bytes() == b"abc"
            assert path.suffix == ".mp4"
            raise RuntimeError("media service down")

    assert not seen["path"].exists()


@pytest.mark.anyio
async def test_stage_upload_drops_odd_suffix(tmp_path: Path):
    async with stage_upload(_upload(name="weird.name with spaces"), tmp_path) as path:
        assert path.suffix == ""


@pytest.mark.anyio
async def test_local_uploader_copies_into_media_root(test_settings, tmp_path: Path):
    source = tmp_path / "in.png"
    source.write_bytes(b"png")
    uploader = LocalUploader(test_settings)

    result = await uploader.upload(source)

    assert result is not None
    name = result.url.rsplit("/", 1)[-1]
    assert result.url.startswith(test_settings.MEDIA_BASE_URL)
    assert (Path(test_settings.MEDIA_ROOT) / name).read_bytes() == b"png"


@pytest.mark.anyio
async def test_upload_optional_and_required(uploader, tmp_path: Path):
    assert await upload_optional(uploader, None, tmp_path) is None

    with pytest.raises(BadRequestException):
        await upload_required(uploader, None, tmp_path, label="Avatar")

    uploader.fail = True
    with pytest.raises(BadRequestException) as exc:
        await upload_required(uploader, _upload(), tmp_path, label="Video")
    assert exc.value.status_code == 400
    assert list(tmp_path.iterdir()) == []


class _RecordingS3:
    def __init__(self, error: Exception = None):
        self.calls = []
        self.error = error

    def upload_file(self, filename, bucket, key):
        self.calls.append((filename, bucket, key))
        if self.error:
            raise self.error


@pytest.mark.anyio
async def test_s3_uploader_puts_under_prefix(test_settings, tmp_path: Path):
    settings = test_settings.model_copy(update={"AWS_BUCKET_NAME": "clips", "AWS_REGION": "eu-west-1"})
    client = _RecordingS3()
    src = tmp_path / "movie.MP4"
    src.write_bytes(b"x")

    result = await S3Uploader(settings, client=client).upload(src)

    [(filename, bucket, key)] = client.calls
    assert filename == str(src)
    assert bucket == "clips"
    assert key.startswith("uploads/") and key.endswith(".mp4")
    assert result.url == f"https://clips.s3.eu-west-1.amazonaws.com/{key}"


@pytest.mark.anyio
async def test_s3_uploader_public_base_and_failure(test_settings, tmp_path: Path):
    settings = test_settings.model_copy(
        update={"AWS_BUCKET_NAME": "clips", "S3_PUBLIC_BASE_URL": "https://cdn.example.com"}
    )
    src = tmp_path / "thumb.png"
    src.write_bytes(b"x")

    ok = await S3Uploader(settings, client=_RecordingS3()).upload(src)
    failed = await S3Uploader(
        settings, client=_RecordingS3(ClientError({"Error": {"Code": "500"}}, "PutObject"))
    ).upload(src)

    assert ok.url.startswith("https://cdn.example.com/uploads/")
    assert failed is None


def test_s3_uploader_requires_bucket(test_settings):
    with pytest.raises(ValueError):
        S3Uploader(test_settings, client=_RecordingS3())
