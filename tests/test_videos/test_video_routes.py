# tests/test_videos/test_video_routes.py

import asyncio
from uuid import uuid4

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models import Comment, Like, Video, WatchHistory
from tests.utils.factory import create_comment, create_like, create_video

BASE = "/api/v1/videos"


def _media():
    return {
        "videoFile": ("clip.mp4", b"\x00\x00\x00\x18ftypmp42", "video/mp4"),
        "thumbnail": ("thumb.jpg", b"\xff\xd8\xff jpeg", "image/jpeg"),
    }


async def _count(db: AsyncSession, model) -> int:
    return (await db.execute(select(func.count()).select_from(model))).scalar_one()


# ─────────────────────────────────────────────────────────────
# 📤 Publish
# ─────────────────────────────────────────────────────────────
@pytest.mark.anyio
async def test_publish_video(async_client: AsyncClient, user_with_headers, uploader):
    user, headers = await user_with_headers()

    resp = await async_client.post(
        BASE,
        data={"title": "My first video", "description": "Hello"},
        files=_media(),
        headers=headers,
    )

    assert resp.status_code == 201, resp.text
    video = resp.json()["data"]
    assert video["ownerId"] == str(user.id)
    assert video["duration"] == 12.5
    assert video["views"] == 0
    assert video["isPublished"] is True
    assert len(uploader.calls) == 2
    assert not any(path.exists() for path in uploader.paths)


@pytest.mark.anyio
async def test_publish_without_thumbnail_uploads_nothing(
    async_client: AsyncClient, user_with_headers, uploader, db_session: AsyncSession
):
    _, headers = await user_with_headers()
    files = _media()
    files.pop("thumbnail")

    resp = await async_client.post(BASE, data={"title": "t", "description": "d"}, files=files, headers=headers)

    assert resp.status_code == 400
    assert resp.json()["message"] == "Video file and thumbnail are required"
    assert uploader.calls == []
    assert await _count(db_session, Video) == 0


@pytest.mark.anyio
async def test_publish_requires_title(async_client: AsyncClient, user_with_headers, uploader):
    _, headers = await user_with_headers()

    resp = await async_client.post(BASE, data={"title": " ", "description": "d"}, files=_media(), headers=headers)

    assert resp.status_code == 400
    assert uploader.calls == []


@pytest.mark.anyio
async def test_publish_requires_auth(async_client: AsyncClient):
    resp = await async_client.post(BASE, data={"title": "t", "description": "d"}, files=_media())

    assert resp.status_code == 401


# ─────────────────────────────────────────────────────────────
# 📺 Detail + views
# ─────────────────────────────────────────────────────────────
@pytest.mark.anyio
async def test_get_video_counts_view_and_records_history(
    async_client: AsyncClient, user_with_headers, db_session: AsyncSession
):
    owner, _ = await user_with_headers(username="owner1")
    viewer, headers = await user_with_headers(username="viewer1")
    video = await create_video(db_session, owner, views=3)
    await create_like(db_session, viewer, video=video)

    resp = await async_client.get(f"{BASE}/{video.id}", headers=headers)

    assert resp.status_code == 200, resp.text
    data = resp.json()["data"]
    assert data["views"] == 4
    assert data["likesCount"] == 1
    assert data["isLiked"] is True
    assert data["isSubscribed"] is False
    assert data["owner"]["username"] == "owner1"
    assert "hashedPassword" not in data["owner"]

    stored = (await db_session.execute(select(Video.views).where(Video.id == video.id))).scalar_one()
    assert stored == 4
    history = (
        await db_session.execute(select(func.count()).select_from(WatchHistory).where(WatchHistory.user_id == viewer.id))
    ).scalar_one()
    assert history == 1

    # Watching again bumps the counter but keeps one history row
    await async_client.get(f"{BASE}/{video.id}", headers=headers)
    assert await _count(db_session, WatchHistory) == 1


@pytest.mark.anyio
async def test_concurrent_first_views_all_succeed(
    async_client: AsyncClient, user_with_headers, db_session: AsyncSession
):
    owner, _ = await user_with_headers()
    viewer, headers = await user_with_headers()
    video = await create_video(db_session, owner)

    responses = await asyncio.gather(*(async_client.get(f"{BASE}/{video.id}", headers=headers) for _ in range(4)))

    assert [r.status_code for r in responses] == [200, 200, 200, 200]
    stored = (await db_session.execute(select(Video.views).where(Video.id == video.id))).scalar_one()
    assert stored == 4
    history = (
        await db_session.execute(select(func.count()).select_from(WatchHistory).where(WatchHistory.user_id == viewer.id))
    ).scalar_one()
    assert history == 1


@pytest.mark.anyio
async def test_unpublished_video_hidden_from_others(
    async_client: AsyncClient, user_with_headers, db_session: AsyncSession
):
    owner, owner_headers = await user_with_headers()
    _, other_headers = await user_with_headers()
    video = await create_video(db_session, owner, is_published=False)

    assert (await async_client.get(f"{BASE}/{video.id}", headers=other_headers)).status_code == 404
    assert (await async_client.get(f"{BASE}/{video.id}", headers=owner_headers)).status_code == 200


@pytest.mark.anyio
async def test_bad_video_id_is_400(async_client: AsyncClient, user_with_headers):
    _, headers = await user_with_headers()

    resp = await async_client.get(f"{BASE}/not-a-uuid", headers=headers)

    assert resp.status_code == 400
    assert resp.json()["message"] == "Invalid video id"


# ─────────────────────────────────────────────────────────────
# 📜 Feed
# ─────────────────────────────────────────────────────────────
@pytest.mark.anyio
async def test_feed_search_sort_and_paginate(async_client: AsyncClient, user_with_headers, db_session: AsyncSession):
    owner, headers = await user_with_headers(username="feeder")
    other, _ = await user_with_headers()
    await create_video(db_session, owner, title="Cooking pasta", views=10)
    await create_video(db_session, owner, title="Cooking rice", views=30)
    await create_video(db_session, owner, title="Gardening", views=20)
    await create_video(db_session, other, title="Cooking secret", is_published=False)

    resp = await async_client.get(
        BASE,
        params={"query": "cooking", "sortBy": "views", "sortType": "asc", "limit": 1, "page": 2},
        headers=headers,
    )

    assert resp.status_code == 200, resp.text
    page = resp.json()["data"]
    assert page["total"] == 2
    assert page["totalPages"] == 2
    assert page["page"] == 2
    assert [v["title"] for v in page["items"]] == ["Cooking rice"]
    assert page["items"][0]["owner"]["username"] == "feeder"


@pytest.mark.anyio
async def test_feed_filters_by_owner(async_client: AsyncClient, user_with_headers, db_session: AsyncSession):
    owner, headers = await user_with_headers()
    other, _ = await user_with_headers()
    await create_video(db_session, owner, title="mine")
    await create_video(db_session, other, title="theirs")

    resp = await async_client.get(BASE, params={"userId": str(other.id)}, headers=headers)

    assert [v["title"] for v in resp.json()["data"]["items"]] == ["theirs"]


@pytest.mark.anyio
async def test_feed_search_treats_wildcards_literally(async_client: AsyncClient, user_with_headers, db_session: AsyncSession):
    owner, headers = await user_with_headers()
    await create_video(db_session, owner, title="100% fun")
    await create_video(db_session, owner, title="100 fun")

    resp = await async_client.get(BASE, params={"query": "100%"}, headers=headers)

    assert [v["title"] for v in resp.json()["data"]["items"]] == ["100% fun"]


# ─────────────────────────────────────────────────────────────
# ✏️ Owner-only writes
# ─────────────────────────────────────────────────────────────
@pytest.mark.anyio
async def test_update_video_owner_only(async_client: AsyncClient, user_with_headers, db_session: AsyncSession):
    owner, owner_headers = await user_with_headers()
    _, other_headers = await user_with_headers()
    video = await create_video(db_session, owner, title="before")

    forbidden = await async_client.patch(f"{BASE}/{video.id}", data={"title": "hijack"}, headers=other_headers)
    assert forbidden.status_code == 403

    missing = await async_client.patch(f"{BASE}/{uuid4()}", data={"title": "x"}, headers=other_headers)
    assert missing.status_code == 404

    resp = await async_client.patch(f"{BASE}/{video.id}", data={"title": "after"}, headers=owner_headers)
    assert resp.status_code == 200
    assert resp.json()["data"]["title"] == "after"


@pytest.mark.anyio
async def test_toggle_publish(async_client: AsyncClient, user_with_headers, db_session: AsyncSession):
    owner, headers = await user_with_headers()
    video = await create_video(db_session, owner)

    first = await async_client.patch(f"{BASE}/toggle/publish/{video.id}", headers=headers)
    second = await async_client.patch(f"{BASE}/toggle/publish/{video.id}", headers=headers)

    assert first.json()["data"]["isPublished"] is False
    assert second.json()["data"]["isPublished"] is True


@pytest.mark.anyio
async def test_delete_video_cascades(async_client: AsyncClient, user_with_headers, db_session: AsyncSession):
    owner, owner_headers = await user_with_headers()
    fan, fan_headers = await user_with_headers()
    video = await create_video(db_session, owner)
    comment = await create_comment(db_session, fan, video)
    await create_like(db_session, fan, video=video)
    await create_like(db_session, fan, comment=comment)

    forbidden = await async_client.delete(f"{BASE}/{video.id}", headers=fan_headers)
    assert forbidden.status_code == 403

    resp = await async_client.delete(f"{BASE}/{video.id}", headers=owner_headers)
    assert resp.status_code == 200

    assert await _count(db_session, Video) == 0
    assert await _count(db_session, Comment) == 0
    assert await _count(db_session, Like) == 0
