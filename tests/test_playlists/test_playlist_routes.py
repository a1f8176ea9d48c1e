# tests/test_playlists/test_playlist_routes.py

from uuid import uuid4

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models import PlaylistVideo
from tests.utils.factory import create_playlist, create_video

BASE = "/api/v1/playlists"


@pytest.mark.anyio
async def test_create_playlist_and_duplicate_name(async_client: AsyncClient, user_with_headers):
    user, headers = await user_with_headers()

    created = await async_client.post(BASE, json={"name": "Watch later", "description": "soon"}, headers=headers)
    assert created.status_code == 201, created.text
    assert created.json()["data"]["ownerId"] == str(user.id)

    dup = await async_client.post(BASE, json={"name": "Watch later"}, headers=headers)
    assert dup.status_code == 409
    assert dup.json()["message"] == "A playlist with this name already exists"


@pytest.mark.anyio
async def test_same_name_for_different_owners(async_client: AsyncClient, user_with_headers):
    _, first = await user_with_headers()
    _, second = await user_with_headers()

    a = await async_client.post(BASE, json={"name": "Mix"}, headers=first)
    b = await async_client.post(BASE, json={"name": "Mix"}, headers=second)

    assert a.status_code == b.status_code == 201


@pytest.mark.anyio
async def test_blank_playlist_name(async_client: AsyncClient, user_with_headers):
    _, headers = await user_with_headers()

    resp = await async_client.post(BASE, json={"name": "  "}, headers=headers)

    assert resp.status_code == 400


@pytest.mark.anyio
async def test_playlist_detail_totals_and_order(async_client: AsyncClient, user_with_headers, db_session: AsyncSession):
    owner, headers = await user_with_headers(username="curator")
    a = await create_video(db_session, owner, title="a", views=5)
    b = await create_video(db_session, owner, title="b", views=7)
    playlist = await create_playlist(db_session, owner, videos=[b, a])

    resp = await async_client.get(f"{BASE}/{playlist.id}", headers=headers)

    assert resp.status_code == 200, resp.text
    data = resp.json()["data"]
    assert data["totalVideos"] == 2
    assert data["totalViews"] == 12
    assert [v["title"] for v in data["videos"]] == ["b", "a"]
    assert data["owner"]["username"] == "curator"
    assert data["videos"][0]["owner"]["username"] == "curator"


@pytest.mark.anyio
async def test_add_video_is_idempotent_and_appends(async_client: AsyncClient, user_with_headers, db_session: AsyncSession):
    owner, headers = await user_with_headers()
    first = await create_video(db_session, owner, title="first")
    second = await create_video(db_session, owner, title="second")
    playlist = await create_playlist(db_session, owner, videos=[first])

    r1 = await async_client.patch(f"{BASE}/add/{second.id}/{playlist.id}", headers=headers)
    r2 = await async_client.patch(f"{BASE}/add/{second.id}/{playlist.id}", headers=headers)

    assert r1.status_code == r2.status_code == 200
    videos = r2.json()["data"]["videos"]
    assert [v["title"] for v in videos] == ["first", "second"]
    assert videos[0]["position"] < videos[1]["position"]


@pytest.mark.anyio
async def test_remove_video(async_client: AsyncClient, user_with_headers, db_session: AsyncSession):
    owner, headers = await user_with_headers()
    video = await create_video(db_session, owner)
    playlist = await create_playlist(db_session, owner, videos=[video])

    resp = await async_client.patch(f"{BASE}/remove/{video.id}/{playlist.id}", headers=headers)
    again = await async_client.patch(f"{BASE}/remove/{video.id}/{playlist.id}", headers=headers)

    assert resp.json()["data"]["totalVideos"] == 0
    assert again.status_code == 200


@pytest.mark.anyio
async def test_cannot_add_someone_elses_unpublished_video(
    async_client: AsyncClient, user_with_headers, db_session: AsyncSession
):
    curator, headers = await user_with_headers()
    creator, _ = await user_with_headers()
    draft = await create_video(db_session, creator, is_published=False)
    own_draft = await create_video(db_session, curator, title="mine", is_published=False)
    playlist = await create_playlist(db_session, curator)

    resp = await async_client.patch(f"{BASE}/add/{draft.id}/{playlist.id}", headers=headers)

    assert resp.status_code == 404
    assert resp.json()["message"] == "Video not found"
    rows = (await db_session.execute(select(func.count()).select_from(PlaylistVideo))).scalar_one()
    assert rows == 0

    own = await async_client.patch(f"{BASE}/add/{own_draft.id}/{playlist.id}", headers=headers)
    assert own.status_code == 200
    assert [v["title"] for v in own.json()["data"]["videos"]] == ["mine"]


@pytest.mark.anyio
async def test_playlist_writes_owner_only(async_client: AsyncClient, user_with_headers, db_session: AsyncSession):
    owner, owner_headers = await user_with_headers()
    _, other_headers = await user_with_headers()
    video = await create_video(db_session, owner)
    playlist = await create_playlist(db_session, owner)

    assert (await async_client.patch(f"{BASE}/add/{video.id}/{playlist.id}", headers=other_headers)).status_code == 403
    assert (await async_client.patch(f"{BASE}/{playlist.id}", json={"name": "x"}, headers=other_headers)).status_code == 403
    assert (await async_client.delete(f"{BASE}/{playlist.id}", headers=other_headers)).status_code == 403
    assert (await async_client.patch(f"{BASE}/add/{video.id}/{uuid4()}", headers=owner_headers)).status_code == 404
    assert (await async_client.patch(f"{BASE}/add/{uuid4()}/{playlist.id}", headers=owner_headers)).status_code == 404

    renamed = await async_client.patch(f"{BASE}/{playlist.id}", json={"name": "Renamed"}, headers=owner_headers)
    assert renamed.json()["data"]["name"] == "Renamed"

    assert (await async_client.delete(f"{BASE}/{playlist.id}", headers=owner_headers)).status_code == 200
    assert (await async_client.get(f"{BASE}/{playlist.id}", headers=owner_headers)).status_code == 404


@pytest.mark.anyio
async def test_user_playlists(async_client: AsyncClient, user_with_headers, db_session: AsyncSession):
    owner, headers = await user_with_headers()
    video = await create_video(db_session, owner, views=3)
    await create_playlist(db_session, owner, name="one", videos=[video])
    await create_playlist(db_session, owner, name="two")

    resp = await async_client.get(f"{BASE}/user/{owner.id}", headers=headers)

    data = resp.json()["data"]
    assert {p["name"] for p in data} == {"one", "two"}
    totals = {p["name"]: p["totalViews"] for p in data}
    assert totals == {"one": 3, "two": 0}
