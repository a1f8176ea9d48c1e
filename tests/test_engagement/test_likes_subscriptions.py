# tests/test_engagement/test_likes_subscriptions.py

import asyncio
from uuid import uuid4

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ConflictException
from app.db.models import Like, Subscription
from app.services.common import insert_unique
from tests.utils.factory import create_comment, create_subscription, create_tweet, create_video

API = "/api/v1"


async def _count(db: AsyncSession, model) -> int:
    return (await db.execute(select(func.count()).select_from(model))).scalar_one()


# ─────────────────────────────────────────────────────────────
# ❤️ Likes
# ─────────────────────────────────────────────────────────────
@pytest.mark.anyio
@pytest.mark.parametrize("times, expected_rows, last_state", [(1, 1, True), (2, 0, False), (3, 1, True)])
async def test_video_like_toggle_parity(
    async_client: AsyncClient, user_with_headers, db_session: AsyncSession, times, expected_rows, last_state
):
    owner, _ = await user_with_headers()
    _, headers = await user_with_headers()
    video = await create_video(db_session, owner)

    for _ in range(times):
        resp = await async_client.post(f"{API}/likes/toggle/v/{video.id}", headers=headers)
        assert resp.status_code == 200, resp.text

    assert resp.json()["data"] == {"isLiked": last_state}
    assert await _count(db_session, Like) == expected_rows


@pytest.mark.anyio
async def test_comment_and_tweet_likes(async_client: AsyncClient, user_with_headers, db_session: AsyncSession):
    owner, _ = await user_with_headers()
    fan, headers = await user_with_headers()
    video = await create_video(db_session, owner)
    comment = await create_comment(db_session, owner, video)
    tweet = await create_tweet(db_session, owner)

    c = await async_client.post(f"{API}/likes/toggle/c/{comment.id}", headers=headers)
    t = await async_client.post(f"{API}/likes/toggle/t/{tweet.id}", headers=headers)

    assert c.json()["message"] == "Comment liked successfully"
    assert t.json()["data"]["isLiked"] is True

    tweets = await async_client.get(f"{API}/tweets/user/{owner.id}", headers=headers)
    assert tweets.json()["data"][0]["likesCount"] == 1
    assert tweets.json()["data"][0]["isLiked"] is True

    comments = await async_client.get(f"{API}/comments/{video.id}", headers=headers)
    item = comments.json()["data"]["items"][0]
    assert item["likesCount"] == 1
    assert item["isLiked"] is True
    assert item["owner"]["id"] == str(owner.id)


@pytest.mark.anyio
async def test_like_missing_target(async_client: AsyncClient, user_with_headers):
    _, headers = await user_with_headers()

    resp = await async_client.post(f"{API}/likes/toggle/v/{uuid4()}", headers=headers)

    assert resp.status_code == 404
    assert resp.json()["message"] == "Video not found"


@pytest.mark.anyio
async def test_cannot_like_someone_elses_unpublished_video(
    async_client: AsyncClient, user_with_headers, db_session: AsyncSession
):
    owner, owner_headers = await user_with_headers()
    _, headers = await user_with_headers()
    draft = await create_video(db_session, owner, is_published=False)

    resp = await async_client.post(f"{API}/likes/toggle/v/{draft.id}", headers=headers)

    assert resp.status_code == 404
    assert resp.json()["message"] == "Video not found"
    assert await _count(db_session, Like) == 0

    own = await async_client.post(f"{API}/likes/toggle/v/{draft.id}", headers=owner_headers)
    assert own.json()["data"] == {"isLiked": True}


@pytest.mark.anyio
async def test_liked_videos_lists_only_video_likes(async_client: AsyncClient, user_with_headers, db_session: AsyncSession):
    owner, _ = await user_with_headers(username="maker")
    _, headers = await user_with_headers()
    first = await create_video(db_session, owner, title="first")
    second = await create_video(db_session, owner, title="second")
    tweet = await create_tweet(db_session, owner)

    await async_client.post(f"{API}/likes/toggle/v/{first.id}", headers=headers)
    await async_client.post(f"{API}/likes/toggle/v/{second.id}", headers=headers)
    await async_client.post(f"{API}/likes/toggle/t/{tweet.id}", headers=headers)

    resp = await async_client.get(f"{API}/likes/videos", headers=headers)

    assert resp.status_code == 200
    data = resp.json()["data"]
    assert {v["title"] for v in data} == {"first", "second"}
    assert all(v["owner"]["username"] == "maker" for v in data)
    assert all("likedAt" in v for v in data)


# ─────────────────────────────────────────────────────────────
# 🔔 Subscriptions
# ─────────────────────────────────────────────────────────────
@pytest.mark.anyio
async def test_subscription_toggle_twice(async_client: AsyncClient, user_with_headers, db_session: AsyncSession):
    channel, _ = await user_with_headers()
    _, headers = await user_with_headers()

    on = await async_client.post(f"{API}/subscriptions/c/{channel.id}", headers=headers)
    assert on.json()["data"] == {"isSubscribed": True}
    assert await _count(db_session, Subscription) == 1

    off = await async_client.post(f"{API}/subscriptions/c/{channel.id}", headers=headers)
    assert off.json()["data"] == {"isSubscribed": False}
    assert off.json()["message"] == "Unsubscribed successfully"
    assert await _count(db_session, Subscription) == 0


@pytest.mark.anyio
async def test_cannot_subscribe_to_self(async_client: AsyncClient, user_with_headers, db_session: AsyncSession):
    me, headers = await user_with_headers()

    resp = await async_client.post(f"{API}/subscriptions/c/{me.id}", headers=headers)

    assert resp.status_code == 400
    assert await _count(db_session, Subscription) == 0


@pytest.mark.anyio
async def test_subscribe_to_missing_channel(async_client: AsyncClient, user_with_headers):
    _, headers = await user_with_headers()

    resp = await async_client.post(f"{API}/subscriptions/c/{uuid4()}", headers=headers)

    assert resp.status_code == 404


@pytest.mark.anyio
async def test_subscriber_and_channel_lists(async_client: AsyncClient, user_with_headers, db_session: AsyncSession):
    channel, headers = await user_with_headers(username="studio")
    fan, _ = await user_with_headers(username="fan")
    await create_subscription(db_session, fan, channel)

    subs = await async_client.get(f"{API}/subscriptions/c/{channel.id}", headers=headers)
    assert subs.status_code == 200
    [entry] = subs.json()["data"]
    assert entry["subscriber"]["username"] == "fan"
    assert entry["subscriber"]["email"] == "fan@example.com"
    assert "subscribedSince" in entry

    chans = await async_client.get(f"{API}/subscriptions/u/{fan.id}", headers=headers)
    [entry] = chans.json()["data"]
    assert entry["channel"]["username"] == "studio"


# ─────────────────────────────────────────────────────────────
# 📺 Channel profile
# ─────────────────────────────────────────────────────────────
@pytest.mark.anyio
async def test_channel_profile_is_subscribed_per_requester(
    async_client: AsyncClient, user_with_headers, db_session: AsyncSession
):
    channel, _ = await user_with_headers(username="creator")
    fan, fan_headers = await user_with_headers()
    _, stranger_headers = await user_with_headers()
    await create_subscription(db_session, fan, channel)

    url = f"{API}/users/channel/Creator"

    as_fan = (await async_client.get(url, headers=fan_headers)).json()["data"]
    assert as_fan["isSubscribed"] is True
    assert as_fan["subscribersCount"] == 1
    assert as_fan["channelsSubscribedToCount"] == 0

    as_stranger = (await async_client.get(url, headers=stranger_headers)).json()["data"]
    assert as_stranger["isSubscribed"] is False

    anonymous = await async_client.get(url)
    assert anonymous.status_code == 200
    assert anonymous.json()["data"]["isSubscribed"] is False
    assert "hashedPassword" not in anonymous.json()["data"]


@pytest.mark.anyio
async def test_channel_profile_rejects_bad_credential(async_client: AsyncClient, user_with_headers):
    await user_with_headers(username="creator")

    resp = await async_client.get(f"{API}/users/channel/creator", headers={"Authorization": "Bearer garbage"})

    assert resp.status_code == 401


@pytest.mark.anyio
async def test_channel_profile_unknown(async_client: AsyncClient):
    resp = await async_client.get(f"{API}/users/channel/nobody")

    assert resp.status_code == 404
    assert resp.json()["message"] == "Channel does not exist"


# ─────────────────────────────────────────────────────────────
# 🏁 Racing toggles
# ─────────────────────────────────────────────────────────────
@pytest.mark.anyio
@pytest.mark.parametrize("kind", ["like", "subscription"])
async def test_unique_constraint_settles_double_insert(
    user_with_headers, session_maker, db_session: AsyncSession, kind
):
    channel, _ = await user_with_headers()
    fan, _ = await user_with_headers()
    video = await create_video(db_session, channel)

    def row():
        if kind == "like":
            return Like(liked_by_id=fan.id, video_id=video.id)
        return Subscription(subscriber_id=fan.id, channel_id=channel.id)

    model = Like if kind == "like" else Subscription
    # Both writers passed the "not there yet" check; only one insert may land
    async with session_maker() as first, session_maker() as second:
        await insert_unique(first, row(), conflict_message="Already recorded")
        with pytest.raises(ConflictException):
            await insert_unique(second, row(), conflict_message="Already recorded")

    assert await _count(db_session, model) == 1


@pytest.mark.anyio
async def test_concurrent_like_toggles_never_duplicate(
    async_client: AsyncClient, user_with_headers, db_session: AsyncSession
):
    owner, _ = await user_with_headers()
    _, headers = await user_with_headers()
    video = await create_video(db_session, owner)

    responses = await asyncio.gather(
        *(async_client.post(f"{API}/likes/toggle/v/{video.id}", headers=headers) for _ in range(4))
    )

    assert {r.status_code for r in responses} <= {200, 409}
    assert await _count(db_session, Like) <= 1
