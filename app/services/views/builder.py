# app/services/views/builder.py
from __future__ import annotations

"""
VidTube · View models
=====================

Every read model that needs data from more than one table is assembled here
from a `ViewPlan`. Results are plain dicts (snake_case keys) that the
response schemas in `app.schemas` validate and render in camelCase.

Views
-----
- channel_profile        user + subscriber / subscribed-to counts + isSubscribed
- watch_history          ordered videos, each with a nested owner
- video_feed             filtered / sorted / paginated videos with owner
- video_detail           video + owner + like and subscription state
- video_comments         paginated comments with owner + like state
- liked_videos           videos the user liked, most recent like first
- channel_subscribers    subscriber projection + subscribedSince
- subscribed_channels    channel projection + subscribedSince
- playlist_detail        playlist + owner + ordered videos (with owners)
- user_playlists         every playlist of a user, resolved the same way
- user_tweets            tweets with owner + like counts
- dashboard_stats        views / videos / subscribers / likes received
- dashboard_videos       all of the owner's videos with like counts

Aggregates always default to 0 when a group is empty.
"""

from collections import defaultdict
from typing import Any, Dict, List, Optional, Sequence, Tuple
from uuid import UUID

from sqlalchemy import func, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from app.db.models import Comment, Like, Playlist, PlaylistVideo, Subscription, Tweet, User, Video, WatchHistory
from app.services.views.plan import ViewPlan, owner_fields, page_meta, video_fields

SORTABLE = {
    "createdAt": Video.created_at,
    "views": Video.views,
    "duration": Video.duration,
    "title": Video.title,
}


def _visible_to(viewer_id: Optional[UUID]):
    """Published videos, plus the viewer's own unpublished ones."""
    if viewer_id is None:
        return Video.is_published.is_(True)
    return or_(Video.is_published.is_(True), Video.owner_id == viewer_id)


# ─────────────────────────────────────────────────────────────────────────────
# 👤 Channel profile
# ─────────────────────────────────────────────────────────────────────────────

async def channel_profile(db: AsyncSession, username: str, requester_id: Optional[UUID]) -> Optional[Dict[str, Any]]:
    plan = (
        ViewPlan(
            User,
            {
                "id": User.id,
                "username": User.username,
                "fullname": User.fullname,
                "email": User.email,
                "avatar": User.avatar,
                "cover_image": User.cover_image,
                "created_at": User.created_at,
            },
        )
        .match(User.username == username.strip().lower())
        .count("subscribers_count", Subscription, Subscription.channel_id == User.id)
        .count("channels_subscribed_to_count", Subscription, Subscription.subscriber_id == User.id)
    )
    if requester_id is not None:
        plan.exists(
            "is_subscribed",
            Subscription,
            Subscription.channel_id == User.id,
            Subscription.subscriber_id == requester_id,
        )
    profile = await plan.first(db)
    if profile is not None:
        profile["is_subscribed"] = bool(profile.get("is_subscribed", False))
    return profile


# ─────────────────────────────────────────────────────────────────────────────
# 🕘 Watch history
# ─────────────────────────────────────────────────────────────────────────────

async def watch_history(db: AsyncSession, user_id: UUID) -> List[Dict[str, Any]]:
    owner = aliased(User, name="owner")
    plan = (
        ViewPlan(Video, video_fields(Video))
        .join(WatchHistory, WatchHistory.video_id == Video.id)
        .lookup("owner", owner, Video.owner_id == owner.id, owner_fields(owner))
        .project(watched_at=WatchHistory.watched_at)
        .match(WatchHistory.user_id == user_id, _visible_to(user_id))
        .sort(WatchHistory.watched_at.desc())
    )
    return await plan.all(db)


# ─────────────────────────────────────────────────────────────────────────────
# 🎬 Videos
# ─────────────────────────────────────────────────────────────────────────────

async def video_feed(
    db: AsyncSession,
    *,
    viewer_id: Optional[UUID],
    query: Optional[str] = None,
    owner_id: Optional[UUID] = None,
    sort_by: str = "createdAt",
    sort_type: str = "desc",
    page: int = 1,
    limit: int = 10,
) -> Dict[str, Any]:
    owner = aliased(User, name="owner")
    plan = (
        ViewPlan(Video, video_fields(Video))
        .lookup("owner", owner, Video.owner_id == owner.id, owner_fields(owner))
        .match(_visible_to(viewer_id))
    )
    if query:
        q = query.strip()
        plan.match(or_(Video.title.icontains(q, autoescape=True), Video.description.icontains(q, autoescape=True)))
    if owner_id is not None:
        plan.match(Video.owner_id == owner_id)

    column = SORTABLE.get(sort_by, Video.created_at)
    plan.sort(column.asc() if sort_type == "asc" else column.desc(), Video.id)

    items, total = await plan.paginated(db, page, limit)
    return page_meta(items, total, page, limit)


async def video_detail(db: AsyncSession, video_id: UUID, viewer_id: Optional[UUID]) -> Optional[Dict[str, Any]]:
    owner = aliased(User, name="owner")
    plan = (
        ViewPlan(Video, video_fields(Video))
        .lookup("owner", owner, Video.owner_id == owner.id, owner_fields(owner))
        .count("likes_count", Like, Like.video_id == Video.id)
        .count("subscribers_count", Subscription, Subscription.channel_id == Video.owner_id)
        .match(Video.id == video_id, _visible_to(viewer_id))
    )
    if viewer_id is not None:
        plan.exists("is_liked", Like, Like.video_id == Video.id, Like.liked_by_id == viewer_id)
        plan.exists(
            "is_subscribed",
            Subscription,
            Subscription.channel_id == Video.owner_id,
            Subscription.subscriber_id == viewer_id,
        )
    doc = await plan.first(db)
    if doc is not None:
        doc["is_liked"] = bool(doc.get("is_liked", False))
        doc["is_subscribed"] = bool(doc.get("is_subscribed", False))
    return doc


async def video_comments(
    db: AsyncSession,
    video_id: UUID,
    viewer_id: Optional[UUID],
    *,
    page: int = 1,
    limit: int = 10,
) -> Dict[str, Any]:
    owner = aliased(User, name="owner")
    plan = (
        ViewPlan(
            Comment,
            {
                "id": Comment.id,
                "content": Comment.content,
                "video_id": Comment.video_id,
                "created_at": Comment.created_at,
                "updated_at": Comment.updated_at,
            },
        )
        .lookup("owner", owner, Comment.owner_id == owner.id, owner_fields(owner))
        .count("likes_count", Like, Like.comment_id == Comment.id)
        .match(Comment.video_id == video_id)
        .sort(Comment.created_at.asc(), Comment.id)
    )
    if viewer_id is not None:
        plan.exists("is_liked", Like, Like.comment_id == Comment.id, Like.liked_by_id == viewer_id)
    items, total = await plan.paginated(db, page, limit)
    for item in items:
        item["is_liked"] = bool(item.get("is_liked", False))
    return page_meta(items, total, page, limit)


async def liked_videos(db: AsyncSession, user_id: UUID) -> List[Dict[str, Any]]:
    owner = aliased(User, name="owner")
    plan = (
        ViewPlan(Video, video_fields(Video))
        .join(Like, Like.video_id == Video.id)
        .lookup("owner", owner, Video.owner_id == owner.id, owner_fields(owner))
        .project(liked_at=Like.created_at)
        .match(Like.liked_by_id == user_id, _visible_to(user_id))
        .sort(Like.created_at.desc(), Video.id)
    )
    return await plan.all(db)


# ─────────────────────────────────────────────────────────────────────────────
# 🔔 Subscriptions
# ─────────────────────────────────────────────────────────────────────────────

async def channel_subscribers(db: AsyncSession, channel_id: UUID) -> List[Dict[str, Any]]:
    subscriber = aliased(User, name="subscriber")
    plan = (
        ViewPlan(Subscription, {"id": Subscription.id, "subscribed_since": Subscription.created_at})
        .lookup(
            "subscriber",
            subscriber,
            Subscription.subscriber_id == subscriber.id,
            {**owner_fields(subscriber), "email": subscriber.email},
            outer=False,
        )
        .match(Subscription.channel_id == channel_id)
        .sort(Subscription.created_at.desc())
    )
    return await plan.all(db)


async def subscribed_channels(db: AsyncSession, subscriber_id: UUID) -> List[Dict[str, Any]]:
    channel = aliased(User, name="channel")
    plan = (
        ViewPlan(Subscription, {"id": Subscription.id, "subscribed_since": Subscription.created_at})
        .lookup(
            "channel",
            channel,
            Subscription.channel_id == channel.id,
            {**owner_fields(channel), "email": channel.email},
            outer=False,
        )
        .match(Subscription.subscriber_id == subscriber_id)
        .sort(Subscription.created_at.desc())
    )
    return await plan.all(db)


# ─────────────────────────────────────────────────────────────────────────────
# 📃 Playlists
# ─────────────────────────────────────────────────────────────────────────────

def _playlist_plan() -> Tuple[ViewPlan, Any]:
    owner = aliased(User, name="owner")
    plan = ViewPlan(
        Playlist,
        {
            "id": Playlist.id,
            "name": Playlist.name,
            "description": Playlist.description,
            "created_at": Playlist.created_at,
            "updated_at": Playlist.updated_at,
        },
    ).lookup("owner", owner, Playlist.owner_id == owner.id, owner_fields(owner))
    return plan, owner


async def _playlist_videos(
    db: AsyncSession,
    playlist_ids: Sequence[UUID],
    viewer_id: Optional[UUID],
) -> Dict[UUID, List[Dict[str, Any]]]:
    if not playlist_ids:
        return {}
    owner = aliased(User, name="owner")
    plan = (
        ViewPlan(Video, video_fields(Video))
        .join(PlaylistVideo, PlaylistVideo.video_id == Video.id)
        .lookup("owner", owner, Video.owner_id == owner.id, owner_fields(owner))
        .project(playlist_id=PlaylistVideo.playlist_id, position=PlaylistVideo.position)
        .match(PlaylistVideo.playlist_id.in_(list(playlist_ids)), _visible_to(viewer_id))
        .sort(PlaylistVideo.playlist_id, PlaylistVideo.position)
    )
    grouped: Dict[UUID, List[Dict[str, Any]]] = defaultdict(list)
    for row in await plan.all(db):
        grouped[row.pop("playlist_id")].append(row)
    return grouped


def _with_videos(playlist: Dict[str, Any], videos: List[Dict[str, Any]]) -> Dict[str, Any]:
    playlist["videos"] = videos
    playlist["total_videos"] = len(videos)
    playlist["total_views"] = sum(int(v.get("views") or 0) for v in videos)
    return playlist


async def playlist_detail(db: AsyncSession, playlist_id: UUID, viewer_id: Optional[UUID]) -> Optional[Dict[str, Any]]:
    plan, _ = _playlist_plan()
    playlist = await plan.match(Playlist.id == playlist_id).first(db)
    if playlist is None:
        return None
    videos = await _playlist_videos(db, [playlist_id], viewer_id)
    return _with_videos(playlist, videos.get(playlist_id, []))


async def user_playlists(db: AsyncSession, user_id: UUID, viewer_id: Optional[UUID]) -> List[Dict[str, Any]]:
    plan, _ = _playlist_plan()
    playlists = await plan.match(Playlist.owner_id == user_id).sort(Playlist.created_at.desc()).all(db)
    videos = await _playlist_videos(db, [p["id"] for p in playlists], viewer_id)
    return [_with_videos(p, videos.get(p["id"], [])) for p in playlists]


# ─────────────────────────────────────────────────────────────────────────────
# 🐦 Tweets
# ─────────────────────────────────────────────────────────────────────────────

async def user_tweets(db: AsyncSession, user_id: UUID, viewer_id: Optional[UUID]) -> List[Dict[str, Any]]:
    owner = aliased(User, name="owner")
    plan = (
        ViewPlan(
            Tweet,
            {
                "id": Tweet.id,
                "content": Tweet.content,
                "created_at": Tweet.created_at,
                "updated_at": Tweet.updated_at,
            },
        )
        .lookup("owner", owner, Tweet.owner_id == owner.id, owner_fields(owner))
        .count("likes_count", Like, Like.tweet_id == Tweet.id)
        .match(Tweet.owner_id == user_id)
        .sort(Tweet.created_at.desc())
    )
    if viewer_id is not None:
        plan.exists("is_liked", Like, Like.tweet_id == Tweet.id, Like.liked_by_id == viewer_id)
    items = await plan.all(db)
    for item in items:
        item["is_liked"] = bool(item.get("is_liked", False))
    return items


# ─────────────────────────────────────────────────────────────────────────────
# 📊 Dashboard
# ─────────────────────────────────────────────────────────────────────────────

async def dashboard_stats(db: AsyncSession, user_id: UUID) -> Dict[str, int]:
    """
    Channel totals for `user_id`; every figure is 0 when nothing matches.

    Likes received: each Like's target is resolved through three outer joins
    (video, comment, tweet) and counted when any resolved owner is the user.
    """
    # Views + videos, grouped by owner (no group → no row → zeros)
    video_totals = (
        ViewPlan(Video, {})
        .project(total_views=func.coalesce(func.sum(Video.views), 0), total_videos=func.count(Video.id))
        .match(Video.owner_id == user_id)
        .group(Video.owner_id)
    )
    totals = await video_totals.first(db)

    subscribers = await ViewPlan(Subscription, {"id": Subscription.id}).match(
        Subscription.channel_id == user_id
    ).total(db)

    liked_video = aliased(Video, name="liked_video")
    liked_comment = aliased(Comment, name="liked_comment")
    liked_tweet = aliased(Tweet, name="liked_tweet")
    likes_plan = (
        ViewPlan(Like, {"id": Like.id})
        .lookup("video", liked_video, Like.video_id == liked_video.id, {"owner_id": liked_video.owner_id})
        .lookup("comment", liked_comment, Like.comment_id == liked_comment.id, {"owner_id": liked_comment.owner_id})
        .lookup("tweet", liked_tweet, Like.tweet_id == liked_tweet.id, {"owner_id": liked_tweet.owner_id})
        .match(
            or_(
                liked_video.owner_id == user_id,
                liked_comment.owner_id == user_id,
                liked_tweet.owner_id == user_id,
            )
        )
    )
    likes = await likes_plan.total(db)

    return {
        "total_views": int(totals["total_views"] or 0) if totals else 0,
        "total_videos": int(totals["total_videos"] or 0) if totals else 0,
        "total_subscribers": subscribers,
        "total_likes": likes,
    }


async def dashboard_videos(db: AsyncSession, user_id: UUID) -> List[Dict[str, Any]]:
    plan = (
        ViewPlan(Video, video_fields(Video))
        .count("likes_count", Like, Like.video_id == Video.id)
        .count("comments_count", Comment, Comment.video_id == Video.id)
        .match(Video.owner_id == user_id)
        .sort(Video.created_at.desc())
    )
    return await plan.all(db)


__all__ = [
    "SORTABLE",
    "channel_profile",
    "watch_history",
    "video_feed",
    "video_detail",
    "video_comments",
    "liked_videos",
    "channel_subscribers",
    "subscribed_channels",
    "playlist_detail",
    "user_playlists",
    "user_tweets",
    "dashboard_stats",
    "dashboard_videos",
]
