# app/services/tweet_service.py
from __future__ import annotations

"""🐦 VidTube · Tweet writes (reads live in `app.services.views`)."""

from uuid import UUID

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import BadRequestException
from app.db.models import Tweet
from app.db.models.user import User
from app.services.common import update_fields
from app.services.ownership import get_owned_or_404


def _content(value: str) -> str:
    content = (value or "").strip()
    if not content:
        raise BadRequestException("Tweet content is missing")
    return content


async def create_tweet(db: AsyncSession, user: User, content: str) -> Tweet:
    tweet = Tweet(content=_content(content), owner_id=user.id)
    db.add(tweet)
    await db.commit()
    return tweet


async def update_tweet(db: AsyncSession, user: User, tweet_id: UUID, content: str) -> Tweet:
    await get_owned_or_404(db, Tweet, tweet_id, user, resource="tweet")
    return await update_fields(db, Tweet, tweet_id, {"content": _content(content)})


async def delete_tweet(db: AsyncSession, user: User, tweet_id: UUID) -> None:
    await get_owned_or_404(db, Tweet, tweet_id, user, resource="tweet")
    await db.execute(delete(Tweet).where(Tweet.id == tweet_id).execution_options(synchronize_session=False))
    await db.commit()


__all__ = ["create_tweet", "update_tweet", "delete_tweet"]
