# app/api/v1/routers/tweets.py
from __future__ import annotations

"""
Tweets API · VidTube
====================

POST   /tweets               create
GET    /tweets/user/{userId} a user's tweets (newest first; empty list when none)
PATCH  /tweets/{tweetId}     owner only
DELETE /tweets/{tweetId}     owner only
"""

from typing import Any, Dict, List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.dependencies import get_current_user, parse_uuid
from app.db.models.user import User
from app.db.session import get_async_db
from app.schemas.common import ApiResponse, ok
from app.schemas.engagement import TweetIn, TweetOut, TweetView
from app.services import tweet_service, views
from app.services.ownership import get_or_404

router = APIRouter(prefix="/tweets", tags=["Tweets"])


@router.post("", response_model=ApiResponse[TweetOut], status_code=status.HTTP_201_CREATED, summary="Post a tweet")
async def create_tweet(
    payload: TweetIn,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    tweet = await tweet_service.create_tweet(db, user, payload.content)
    return ok(TweetOut.model_validate(tweet), "Tweet created successfully", status.HTTP_201_CREATED)


@router.get("/user/{user_id}", response_model=ApiResponse[List[TweetView]], summary="List a user's tweets")
async def user_tweets(
    user_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    owner_id = parse_uuid(user_id, "user id")
    await get_or_404(db, User, owner_id, resource="user")
    tweets = await views.user_tweets(db, owner_id, user.id)
    return ok(tweets, "Tweets fetched successfully")


@router.patch("/{tweet_id}", response_model=ApiResponse[TweetOut], summary="Edit a tweet")
async def update_tweet(
    tweet_id: str,
    payload: TweetIn,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    tweet = await tweet_service.update_tweet(db, user, parse_uuid(tweet_id, "tweet id"), payload.content)
    return ok(TweetOut.model_validate(tweet), "Tweet updated successfully")


@router.delete("/{tweet_id}", response_model=ApiResponse[Dict[str, Any]], summary="Delete a tweet")
async def delete_tweet(
    tweet_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    await tweet_service.delete_tweet(db, user, parse_uuid(tweet_id, "tweet id"))
    return ok({}, "Tweet deleted successfully")


__all__ = ["router"]
