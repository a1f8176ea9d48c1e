# app/api/v1/routers/subscriptions.py
from __future__ import annotations

"""
Subscriptions API · VidTube
===========================

POST /subscriptions/c/{channelId}     toggle subscription to a channel
GET  /subscriptions/c/{channelId}     the channel's subscribers
GET  /subscriptions/u/{subscriberId}  channels a user subscribes to
"""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.dependencies import get_current_user, parse_uuid
from app.db.models.user import User
from app.db.session import get_async_db
from app.schemas.common import ApiResponse, ok
from app.schemas.engagement import SubscribedChannelOut, SubscriberOut, SubscriptionToggleOut
from app.services import views
from app.services.ownership import get_or_404
from app.services.subscription_service import toggle_subscription

router = APIRouter(prefix="/subscriptions", tags=["Subscriptions"])


@router.post("/c/{channel_id}", response_model=ApiResponse[SubscriptionToggleOut], summary="Toggle subscription")
async def toggle(
    channel_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    subscribed = await toggle_subscription(db, user, parse_uuid(channel_id, "channel id"))
    message = "Subscribed successfully" if subscribed else "Unsubscribed successfully"
    return ok(SubscriptionToggleOut(is_subscribed=subscribed), message)


@router.get("/c/{channel_id}", response_model=ApiResponse[List[SubscriberOut]], summary="Channel subscribers")
async def channel_subscribers(
    channel_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    cid = parse_uuid(channel_id, "channel id")
    await get_or_404(db, User, cid, resource="channel")
    subscribers = await views.channel_subscribers(db, cid)
    return ok(subscribers, "Subscribers fetched successfully")


@router.get("/u/{subscriber_id}", response_model=ApiResponse[List[SubscribedChannelOut]], summary="Subscribed channels")
async def subscribed_channels(
    subscriber_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    sid = parse_uuid(subscriber_id, "subscriber id")
    await get_or_404(db, User, sid, resource="user")
    channels = await views.subscribed_channels(db, sid)
    return ok(channels, "Subscribed channels fetched successfully")


__all__ = ["router"]
