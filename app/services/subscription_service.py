# app/services/subscription_service.py
from __future__ import annotations

"""🔔 VidTube · Subscription toggle (subscriber → channel)."""

from uuid import UUID

from loguru import logger
from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import BadRequestException
from app.db.models import Subscription
from app.db.models.user import User
from app.services.common import insert_unique
from app.services.ownership import get_or_404


async def toggle_subscription(db: AsyncSession, user: User, channel_id: UUID) -> bool:
    """Subscribe when not subscribed, unsubscribe otherwise; returns the new state."""
    if channel_id == user.id:
        raise BadRequestException("You cannot subscribe to your own channel")
    await get_or_404(db, User, channel_id, resource="channel")

    result = await db.execute(
        delete(Subscription)
        .where(Subscription.subscriber_id == user.id, Subscription.channel_id == channel_id)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount:
        await db.commit()
        logger.info(f"Unsubscribed | subscriber_id={user.id} | channel_id={channel_id}")
        return False

    await insert_unique(
        db,
        Subscription(subscriber_id=user.id, channel_id=channel_id),
        conflict_message="Already subscribed",
    )
    logger.info(f"Subscribed | subscriber_id={user.id} | channel_id={channel_id}")
    return True


__all__ = ["toggle_subscription"]
