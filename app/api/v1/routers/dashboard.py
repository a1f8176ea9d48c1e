# app/api/v1/routers/dashboard.py
from __future__ import annotations

"""
Dashboard & Healthcheck API · VidTube
=====================================

GET /dashboard/stats   channel totals (views, videos, subscribers, likes received)
GET /dashboard/videos  every video of the caller, published or not
GET /healthcheck       envelope with {"status": "OK"}
"""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.dependencies import get_current_user
from app.db.models.user import User
from app.db.session import get_async_db
from app.schemas.common import ApiResponse, ok
from app.schemas.dashboard import DashboardStats, HealthOut
from app.schemas.video import DashboardVideoOut
from app.services import views

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])
health_router = APIRouter(tags=["Healthcheck"])


@router.get("/stats", response_model=ApiResponse[DashboardStats], summary="Channel stats")
async def channel_stats(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    stats = await views.dashboard_stats(db, user.id)
    return ok(stats, "Channel stats fetched successfully")


@router.get("/videos", response_model=ApiResponse[List[DashboardVideoOut]], summary="Channel videos")
async def channel_videos(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    videos = await views.dashboard_videos(db, user.id)
    return ok(videos, "Channel videos fetched successfully")


@health_router.get("/healthcheck", response_model=ApiResponse[HealthOut], summary="Healthcheck")
async def healthcheck():
    return ok(HealthOut(status="OK"), "Health check passed")


__all__ = ["router", "health_router"]
