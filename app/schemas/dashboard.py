# app/schemas/dashboard.py
from __future__ import annotations

from app.schemas.common import CamelModel


class DashboardStats(CamelModel):
    total_views: int = 0
    total_videos: int = 0
    total_subscribers: int = 0
    total_likes: int = 0


class HealthOut(CamelModel):
    status: str = "OK"


__all__ = ["DashboardStats", "HealthOut"]
