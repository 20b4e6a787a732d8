from datetime import datetime
from typing import Dict, List
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class DashboardOverview(BaseModel):
    total_videos: int
    total_views: int
    total_likes: int
    total_dislikes: int
    saved_videos: int
    watched_videos: int


class TopVideo(BaseModel):
    id: UUID
    title: str
    views: int
    likes: int
    dislikes: int

    model_config = ConfigDict(from_attributes=True)


class RecentVideo(BaseModel):
    id: UUID
    title: str
    status: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class DashboardStats(BaseModel):
    overview: DashboardOverview
    top_videos: List[TopVideo]
    recent_activity: List[RecentVideo]
    status_distribution: Dict[str, int]
