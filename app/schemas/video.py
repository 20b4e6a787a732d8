from datetime import datetime
from typing import Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.models.video_likes import ReactionType
from app.models.videos import VideoStatus, Visibility
from app.schemas.common import PageMeta
from app.schemas.tag import TagResponse


class VideoUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    duration: Optional[float] = Field(default=None, ge=0)
    tags: Optional[str] = Field(default=None, description="Comma separated tag names")
    status: Optional[VideoStatus] = None
    visibility: Optional[Visibility] = None
    scheduled_for: Optional[datetime] = Field(default=None, alias="scheduledFor")

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class VideoResponse(BaseModel):
    id: UUID
    title: str
    description: str
    filename: str
    filepath: str
    size: int
    mimetype: str
    duration: float
    thumbnail: Optional[str] = None
    user_id: UUID
    tags: List[TagResponse] = []
    comments: List[UUID] = Field(default_factory=list, validation_alias="comment_ids")
    views: int
    likes: int
    dislikes: int
    status: VideoStatus
    visibility: Visibility
    scheduled_for: Optional[datetime] = None
    published_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class VideoSummary(BaseModel):
    id: UUID
    title: str
    thumbnail: Optional[str] = None
    duration: float
    views: int
    likes: int
    dislikes: int
    status: VideoStatus
    user_id: UUID
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class VideoPage(PageMeta):
    videos: List[VideoResponse]


class VideoReference(BaseModel):
    video_id: UUID = Field(..., alias="videoId")

    model_config = ConfigDict(populate_by_name=True)


class ReactionResponse(BaseModel):
    message: str
    likes: int
    dislikes: int
    reaction: Optional[ReactionType] = None


class ViewResponse(BaseModel):
    message: str
    views: int


class WatchHistoryEntry(BaseModel):
    id: UUID
    watched_at: datetime
    video: VideoSummary


class WatchHistoryGroup(BaseModel):
    label: str
    entries: List[WatchHistoryEntry]


class WatchHistoryResponse(PageMeta):
    history: List[WatchHistoryGroup]


class SavedVideoEntry(BaseModel):
    id: UUID
    saved_at: datetime
    video: VideoSummary


class SavedVideoPage(PageMeta):
    videos: List[SavedVideoEntry]


class SavedStatus(BaseModel):
    saved: bool


class SavedVideoResponse(BaseModel):
    message: str
    id: UUID
    video_id: UUID


class VideoViewsStats(BaseModel):
    labels: List[str]
    data: List[int]
    total_views: int
    period: str


class EngagementStats(BaseModel):
    labels: List[str]
    data: Dict[str, List[int]]
    totals: Dict[str, int]
    period: str
