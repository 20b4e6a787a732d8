from datetime import datetime
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_activity_logger, get_identity, get_storage, get_thumbnailer
from app.core.exceptions import AppError, ServerError
from app.db.database import get_db
from app.models.video_likes import ReactionType
from app.models.videos import Video, VideoStatus, Visibility
from app.schemas.common import MessageResponse, page_meta
from app.schemas.token import TokenPayload
from app.schemas.video import (
    EngagementStats,
    ReactionResponse,
    SavedStatus,
    SavedVideoPage,
    SavedVideoResponse,
    VideoPage,
    VideoReference,
    VideoResponse,
    VideoUpdate,
    VideoViewsStats,
    ViewResponse,
    WatchHistoryResponse,
)
from app.services.activity_service import ActivityLogger
from app.services.engagement_service import EngagementService
from app.services.reaction_service import Identity, ReactionService
from app.services.stats_service import Scope, StatsService
from app.services.storage_service import VideoStorage
from app.services.thumbnail_service import ThumbnailService
from app.services.video_service import VideoMetadata, VideoService
from app.utils.dates import Period
from app.utils.pagination import Pagination
from app.utils.security import get_current_user, require_admin

videos_router = APIRouter()


def get_video_service(
    db: AsyncSession = Depends(get_db),
    activity: ActivityLogger = Depends(get_activity_logger),
) -> VideoService:
    return VideoService(db, activity)


def get_engagement_service(
    db: AsyncSession = Depends(get_db),
    activity: ActivityLogger = Depends(get_activity_logger),
) -> EngagementService:
    return EngagementService(db, activity)


def get_reaction_service(
    db: AsyncSession = Depends(get_db),
    activity: ActivityLogger = Depends(get_activity_logger),
) -> ReactionService:
    return ReactionService(db, activity)


def video_page(videos: List[Video], total: int, pagination: Pagination) -> VideoPage:
    return VideoPage(
        **page_meta(total, pagination.page, pagination.limit),
        videos=[VideoResponse.model_validate(video) for video in videos],
    )


@videos_router.post("/upload", response_model=VideoResponse, status_code=status.HTTP_201_CREATED)
async def upload_video(
    video: UploadFile = File(...),
    title: str = Form(..., min_length=1, max_length=255),
    description: str = Form(default=""),
    duration: float = Form(default=0, ge=0),
    tags: Optional[str] = Form(default=None),
    video_status: VideoStatus = Form(default=VideoStatus.PUBLISHED, alias="status"),
    visibility: Visibility = Form(default=Visibility.PUBLIC),
    scheduled_for: Optional[datetime] = Form(default=None),
    user: TokenPayload = Depends(get_current_user),
    service: VideoService = Depends(get_video_service),
    storage: VideoStorage = Depends(get_storage),
    thumbnails: ThumbnailService = Depends(get_thumbnailer),
):
    meta = VideoMetadata(
        title=title,
        description=description,
        duration=duration,
        tags=tags,
        status=video_status,
        visibility=visibility,
        scheduled_for=scheduled_for,
    )
    try:
        stored = await storage.save(video, title)
        try:
            created = await service.create_video(user.id, stored, meta)
        except Exception:
            storage.remove(stored.path)
            raise
        created = await service.attach_thumbnail(created, thumbnails)
        return VideoResponse.model_validate(created)
    except AppError:
        raise
    except Exception as e:
        logger.exception(f"Error uploading video: {e}")
        raise ServerError("Failed to upload video", e)


@videos_router.get("/", response_model=VideoPage)
async def get_all_videos(
    pagination: Pagination = Depends(),
    service: VideoService = Depends(get_video_service),
):
    try:
        videos, total = await service.list_videos(pagination)
        return video_page(videos, total, pagination)
    except AppError:
        raise
    except Exception as e:
        logger.exception(f"Error fetching videos: {e}")
        raise ServerError("Failed to fetch videos", e)


@videos_router.get("/search", response_model=VideoPage)
async def search_videos(
    query: Optional[str] = None,
    tags: Optional[str] = None,
    pagination: Pagination = Depends(),
    service: VideoService = Depends(get_video_service),
):
    try:
        videos, total = await service.search_videos(query, tags, pagination)
        return video_page(videos, total, pagination)
    except AppError:
        raise
    except Exception as e:
        logger.exception(f"Error searching videos: {e}")
        raise ServerError("Failed to search videos", e)


@videos_router.get("/tag/{tag}", response_model=VideoPage)
async def get_videos_by_tag(
    tag: str,
    pagination: Pagination = Depends(),
    service: VideoService = Depends(get_video_service),
):
    try:
        videos, total = await service.list_videos_by_tag(tag, pagination)
        return video_page(videos, total, pagination)
    except AppError:
        raise
    except Exception as e:
        logger.exception(f"Error fetching videos tagged {tag}: {e}")
        raise ServerError("Failed to fetch videos by tag", e)


@videos_router.get("/user/my-videos", response_model=VideoPage)
async def get_my_videos(
    pagination: Pagination = Depends(),
    user: TokenPayload = Depends(get_current_user),
    service: VideoService = Depends(get_video_service),
):
    try:
        videos, total = await service.list_user_videos(user.id, pagination)
        return video_page(videos, total, pagination)
    except AppError:
        raise
    except Exception as e:
        logger.exception(f"Error fetching videos of {user.id}: {e}")
        raise ServerError("Failed to fetch your videos", e)


@videos_router.get("/user/watch-history", response_model=WatchHistoryResponse)
async def get_watch_history(
    pagination: Pagination = Depends(),
    user: TokenPayload = Depends(get_current_user),
    service: EngagementService = Depends(get_engagement_service),
):
    try:
        groups, total = await service.get_watch_history(user.id, pagination)
        return WatchHistoryResponse(**page_meta(total, pagination.page, pagination.limit), history=groups)
    except AppError:
        raise
    except Exception as e:
        logger.exception(f"Error fetching watch history of {user.id}: {e}")
        raise ServerError("Failed to fetch watch history", e)


@videos_router.post("/user/watch-history", response_model=MessageResponse)
async def add_to_watch_history(
    payload: VideoReference,
    user: TokenPayload = Depends(get_current_user),
    service: EngagementService = Depends(get_engagement_service),
):
    try:
        await service.add_to_watch_history(user.id, payload.video_id)
        return MessageResponse(message="Video added to watch history")
    except AppError:
        raise
    except Exception as e:
        logger.exception(f"Error updating watch history of {user.id}: {e}")
        raise ServerError("Failed to update watch history", e)


@videos_router.delete("/user/watch-history", response_model=MessageResponse)
async def clear_watch_history(
    user: TokenPayload = Depends(get_current_user),
    service: EngagementService = Depends(get_engagement_service),
):
    try:
        await service.clear_watch_history(user.id)
        return MessageResponse(message="Watch history cleared")
    except AppError:
        raise
    except Exception as e:
        logger.exception(f"Error clearing watch history of {user.id}: {e}")
        raise ServerError("Failed to clear watch history", e)


@videos_router.delete("/user/watch-history/{video_id}", response_model=MessageResponse)
async def remove_from_watch_history(
    video_id: UUID,
    user: TokenPayload = Depends(get_current_user),
    service: EngagementService = Depends(get_engagement_service),
):
    try:
        await service.remove_from_watch_history(user.id, video_id)
        return MessageResponse(message="Video removed from watch history")
    except AppError:
        raise
    except Exception as e:
        logger.exception(f"Error updating watch history of {user.id}: {e}")
        raise ServerError("Failed to update watch history", e)


@videos_router.post("/user/save-video", response_model=SavedVideoResponse, status_code=status.HTTP_201_CREATED)
async def save_video(
    payload: VideoReference,
    user: TokenPayload = Depends(get_current_user),
    service: EngagementService = Depends(get_engagement_service),
):
    try:
        saved = await service.save_video(user.id, payload.video_id)
        return SavedVideoResponse(message="Video saved successfully", id=saved.id, video_id=saved.video_id)
    except AppError:
        raise
    except Exception as e:
        logger.exception(f"Error saving video for {user.id}: {e}")
        raise ServerError("Failed to save video", e)


@videos_router.delete("/user/save-video", response_model=MessageResponse)
async def remove_saved_video(
    payload: VideoReference,
    user: TokenPayload = Depends(get_current_user),
    service: EngagementService = Depends(get_engagement_service),
):
    try:
        await service.remove_saved_video(user.id, payload.video_id)
        return MessageResponse(message="Video removed from saved videos")
    except AppError:
        raise
    except Exception as e:
        logger.exception(f"Error removing saved video for {user.id}: {e}")
        raise ServerError("Failed to remove saved video", e)


@videos_router.get("/user/save-video", response_model=SavedVideoPage)
async def get_saved_videos(
    pagination: Pagination = Depends(),
    user: TokenPayload = Depends(get_current_user),
    service: EngagementService = Depends(get_engagement_service),
):
    try:
        entries, total = await service.get_saved_videos(user.id, pagination)
        return SavedVideoPage(**page_meta(total, pagination.page, pagination.limit), videos=entries)
    except AppError:
        raise
    except Exception as e:
        logger.exception(f"Error fetching saved videos of {user.id}: {e}")
        raise ServerError("Failed to fetch saved videos", e)


@videos_router.get("/user/save-video/{video_id}", response_model=SavedStatus)
async def check_video_saved(
    video_id: UUID,
    user: TokenPayload = Depends(get_current_user),
    service: EngagementService = Depends(get_engagement_service),
):
    try:
        return SavedStatus(saved=await service.check_video_saved(user.id, video_id))
    except AppError:
        raise
    except Exception as e:
        logger.exception(f"Error checking saved video for {user.id}: {e}")
        raise ServerError("Failed to check saved video", e)


@videos_router.get("/user/{user_id}", response_model=VideoPage)
async def get_videos_by_user(
    user_id: UUID,
    pagination: Pagination = Depends(),
    service: VideoService = Depends(get_video_service),
):
    try:
        videos, total = await service.list_user_videos(user_id, pagination)
        return video_page(videos, total, pagination)
    except AppError:
        raise
    except Exception as e:
        logger.exception(f"Error fetching videos of {user_id}: {e}")
        raise ServerError("Failed to fetch user videos", e)


async def _react(service: ReactionService, video_id: UUID, identity: Identity, reaction: ReactionType, undo: bool):
    try:
        if undo:
            return await service.withdraw(video_id, identity, reaction)
        return await service.react(video_id, identity, reaction)
    except AppError:
        raise
    except Exception as e:
        logger.exception(f"Error recording {reaction.value} on {video_id}: {e}")
        raise ServerError(f"Failed to update {reaction.value}", e)


@videos_router.post("/like/{video_id}", response_model=ReactionResponse)
async def like_video(
    video_id: UUID,
    identity: Identity = Depends(get_identity),
    service: ReactionService = Depends(get_reaction_service),
):
    return await _react(service, video_id, identity, ReactionType.LIKE, undo=False)


@videos_router.post("/dislike/{video_id}", response_model=ReactionResponse)
async def dislike_video(
    video_id: UUID,
    identity: Identity = Depends(get_identity),
    service: ReactionService = Depends(get_reaction_service),
):
    return await _react(service, video_id, identity, ReactionType.DISLIKE, undo=False)


@videos_router.post("/unlike/{video_id}", response_model=ReactionResponse)
async def unlike_video(
    video_id: UUID,
    identity: Identity = Depends(get_identity),
    service: ReactionService = Depends(get_reaction_service),
):
    return await _react(service, video_id, identity, ReactionType.LIKE, undo=True)


@videos_router.post("/undislike/{video_id}", response_model=ReactionResponse)
async def undislike_video(
    video_id: UUID,
    identity: Identity = Depends(get_identity),
    service: ReactionService = Depends(get_reaction_service),
):
    return await _react(service, video_id, identity, ReactionType.DISLIKE, undo=True)


@videos_router.post("/view/{video_id}", response_model=ViewResponse)
async def add_video_view(
    video_id: UUID,
    identity: Identity = Depends(get_identity),
    service: EngagementService = Depends(get_engagement_service),
):
    try:
        views = await service.add_view(video_id, identity)
        return ViewResponse(message="View recorded", views=views)
    except AppError:
        raise
    except Exception as e:
        logger.exception(f"Error recording view on {video_id}: {e}")
        raise ServerError("Failed to record view", e)


@videos_router.get("/{video_id}/stats/views", response_model=VideoViewsStats)
async def get_video_views_stats(
    video_id: UUID,
    period: Period = Period.WEEK,
    user: TokenPayload = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    try:
        await VideoService(db).ensure_exists(video_id)
        return await StatsService(db).get_views_stats(Scope(video_id=video_id), period)
    except AppError:
        raise
    except Exception as e:
        logger.exception(f"Error fetching view stats of {video_id}: {e}")
        raise ServerError("Failed to fetch video view statistics", e)


@videos_router.get("/{video_id}/stats/engagement", response_model=EngagementStats)
async def get_video_engagement_stats(
    video_id: UUID,
    period: Period = Period.WEEK,
    user: TokenPayload = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    try:
        await VideoService(db).ensure_exists(video_id)
        return await StatsService(db).get_engagement_stats(
            Scope(video_id=video_id),
            period,
            series=["views", "comments", "saves", "watches", "likes"],
        )
    except AppError:
        raise
    except Exception as e:
        logger.exception(f"Error fetching engagement stats of {video_id}: {e}")
        raise ServerError("Failed to fetch video engagement statistics", e)


@videos_router.get("/{video_id}", response_model=VideoResponse)
async def get_video(video_id: UUID, service: VideoService = Depends(get_video_service)):
    try:
        return VideoResponse.model_validate(await service.get_video(video_id))
    except AppError:
        raise
    except Exception as e:
        logger.exception(f"Error fetching video {video_id}: {e}")
        raise ServerError("Failed to fetch video", e)


@videos_router.put("/{video_id}", response_model=VideoResponse)
async def update_video(
    video_id: UUID,
    payload: VideoUpdate,
    admin: TokenPayload = Depends(require_admin),
    service: VideoService = Depends(get_video_service),
):
    try:
        return VideoResponse.model_validate(await service.update_video(video_id, payload, admin.id))
    except AppError:
        raise
    except Exception as e:
        logger.exception(f"Error updating video {video_id}: {e}")
        raise ServerError("Failed to update video", e)


@videos_router.delete("/{video_id}", response_model=MessageResponse)
async def delete_video(
    video_id: UUID,
    admin: TokenPayload = Depends(require_admin),
    service: VideoService = Depends(get_video_service),
    storage: VideoStorage = Depends(get_storage),
):
    try:
        await service.delete_video(video_id, admin.id, storage)
        return MessageResponse(message="Video deleted successfully")
    except AppError:
        raise
    except Exception as e:
        logger.exception(f"Error deleting video {video_id}: {e}")
        raise ServerError("Failed to delete video", e)
