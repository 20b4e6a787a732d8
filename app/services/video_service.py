from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Tuple
from uuid import UUID

from loguru import logger
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.exceptions import BadRequestError, NotFoundError, ServerError
from app.models.activities import ActivityAction, ActivityType
from app.models.tags import Tag
from app.models.targets import TargetKind
from app.models.videos import Video, VideoLifecycleError, VideoStatus, Visibility
from app.schemas.video import VideoUpdate
from app.services.activity_service import ActivityLogger
from app.services.storage_service import StoredFile, VideoStorage
from app.services.tag_service import TagService, split_tag_names
from app.services.thumbnail_service import ThumbnailError, ThumbnailService
from app.utils.dates import to_naive_utc, utcnow
from app.utils.pagination import Pagination, paginate
from app.utils.search import contains_pattern

VIDEO_NOT_FOUND_MESSAGE = "Video not found"

VIDEO_RELATIONS = (selectinload(Video.tags), selectinload(Video.comments))


@dataclass
class VideoMetadata:
    title: str
    description: str = ""
    duration: float = 0
    tags: Optional[str] = None
    status: VideoStatus = VideoStatus.PUBLISHED
    visibility: Visibility = Visibility.PUBLIC
    scheduled_for: Optional[datetime] = None


class VideoService:
    def __init__(self, db: AsyncSession, activity: Optional[ActivityLogger] = None):
        self.db = db
        self.activity = activity
        self.tags = TagService(db)

    async def get_video(self, video_id: UUID) -> Video:
        result = await self.db.execute(
            select(Video)
            .options(*VIDEO_RELATIONS)
            .where(Video.id == video_id)
            .execution_options(populate_existing=True)
        )
        video = result.scalar_one_or_none()
        if video is None:
            raise NotFoundError(VIDEO_NOT_FOUND_MESSAGE)
        return video

    async def ensure_exists(self, video_id: UUID) -> None:
        result = await self.db.execute(select(Video.id).where(Video.id == video_id))
        if result.scalar_one_or_none() is None:
            raise NotFoundError(VIDEO_NOT_FOUND_MESSAGE)

    async def create_video(self, user_id: UUID, stored: StoredFile, meta: VideoMetadata) -> Video:
        video = Video(
            title=meta.title,
            description=meta.description,
            filename=stored.filename,
            filepath=stored.path,
            size=stored.size,
            mimetype=stored.mimetype,
            duration=meta.duration,
            user_id=user_id,
            status=meta.status.value,
            visibility=meta.visibility.value,
            scheduled_for=to_naive_utc(meta.scheduled_for),
        )
        try:
            video.apply_lifecycle()
        except VideoLifecycleError as e:
            raise BadRequestError(str(e))

        video.tags = await self.tags.resolve_tags(split_tag_names(meta.tags))
        self.db.add(video)
        await self.db.commit()
        logger.info(f"Video {video.id} '{video.title}' uploaded by {user_id}")

        self._log(user_id, ActivityAction.CREATE, video.id, {"title": video.title})
        return await self.get_video(video.id)

    async def attach_thumbnail(self, video: Video, thumbnails: ThumbnailService) -> Video:
        """Generate and store the thumbnail of an already persisted video.

        A failure leaves the video in place without a thumbnail and is reported
        as a server error carrying the video id.
        """
        try:
            video.thumbnail = await thumbnails.generate(video.filepath, video.id)
        except ThumbnailError as e:
            logger.error(f"Thumbnail generation failed for video {video.id}: {e}")
            raise ServerError("Failed to generate thumbnail", e, video_id=video.id)

        await self.db.commit()
        return await self.get_video(video.id)

    async def update_video(self, video_id: UUID, payload: VideoUpdate, user_id: UUID) -> Video:
        video = await self.get_video(video_id)
        changes = payload.model_dump(exclude_unset=True)

        if "tags" in changes:
            video.tags = await self.tags.resolve_tags(split_tag_names(changes.pop("tags")))

        if "scheduled_for" in changes:
            changes["scheduled_for"] = to_naive_utc(changes["scheduled_for"])
        lifecycle_changed = "status" in changes or "scheduled_for" in changes
        for field, value in changes.items():
            if value is None and field != "scheduled_for":
                continue
            if isinstance(value, (VideoStatus, Visibility)):
                value = value.value
            setattr(video, field, value)

        if lifecycle_changed:
            try:
                video.apply_lifecycle()
            except VideoLifecycleError as e:
                await self.db.rollback()
                raise BadRequestError(str(e))

        await self.db.commit()
        logger.info(f"Video {video.id} updated by {user_id}: {sorted(payload.model_fields_set)}")

        self._log(user_id, ActivityAction.UPDATE, video.id, {"fields": sorted(payload.model_fields_set)})
        return await self.get_video(video.id)

    async def delete_video(self, video_id: UUID, user_id: UUID, storage: VideoStorage) -> None:
        video = await self.get_video(video_id)
        filepath, thumbnail, title = video.filepath, video.thumbnail, video.title

        await self.db.delete(video)
        await self.db.commit()
        logger.info(f"Video {video_id} deleted by {user_id}")
        self._log(user_id, ActivityAction.DELETE, video_id, {"title": title})

        try:
            storage.remove(filepath)
            if thumbnail and Path(thumbnail).exists():
                storage.remove(thumbnail)
        except OSError as e:
            logger.error(f"Video {video_id} record removed but file cleanup failed: {e}")
            raise ServerError("Failed to delete video file", e)

    async def list_videos(self, pagination: Pagination) -> Tuple[List[Video], int]:
        stmt = select(Video).order_by(Video.created_at)
        return await paginate(self.db, stmt, pagination, VIDEO_RELATIONS)

    async def list_user_videos(self, user_id: UUID, pagination: Pagination) -> Tuple[List[Video], int]:
        stmt = select(Video).where(Video.user_id == user_id).order_by(Video.created_at)
        return await paginate(self.db, stmt, pagination, VIDEO_RELATIONS)

    async def list_videos_by_tag(self, tag: str, pagination: Pagination) -> Tuple[List[Video], int]:
        stmt = (
            select(Video)
            .where(Video.tags.any(Tag.name == tag.strip()))
            .order_by(Video.created_at)
        )
        return await paginate(self.db, stmt, pagination, VIDEO_RELATIONS)

    async def search_videos(
        self, query: Optional[str], tags: Optional[str], pagination: Pagination
    ) -> Tuple[List[Video], int]:
        stmt = select(Video)
        if query and query.strip():
            stmt = stmt.where(Video.title.ilike(contains_pattern(query.strip()), escape="\\"))
        tag_names = split_tag_names(tags)
        if tag_names:
            stmt = stmt.where(Video.tags.any(Tag.name.in_(tag_names)))
        return await paginate(self.db, stmt.order_by(Video.created_at), pagination, VIDEO_RELATIONS)

    async def publish_due_videos(self, now: Optional[datetime] = None) -> int:
        now = now or utcnow()
        result = await self.db.execute(
            select(Video).where(
                Video.status == VideoStatus.SCHEDULED.value,
                Video.scheduled_for.is_not(None),
                Video.scheduled_for <= now,
            )
        )
        videos = list(result.scalars().all())
        for video in videos:
            video.status = VideoStatus.PUBLISHED.value
            video.published_at = now
        await self.db.commit()

        if videos:
            logger.info(f"Published {len(videos)} scheduled videos")
        return len(videos)

    def _log(self, user_id: UUID, action: ActivityAction, video_id: UUID, metadata: dict) -> None:
        if self.activity:
            self.activity.log(user_id, ActivityType.VIDEO, action, video_id, TargetKind.VIDEO, metadata)
