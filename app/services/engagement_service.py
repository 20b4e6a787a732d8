from datetime import datetime, timedelta
from typing import Dict, List, Optional, Tuple
from uuid import UUID

from loguru import logger
from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import BadRequestError, NotFoundError
from app.models.activities import ActivityAction, ActivityType
from app.models.saved_videos import SavedVideo
from app.models.targets import TargetKind
from app.models.video_views import VideoView
from app.models.videos import Video
from app.models.watch_history import WatchHistory
from app.schemas.video import (
    SavedVideoEntry,
    VideoSummary,
    WatchHistoryEntry,
    WatchHistoryGroup,
)
from app.services.activity_service import ActivityLogger
from app.services.reaction_service import Identity
from app.services.video_service import VideoService
from app.utils.dates import history_label, utcnow
from app.utils.pagination import Pagination, paginate

WATCH_HISTORY_RETENTION = timedelta(days=30)

ALREADY_SAVED_MESSAGE = "Video already saved"


class EngagementService:
    """Views, watch history and saved videos of one caller."""

    def __init__(self, db: AsyncSession, activity: Optional[ActivityLogger] = None):
        self.db = db
        self.activity = activity
        self.videos = VideoService(db)

    async def add_view(self, video_id: UUID, identity: Identity) -> int:
        await self.videos.ensure_exists(video_id)
        now = utcnow()

        self.db.add(
            VideoView(
                video_id=video_id,
                user_id=identity.user_id,
                viewed_at=now,
                device_id=identity.device_id,
                ip_address=identity.ip_address,
            )
        )
        await self.db.execute(update(Video).where(Video.id == video_id).values(views=Video.views + 1))
        if identity.user_id is not None:
            await self._touch_history(identity.user_id, video_id, now)
        await self.db.commit()

        if self.activity and identity.user_id is not None:
            self.activity.log(identity.user_id, ActivityType.WATCH, ActivityAction.VIEW, video_id, TargetKind.VIDEO)

        result = await self.db.execute(select(Video.views).where(Video.id == video_id))
        return result.scalar_one()

    async def add_to_watch_history(self, user_id: UUID, video_id: UUID) -> WatchHistory:
        await self.videos.ensure_exists(video_id)
        entry = await self._touch_history(user_id, video_id, utcnow())
        await self.db.commit()
        return entry

    async def get_watch_history(
        self, user_id: UUID, pagination: Pagination, now: Optional[datetime] = None
    ) -> Tuple[List[WatchHistoryGroup], int]:
        """Most recent first, grouped under "Today", "Yesterday" or a weekday name."""
        now = now or utcnow()
        stmt = (
            select(WatchHistory)
            .join(Video, Video.id == WatchHistory.video_id)
            .where(WatchHistory.user_id == user_id)
            .order_by(WatchHistory.watched_at.desc())
        )
        entries, total = await paginate(self.db, stmt, pagination)
        videos = await self._videos_by_id(entry.video_id for entry in entries)

        groups: List[WatchHistoryGroup] = []
        for entry in entries:
            label = history_label(entry.watched_at, now)
            if not groups or groups[-1].label != label:
                groups.append(WatchHistoryGroup(label=label, entries=[]))
            groups[-1].entries.append(
                WatchHistoryEntry(id=entry.id, watched_at=entry.watched_at, video=videos[entry.video_id])
            )
        return groups, total

    async def remove_from_watch_history(self, user_id: UUID, video_id: UUID) -> None:
        result = await self.db.execute(
            delete(WatchHistory).where(WatchHistory.user_id == user_id, WatchHistory.video_id == video_id)
        )
        if not result.rowcount:
            await self.db.rollback()
            raise NotFoundError("Video not found in watch history")
        await self.db.commit()

    async def clear_watch_history(self, user_id: UUID) -> int:
        result = await self.db.execute(delete(WatchHistory).where(WatchHistory.user_id == user_id))
        await self.db.commit()
        return result.rowcount or 0

    async def cleanup_watch_history(self, now: Optional[datetime] = None) -> int:
        cutoff = (now or utcnow()) - WATCH_HISTORY_RETENTION
        result = await self.db.execute(delete(WatchHistory).where(WatchHistory.watched_at < cutoff))
        await self.db.commit()

        removed = result.rowcount or 0
        logger.info(f"Removed {removed} watch history entries older than {cutoff:%Y-%m-%d %H:%M}")
        return removed

    async def save_video(self, user_id: UUID, video_id: UUID) -> SavedVideo:
        await self.videos.ensure_exists(video_id)
        if await self._find_saved(user_id, video_id) is not None:
            raise BadRequestError(ALREADY_SAVED_MESSAGE)

        saved = SavedVideo(user_id=user_id, video_id=video_id)
        self.db.add(saved)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise BadRequestError(ALREADY_SAVED_MESSAGE)

        if self.activity:
            self.activity.log(user_id, ActivityType.SAVE, ActivityAction.SAVE, video_id, TargetKind.VIDEO)
        return saved

    async def remove_saved_video(self, user_id: UUID, video_id: UUID) -> None:
        saved = await self._find_saved(user_id, video_id)
        if saved is None:
            raise NotFoundError("Saved video not found")

        await self.db.delete(saved)
        await self.db.commit()

        if self.activity:
            self.activity.log(
                user_id, ActivityType.SAVE, ActivityAction.DELETE, video_id, TargetKind.VIDEO
            )

    async def get_saved_videos(
        self, user_id: UUID, pagination: Pagination
    ) -> Tuple[List[SavedVideoEntry], int]:
        stmt = (
            select(SavedVideo)
            .join(Video, Video.id == SavedVideo.video_id)
            .where(SavedVideo.user_id == user_id)
            .order_by(SavedVideo.created_at.desc())
        )
        saved, total = await paginate(self.db, stmt, pagination)
        videos = await self._videos_by_id(entry.video_id for entry in saved)
        return [
            SavedVideoEntry(id=entry.id, saved_at=entry.created_at, video=videos[entry.video_id])
            for entry in saved
        ], total

    async def check_video_saved(self, user_id: UUID, video_id: UUID) -> bool:
        return await self._find_saved(user_id, video_id) is not None

    async def _touch_history(self, user_id: UUID, video_id: UUID, now: datetime) -> WatchHistory:
        """Insert or refresh the (user, video) watch entry without committing."""
        result = await self.db.execute(
            select(WatchHistory).where(WatchHistory.user_id == user_id, WatchHistory.video_id == video_id)
        )
        entry = result.scalar_one_or_none()
        if entry is not None:
            entry.watched_at = now
            return entry

        entry = WatchHistory(user_id=user_id, video_id=video_id, watched_at=now)
        try:
            async with self.db.begin_nested():
                self.db.add(entry)
        except IntegrityError:
            result = await self.db.execute(
                select(WatchHistory).where(WatchHistory.user_id == user_id, WatchHistory.video_id == video_id)
            )
            entry = result.scalar_one()
            entry.watched_at = now
        return entry

    async def _find_saved(self, user_id: UUID, video_id: UUID) -> Optional[SavedVideo]:
        result = await self.db.execute(
            select(SavedVideo).where(SavedVideo.user_id == user_id, SavedVideo.video_id == video_id)
        )
        return result.scalar_one_or_none()

    async def _videos_by_id(self, video_ids) -> Dict[UUID, VideoSummary]:
        ids = list(set(video_ids))
        if not ids:
            return {}
        result = await self.db.execute(select(Video).where(Video.id.in_(ids)))
        return {video.id: VideoSummary.model_validate(video) for video in result.scalars().all()}
