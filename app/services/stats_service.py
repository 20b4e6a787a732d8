from datetime import datetime
from typing import Dict, List, Optional
from uuid import UUID

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.comments import Comment
from app.models.saved_videos import SavedVideo
from app.models.video_likes import ReactionType, VideoLike
from app.models.video_views import VideoView
from app.models.videos import Video
from app.models.watch_history import WatchHistory
from app.schemas.dashboard import DashboardOverview, DashboardStats, RecentVideo, TopVideo
from app.schemas.video import EngagementStats, VideoViewsStats
from app.utils.dates import Period, build_labels, bucketize, get_date_range, utcnow

DASHBOARD_LIST_SIZE = 5

# Series name -> (event model, timestamp column, extra filters)
ENGAGEMENT_SERIES = {
    "views": (VideoView, VideoView.viewed_at, ()),
    "comments": (Comment, Comment.created_at, ()),
    "saves": (SavedVideo, SavedVideo.created_at, ()),
    "watches": (WatchHistory, WatchHistory.watched_at, ()),
    "likes": (VideoLike, VideoLike.created_at, (VideoLike.type == ReactionType.LIKE.value,)),
}


class Scope:
    """Events on the videos of one owner, or on one video."""

    def __init__(self, user_id: Optional[UUID] = None, video_id: Optional[UUID] = None):
        if (user_id is None) == (video_id is None):
            raise ValueError("Scope needs exactly one of user_id or video_id")
        self.user_id = user_id
        self.video_id = video_id

    def apply(self, stmt: Select, model) -> Select:
        if self.video_id is not None:
            return stmt.where(model.video_id == self.video_id)
        return stmt.join(Video, Video.id == model.video_id).where(Video.user_id == self.user_id)


class StatsService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_dashboard_stats(self, user_id: UUID) -> DashboardStats:
        totals = await self.db.execute(
            select(
                func.count(Video.id),
                func.coalesce(func.sum(Video.views), 0),
                func.coalesce(func.sum(Video.likes), 0),
                func.coalesce(func.sum(Video.dislikes), 0),
            ).where(Video.user_id == user_id)
        )
        total_videos, total_views, total_likes, total_dislikes = totals.one()

        saved = await self._count(select(func.count(SavedVideo.id)).where(SavedVideo.user_id == user_id))
        watched = await self._count(select(func.count(WatchHistory.id)).where(WatchHistory.user_id == user_id))

        top = await self.db.execute(
            select(Video)
            .where(Video.user_id == user_id)
            .order_by(Video.views.desc(), Video.created_at.desc())
            .limit(DASHBOARD_LIST_SIZE)
        )
        recent = await self.db.execute(
            select(Video)
            .where(Video.user_id == user_id)
            .order_by(Video.created_at.desc())
            .limit(DASHBOARD_LIST_SIZE)
        )
        distribution = await self.db.execute(
            select(Video.status, func.count(Video.id)).where(Video.user_id == user_id).group_by(Video.status)
        )

        return DashboardStats(
            overview=DashboardOverview(
                total_videos=total_videos,
                total_views=int(total_views),
                total_likes=int(total_likes),
                total_dislikes=int(total_dislikes),
                saved_videos=saved,
                watched_videos=watched,
            ),
            top_videos=[TopVideo.model_validate(video) for video in top.scalars().all()],
            recent_activity=[RecentVideo.model_validate(video) for video in recent.scalars().all()],
            status_distribution={status: count for status, count in distribution.all()},
        )

    async def get_views_stats(
        self, scope: Scope, period: Period, now: Optional[datetime] = None
    ) -> VideoViewsStats:
        now = now or utcnow()
        timestamps = await self._timestamps("views", scope, period, now)
        total = await self._count(scope.apply(select(func.count(VideoView.id)), VideoView))
        return VideoViewsStats(
            labels=build_labels(period, now),
            data=bucketize(period, timestamps, now),
            total_views=total,
            period=period.value,
        )

    async def get_engagement_stats(
        self,
        scope: Scope,
        period: Period,
        now: Optional[datetime] = None,
        series: Optional[List[str]] = None,
    ) -> EngagementStats:
        now = now or utcnow()
        series = series or ["comments", "saves", "watches", "likes"]

        data: Dict[str, List[int]] = {}
        for name in series:
            data[name] = bucketize(period, await self._timestamps(name, scope, period, now), now)

        return EngagementStats(
            labels=build_labels(period, now),
            data=data,
            totals={name: sum(counts) for name, counts in data.items()},
            period=period.value,
        )

    async def _timestamps(self, series: str, scope: Scope, period: Period, now: datetime) -> List[datetime]:
        model, column, filters = ENGAGEMENT_SERIES[series]
        start, end = get_date_range(period, now)
        stmt = select(column).where(column >= start, column <= end, *filters)
        result = await self.db.execute(scope.apply(stmt, model))
        return list(result.scalars().all())

    async def _count(self, stmt: Select) -> int:
        return int((await self.db.execute(stmt)).scalar_one())
