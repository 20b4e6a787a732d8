import asyncio
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID

from loguru import logger
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.models.activities import Activity, ActivityAction, ActivityType
from app.models.targets import TargetKind, summarize_targets
from app.schemas.activity import ActivityCreate, ActivityResponse
from app.utils.pagination import Pagination, paginate


class ActivityLogger:
    """Queues audit entries and writes them off the request path.

    ``log`` never blocks and never raises. Entries are written by ``run`` while the
    application is up, or synchronously with ``drain``.
    """

    def __init__(self, sessionmaker: async_sessionmaker, maxsize: int = 1000):
        self.sessionmaker = sessionmaker
        self.queue: asyncio.Queue = asyncio.Queue(maxsize=maxsize)
        self._task: Optional[asyncio.Task] = None

    def log(
        self,
        user_id: UUID,
        type: ActivityType,
        action: ActivityAction,
        target_id: UUID,
        target_type: TargetKind,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        try:
            entry = ActivityCreate(
                user_id=user_id,
                type=type,
                action=action,
                target_id=target_id,
                target_type=target_type,
                metadata=metadata,
            )
            self.queue.put_nowait(entry)
        except asyncio.QueueFull:
            logger.warning(f"Activity queue full, dropping {type}/{action} for user {user_id}")
        except Exception as e:
            logger.error(f"Failed to queue activity {type}/{action}: {e}")

    async def drain(self) -> int:
        written = 0
        while True:
            try:
                entry = self.queue.get_nowait()
            except asyncio.QueueEmpty:
                return written
            try:
                if await self._write(entry):
                    written += 1
            finally:
                self.queue.task_done()

    async def run(self) -> None:
        while True:
            entry = await self.queue.get()
            try:
                await self._write(entry)
            finally:
                self.queue.task_done()

    def start(self) -> None:
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self.run(), name="activity-logger")

    async def stop(self) -> None:
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        await self.drain()

    async def _write(self, entry: ActivityCreate) -> bool:
        try:
            async with self.sessionmaker() as session:
                session.add(
                    Activity(
                        user_id=entry.user_id,
                        type=entry.type.value,
                        action=entry.action.value,
                        target_id=entry.target_id,
                        target_type=entry.target_type.value,
                        extra=entry.metadata,
                    )
                )
                await session.commit()
            return True
        except Exception as e:
            logger.error(f"Failed to log activity {entry.type.value}/{entry.action.value}: {e}")
            return False


class ActivityService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_user_activity(
        self,
        user_id: UUID,
        pagination: Pagination,
        type: Optional[ActivityType] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> Tuple[List[ActivityResponse], int]:
        stmt = select(Activity).where(Activity.user_id == user_id)
        if type is not None:
            stmt = stmt.where(Activity.type == type.value)
        if start_date is not None:
            stmt = stmt.where(Activity.created_at >= start_date)
        if end_date is not None:
            stmt = stmt.where(Activity.created_at <= end_date)
        stmt = stmt.order_by(Activity.created_at.desc())

        activities, total = await paginate(self.db, stmt, pagination)
        return await self._with_targets(activities), total

    async def get_video_activities(
        self, video_id: UUID, pagination: Pagination
    ) -> Tuple[List[ActivityResponse], int]:
        stmt = (
            select(Activity)
            .where(
                Activity.target_id == video_id,
                Activity.type.in_([ActivityType.VIDEO.value, ActivityType.COMMENT.value]),
            )
            .order_by(Activity.created_at.desc())
        )
        activities, total = await paginate(self.db, stmt, pagination)
        return await self._with_targets(activities), total

    async def _with_targets(self, activities: List[Activity]) -> List[ActivityResponse]:
        ids_by_kind: Dict[TargetKind, List[UUID]] = {}
        for activity in activities:
            ids_by_kind.setdefault(TargetKind(activity.target_type), []).append(activity.target_id)

        summaries: Dict[Tuple[TargetKind, UUID], Dict[str, Any]] = {}
        for kind, ids in ids_by_kind.items():
            for target_id, summary in (await summarize_targets(self.db, kind, ids)).items():
                summaries[(kind, target_id)] = summary

        return [
            ActivityResponse.model_validate(activity).model_copy(
                update={"target": summaries.get((TargetKind(activity.target_type), activity.target_id))}
            )
            for activity in activities
        ]
