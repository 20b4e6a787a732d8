from datetime import datetime
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import AppError, ServerError
from app.db.database import get_db
from app.models.activities import ActivityType
from app.schemas.activity import ActivityPage
from app.schemas.common import page_meta
from app.schemas.token import TokenPayload
from app.services.activity_service import ActivityService
from app.utils.pagination import ActivityPagination
from app.utils.security import get_current_user

activities_router = APIRouter()


def get_activity_service(db: AsyncSession = Depends(get_db)) -> ActivityService:
    return ActivityService(db)


@activities_router.get("/", response_model=ActivityPage)
async def get_user_activity(
    activity_type: Optional[ActivityType] = Query(default=None, alias="type"),
    start_date: Optional[datetime] = Query(default=None, alias="startDate"),
    end_date: Optional[datetime] = Query(default=None, alias="endDate"),
    pagination: ActivityPagination = Depends(),
    user: TokenPayload = Depends(get_current_user),
    service: ActivityService = Depends(get_activity_service),
):
    try:
        activities, total = await service.get_user_activity(
            user.id, pagination, type=activity_type, start_date=start_date, end_date=end_date
        )
        return ActivityPage(**page_meta(total, pagination.page, pagination.limit), activities=activities)
    except AppError:
        raise
    except Exception as e:
        logger.exception(f"Error fetching activity of {user.id}: {e}")
        raise ServerError("Failed to fetch activities", e)


@activities_router.get("/video/{video_id}", response_model=ActivityPage)
async def get_video_activities(
    video_id: UUID,
    pagination: ActivityPagination = Depends(),
    user: TokenPayload = Depends(get_current_user),
    service: ActivityService = Depends(get_activity_service),
):
    try:
        activities, total = await service.get_video_activities(video_id, pagination)
        return ActivityPage(**page_meta(total, pagination.page, pagination.limit), activities=activities)
    except AppError:
        raise
    except Exception as e:
        logger.exception(f"Error fetching activity of video {video_id}: {e}")
        raise ServerError("Failed to fetch video activities", e)
