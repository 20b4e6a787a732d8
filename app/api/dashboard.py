from fastapi import APIRouter, Depends
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import AppError, ServerError
from app.db.database import get_db
from app.schemas.dashboard import DashboardStats
from app.schemas.token import TokenPayload
from app.schemas.video import EngagementStats, VideoViewsStats
from app.services.stats_service import Scope, StatsService
from app.utils.dates import Period
from app.utils.security import get_current_user

dashboard_router = APIRouter()


def get_stats_service(db: AsyncSession = Depends(get_db)) -> StatsService:
    return StatsService(db)


@dashboard_router.get("/stats", response_model=DashboardStats)
async def get_dashboard_stats(
    user: TokenPayload = Depends(get_current_user),
    service: StatsService = Depends(get_stats_service),
):
    try:
        return await service.get_dashboard_stats(user.id)
    except AppError:
        raise
    except Exception as e:
        logger.exception(f"Error fetching dashboard stats of {user.id}: {e}")
        raise ServerError("Failed to fetch dashboard statistics", e)


@dashboard_router.get("/stats/views", response_model=VideoViewsStats)
async def get_views_stats(
    period: Period = Period.WEEK,
    user: TokenPayload = Depends(get_current_user),
    service: StatsService = Depends(get_stats_service),
):
    try:
        return await service.get_views_stats(Scope(user_id=user.id), period)
    except AppError:
        raise
    except Exception as e:
        logger.exception(f"Error fetching view stats of {user.id}: {e}")
        raise ServerError("Failed to fetch view statistics", e)


@dashboard_router.get("/stats/engagement", response_model=EngagementStats)
async def get_engagement_stats(
    period: Period = Period.WEEK,
    user: TokenPayload = Depends(get_current_user),
    service: StatsService = Depends(get_stats_service),
):
    try:
        return await service.get_engagement_stats(Scope(user_id=user.id), period)
    except AppError:
        raise
    except Exception as e:
        logger.exception(f"Error fetching engagement stats of {user.id}: {e}")
        raise ServerError("Failed to fetch engagement statistics", e)
