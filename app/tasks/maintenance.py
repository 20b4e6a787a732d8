import asyncio
from typing import Any, Dict, Optional

from loguru import logger

from app.services.engagement_service import EngagementService
from app.services.video_service import VideoService

_cleanup_lock = asyncio.Lock()
_publish_lock = asyncio.Lock()


async def cleanup_watch_history_task(ctx: Dict[str, Any]) -> Optional[int]:
    if _cleanup_lock.locked():
        logger.warning("Watch history cleanup still running, skipping this run")
        return None

    async with _cleanup_lock:
        try:
            async with ctx["sessionmaker"]() as session:
                return await EngagementService(session).cleanup_watch_history()
        except Exception as e:
            logger.exception(f"Error cleaning up watch history: {e}")
            raise


async def publish_scheduled_videos_task(ctx: Dict[str, Any]) -> Optional[int]:
    if _publish_lock.locked():
        logger.warning("Scheduled video publishing still running, skipping this run")
        return None

    async with _publish_lock:
        try:
            async with ctx["sessionmaker"]() as session:
                return await VideoService(session).publish_due_videos()
        except Exception as e:
            logger.exception(f"Error publishing scheduled videos: {e}")
            raise
