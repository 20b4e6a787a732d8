from datetime import timezone
from typing import Any, Dict

from arq import cron
from arq.connections import RedisSettings as ArqRedisSettings
from loguru import logger

from app.core.config import DatabaseSettings, RedisSettings
from app.db.database import get_async_sessionmaker, get_engine
from app.tasks.maintenance import cleanup_watch_history_task, publish_scheduled_videos_task

app_redis_config = RedisSettings()


async def on_startup(ctx: Dict[str, Any]) -> None:
    ctx["engine"] = get_engine(DatabaseSettings())
    ctx["sessionmaker"] = get_async_sessionmaker(ctx["engine"])
    logger.info("Maintenance worker started")


async def on_shutdown(ctx: Dict[str, Any]) -> None:
    await ctx["engine"].dispose()
    logger.info("Maintenance worker stopped")


class WorkerSettings:
    functions = [cleanup_watch_history_task, publish_scheduled_videos_task]

    cron_jobs = [
        cron(cleanup_watch_history_task, hour={0}, minute={0}, run_at_startup=False),
        cron(publish_scheduled_videos_task, minute=set(range(0, 60, 5))),
    ]

    timezone = timezone.utc
    on_startup = on_startup
    on_shutdown = on_shutdown

    redis_settings = ArqRedisSettings(
        host=app_redis_config.redis_host,
        port=app_redis_config.redis_port,
        password=app_redis_config.redis_password,
    )
