from datetime import timedelta

from sqlalchemy import select

from app.arq_worker import WorkerSettings
from app.models.videos import Video
from app.models.watch_history import WatchHistory
from app.tasks import maintenance
from app.utils.dates import utcnow
from tests.conftest import create_video


async def test_publish_scheduled_videos(sessionmaker, user):
    now = utcnow()
    due = await create_video(sessionmaker, user.id, title="due", status="scheduled", scheduled_for=now - timedelta(minutes=1))
    later = await create_video(sessionmaker, user.id, title="later", status="scheduled", scheduled_for=now + timedelta(days=1))
    draft = await create_video(sessionmaker, user.id, title="draft", status="draft")

    published = await maintenance.publish_scheduled_videos_task({"sessionmaker": sessionmaker})

    assert published == 1
    async with sessionmaker() as session:
        statuses = dict((await session.execute(select(Video.id, Video.status))).all())
        published_at = (await session.execute(select(Video.published_at).where(Video.id == due.id))).scalar_one()
    assert statuses == {due.id: "published", later.id: "scheduled", draft.id: "draft"}
    assert published_at is not None


async def test_cleanup_watch_history_task(sessionmaker, user, video):
    async with sessionmaker() as session:
        session.add(WatchHistory(user_id=user.id, video_id=video.id, watched_at=utcnow() - timedelta(days=45)))
        await session.commit()

    assert await maintenance.cleanup_watch_history_task({"sessionmaker": sessionmaker}) == 1


async def test_overlapping_runs_are_skipped(sessionmaker):
    ctx = {"sessionmaker": sessionmaker}

    async with maintenance._publish_lock:
        assert await maintenance.publish_scheduled_videos_task(ctx) is None
    async with maintenance._cleanup_lock:
        assert await maintenance.cleanup_watch_history_task(ctx) is None

    assert await maintenance.publish_scheduled_videos_task(ctx) == 0


def test_worker_schedule():
    jobs = {job.name: job for job in WorkerSettings.cron_jobs}

    cleanup = jobs["cron:cleanup_watch_history_task"]
    assert cleanup.hour == {0}
    assert cleanup.minute == {0}

    publish = jobs["cron:publish_scheduled_videos_task"]
    assert publish.minute == set(range(0, 60, 5))
