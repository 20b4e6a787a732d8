from sqlalchemy import Column, DateTime, UniqueConstraint, Uuid

from app.db.database import BaseModel
from app.utils.dates import utcnow


class WatchHistory(BaseModel):
    __tablename__ = "watch_history"
    __table_args__ = (
        UniqueConstraint("user_id", "video_id", name="watch_history_user_video_unique"),
    )

    user_id = Column(Uuid, nullable=False, index=True)
    video_id = Column(Uuid, nullable=False, index=True)
    watched_at = Column(DateTime, nullable=False, default=utcnow, index=True)
