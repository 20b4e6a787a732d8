from sqlalchemy import Column, DateTime, String, Uuid

from app.db.database import BaseModel
from app.utils.dates import utcnow


class VideoView(BaseModel):
    __tablename__ = "video_views"

    video_id = Column(Uuid, nullable=False, index=True)
    user_id = Column(Uuid, nullable=True, index=True)
    viewed_at = Column(DateTime, nullable=False, default=utcnow, index=True)
    device_id = Column(String(512), nullable=True)
    ip_address = Column(String(64), nullable=True)
