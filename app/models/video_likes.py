from enum import Enum

from sqlalchemy import Column, String, UniqueConstraint, Uuid

from app.db.database import BaseModel


class ReactionType(str, Enum):
    LIKE = "like"
    DISLIKE = "dislike"


class VideoLike(BaseModel):
    __tablename__ = "video_likes"
    __table_args__ = (
        UniqueConstraint("video_id", "device_id", "ip_address", name="video_device_ip_unique"),
    )

    video_id = Column(Uuid, nullable=False, index=True)
    user_id = Column(Uuid, nullable=True, index=True)
    device_id = Column(String(512), nullable=False)
    ip_address = Column(String(64), nullable=False)
    type = Column(String(10), nullable=False)
