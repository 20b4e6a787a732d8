from sqlalchemy import Column, UniqueConstraint, Uuid

from app.db.database import BaseModel


class SavedVideo(BaseModel):
    __tablename__ = "saved_videos"
    __table_args__ = (
        UniqueConstraint("user_id", "video_id", name="saved_videos_user_video_unique"),
    )

    user_id = Column(Uuid, nullable=False, index=True)
    video_id = Column(Uuid, nullable=False, index=True)
