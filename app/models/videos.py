from datetime import datetime
from enum import Enum
from typing import List, Optional
from uuid import UUID

from sqlalchemy import BigInteger, Column, DateTime, Float, Integer, String, Text, Uuid
from sqlalchemy.orm import relationship

from app.db.database import BaseModel
from app.models.tags import video_tags
from app.utils.dates import utcnow


class VideoStatus(str, Enum):
    DRAFT = "draft"
    SCHEDULED = "scheduled"
    PUBLISHED = "published"
    REVIEW = "review"
    SUSPENDED = "suspended"


class Visibility(str, Enum):
    PUBLIC = "public"
    PRIVATE = "private"
    UNLISTED = "unlisted"


class VideoLifecycleError(ValueError):
    pass


class Video(BaseModel):
    __tablename__ = "videos"

    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False, default="")

    filename = Column(String(512), nullable=False)
    filepath = Column(String(1024), nullable=False)
    size = Column(BigInteger, nullable=False, default=0)
    mimetype = Column(String(100), nullable=False)
    duration = Column(Float, nullable=False, default=0)
    thumbnail = Column(String(1024), nullable=True)

    user_id = Column(Uuid, nullable=False, index=True)

    views = Column(Integer, nullable=False, default=0)
    likes = Column(Integer, nullable=False, default=0)
    dislikes = Column(Integer, nullable=False, default=0)

    status = Column(String(20), nullable=False, default=VideoStatus.PUBLISHED.value, index=True)
    visibility = Column(String(20), nullable=False, default=Visibility.PUBLIC.value)
    scheduled_for = Column(DateTime, nullable=True, index=True)
    published_at = Column(DateTime, nullable=True)

    tags = relationship("Tag", secondary=video_tags, order_by="Tag.name", lazy="raise")
    comments = relationship(
        "Comment",
        primaryjoin="Video.id == foreign(Comment.video_id)",
        order_by="Comment.created_at",
        viewonly=True,
        lazy="raise",
    )

    @property
    def comment_ids(self) -> List[UUID]:
        return [comment.id for comment in self.comments]

    @property
    def is_ready_to_publish(self) -> bool:
        return (
            self.status == VideoStatus.SCHEDULED.value
            and self.scheduled_for is not None
            and utcnow() >= self.scheduled_for
        )

    def apply_lifecycle(self, now: Optional[datetime] = None, check_schedule: bool = True) -> None:
        """Enforce the schedule/publish rules after the status or schedule changed."""
        now = now or utcnow()
        if self.status == VideoStatus.SCHEDULED.value:
            if check_schedule and (self.scheduled_for is None or self.scheduled_for <= now):
                raise VideoLifecycleError("Scheduled date must be in the future")
            self.published_at = None
        elif self.status == VideoStatus.PUBLISHED.value and self.published_at is None:
            self.published_at = now
