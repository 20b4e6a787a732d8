from enum import Enum

from sqlalchemy import JSON, Column, Index, String, Uuid

from app.db.database import BaseModel


class ActivityType(str, Enum):
    ACCOUNT = "account"
    VIDEO = "video"
    COMMENT = "comment"
    LIKE = "like"
    WATCH = "watch"
    SAVE = "save"
    REPORT = "report"


class ActivityAction(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    VIEW = "view"
    LIKE = "like"
    DISLIKE = "dislike"
    SAVE = "save"
    REPORT = "report"


class Activity(BaseModel):
    __tablename__ = "activities"
    __table_args__ = (
        Index("ix_activities_user_created", "user_id", "created_at"),
        Index("ix_activities_type_action", "type", "action"),
    )

    user_id = Column(Uuid, nullable=False)
    type = Column(String(20), nullable=False)
    action = Column(String(20), nullable=False)
    target_id = Column(Uuid, nullable=False, index=True)
    target_type = Column(String(20), nullable=False)
    extra = Column("metadata", JSON, nullable=True)
