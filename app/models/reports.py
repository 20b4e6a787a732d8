from enum import Enum

from sqlalchemy import Column, Index, String, Uuid

from app.db.database import BaseModel


class ReportReason(str, Enum):
    INAPPROPRIATE = "inappropriate"
    SPAM = "spam"
    HARASSMENT = "harassment"
    VIOLENCE = "violence"
    COPYRIGHT = "copyright"
    OTHER = "other"


class ReportStatus(str, Enum):
    PENDING = "pending"
    REVIEWED = "reviewed"
    RESOLVED = "resolved"
    DISMISSED = "dismissed"


class Report(BaseModel):
    __tablename__ = "reports"
    __table_args__ = (
        Index("ix_reports_content", "content_type", "content_id", "reporter_id"),
        Index("ix_reports_status_created", "status", "created_at"),
    )

    content_type = Column(String(20), nullable=False)
    content_id = Column(Uuid, nullable=False)
    reporter_id = Column(Uuid, nullable=True)
    reason = Column(String(20), nullable=False)
    description = Column(String(500), nullable=True)
    status = Column(String(20), nullable=False, default=ReportStatus.PENDING.value)
