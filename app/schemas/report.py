from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.models.reports import ReportReason, ReportStatus
from app.models.targets import ContentKind
from app.schemas.common import PageMeta


class ReportCreate(BaseModel):
    content_type: ContentKind = Field(..., alias="contentType")
    content_id: UUID = Field(..., alias="contentId")
    reason: ReportReason
    description: Optional[str] = Field(default=None, max_length=500)

    model_config = ConfigDict(populate_by_name=True)


class ReportStatusUpdate(BaseModel):
    status: ReportStatus


class ReportResponse(BaseModel):
    id: UUID
    content_type: ContentKind
    content_id: UUID
    reporter_id: Optional[UUID] = None
    reason: ReportReason
    description: Optional[str] = None
    status: ReportStatus
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ReportPage(PageMeta):
    reports: List[ReportResponse]
