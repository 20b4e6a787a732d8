from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.models.activities import ActivityAction, ActivityType
from app.models.targets import TargetKind
from app.schemas.common import PageMeta


class ActivityCreate(BaseModel):
    user_id: UUID
    type: ActivityType
    action: ActivityAction
    target_id: UUID
    target_type: TargetKind
    metadata: Optional[Dict[str, Any]] = None


class ActivityResponse(BaseModel):
    id: UUID
    user_id: UUID
    type: str
    action: str
    target_id: UUID
    target_type: str
    metadata: Optional[Dict[str, Any]] = Field(default=None, validation_alias="extra")
    target: Optional[Dict[str, Any]] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ActivityPage(PageMeta):
    activities: List[ActivityResponse]
