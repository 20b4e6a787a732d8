from datetime import datetime
from typing import List
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class TagCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)


class TagBulkCreate(BaseModel):
    tags: str = Field(..., min_length=1, description="Comma separated tag names")


class TagResponse(BaseModel):
    id: UUID
    name: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class TagBulkResponse(BaseModel):
    message: str
    new_tags: List[TagResponse]
