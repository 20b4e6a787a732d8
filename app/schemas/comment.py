from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.common import PageMeta
from app.schemas.user import UserBrief


class CommentCreate(BaseModel):
    content: str = Field(..., min_length=1)
    video_id: UUID = Field(..., alias="videoId")
    parent_comment_id: Optional[UUID] = Field(default=None, alias="parentCommentId")

    model_config = ConfigDict(populate_by_name=True)


class CommentUpdate(BaseModel):
    content: str = Field(..., min_length=1)


class CommentResponse(BaseModel):
    id: UUID
    content: str
    user_id: UUID
    video_id: UUID
    parent_comment_id: Optional[UUID] = None
    status: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CommentWithAuthor(CommentResponse):
    author: Optional[UserBrief] = None


class CommentThread(CommentWithAuthor):
    replies: List[CommentWithAuthor] = []
    reply_count: int = 0


class CommentPage(PageMeta):
    comments: List[CommentThread]


class ReplyPage(PageMeta):
    replies: List[CommentWithAuthor]
