from enum import Enum

from sqlalchemy import Column, String, Text, Uuid
from sqlalchemy.orm import relationship

from app.db.database import BaseModel


class CommentStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class Comment(BaseModel):
    __tablename__ = "comments"

    content = Column(Text, nullable=False)
    user_id = Column(Uuid, nullable=False, index=True)
    video_id = Column(Uuid, nullable=False, index=True)
    parent_comment_id = Column(Uuid, nullable=True, index=True)
    status = Column(String(20), nullable=False, default=CommentStatus.ACTIVE.value)

    author = relationship(
        "Users",
        primaryjoin="Users.id == foreign(Comment.user_id)",
        viewonly=True,
        lazy="raise",
    )
