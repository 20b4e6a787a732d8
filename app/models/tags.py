from sqlalchemy import Column, ForeignKey, String, Table, Uuid

from app.db.database import Base, BaseModel


video_tags = Table(
    "video_tags",
    Base.metadata,
    Column("video_id", Uuid, ForeignKey("videos.id", ondelete="CASCADE"), primary_key=True),
    Column("tag_id", Uuid, ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True),
)


class Tag(BaseModel):
    __tablename__ = "tags"

    name = Column(String(100), unique=True, index=True, nullable=False)
