from typing import Dict, List, Optional, Tuple
from uuid import UUID

from loguru import logger
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.exceptions import BadRequestError, NotFoundError
from app.models.activities import ActivityAction, ActivityType
from app.models.comments import Comment
from app.models.targets import TargetKind
from app.schemas.comment import CommentCreate, CommentThread, CommentWithAuthor
from app.services.activity_service import ActivityLogger
from app.services.video_service import VideoService
from app.utils.pagination import Pagination, paginate

COMMENT_NOT_FOUND_MESSAGE = "Comment not found"

REPLY_PREVIEW_SIZE = 5


class CommentService:
    def __init__(self, db: AsyncSession, activity: Optional[ActivityLogger] = None):
        self.db = db
        self.activity = activity
        self.videos = VideoService(db)

    async def get_comment(self, comment_id: UUID, message: str = COMMENT_NOT_FOUND_MESSAGE) -> Comment:
        comment = await self.db.get(Comment, comment_id)
        if comment is None:
            raise NotFoundError(message)
        return comment

    async def add_comment(self, user_id: UUID, payload: CommentCreate) -> Comment:
        await self.videos.ensure_exists(payload.video_id)

        if payload.parent_comment_id is not None:
            parent = await self.get_comment(payload.parent_comment_id, "Parent comment not found")
            if parent.video_id != payload.video_id:
                raise BadRequestError("Parent comment belongs to a different video")

        comment = Comment(
            content=payload.content,
            user_id=user_id,
            video_id=payload.video_id,
            parent_comment_id=payload.parent_comment_id,
        )
        self.db.add(comment)
        await self.db.commit()
        logger.info(f"Comment {comment.id} added to video {comment.video_id} by {user_id}")

        self._log(user_id, ActivityAction.CREATE, comment)
        return comment

    async def update_comment(self, comment_id: UUID, content: str, user_id: UUID) -> Comment:
        comment = await self.get_comment(comment_id)
        comment.content = content
        await self.db.commit()

        self._log(user_id, ActivityAction.UPDATE, comment)
        return comment

    async def delete_comment(self, comment_id: UUID, user_id: UUID) -> None:
        comment = await self.get_comment(comment_id)
        await self.db.delete(comment)
        await self.db.commit()
        logger.info(f"Comment {comment_id} deleted by {user_id}")

        self._log(user_id, ActivityAction.DELETE, comment)

    async def get_comments_by_video(
        self, video_id: UUID, pagination: Pagination
    ) -> Tuple[List[CommentThread], int]:
        """Top level comments, newest first, each with its first replies and a reply count."""
        stmt = (
            select(Comment)
            .where(Comment.video_id == video_id, Comment.parent_comment_id.is_(None))
            .order_by(Comment.created_at.desc())
        )
        comments, total = await paginate(self.db, stmt, pagination, (selectinload(Comment.author),))
        if not comments:
            return [], total

        parent_ids = [comment.id for comment in comments]
        counts = await self._reply_counts(parent_ids)
        previews = await self._reply_previews(parent_ids)

        threads = [
            CommentThread.model_validate(comment).model_copy(
                update={
                    "replies": previews.get(comment.id, []),
                    "reply_count": counts.get(comment.id, 0),
                }
            )
            for comment in comments
        ]
        return threads, total

    async def get_replies_by_comment(
        self, comment_id: UUID, pagination: Pagination
    ) -> Tuple[List[CommentWithAuthor], int]:
        await self.get_comment(comment_id)
        stmt = (
            select(Comment)
            .where(Comment.parent_comment_id == comment_id)
            .order_by(Comment.created_at)
        )
        replies, total = await paginate(self.db, stmt, pagination, (selectinload(Comment.author),))
        return [CommentWithAuthor.model_validate(reply) for reply in replies], total

    async def _reply_counts(self, parent_ids: List[UUID]) -> Dict[UUID, int]:
        result = await self.db.execute(
            select(Comment.parent_comment_id, func.count())
            .where(Comment.parent_comment_id.in_(parent_ids))
            .group_by(Comment.parent_comment_id)
        )
        return {parent_id: count for parent_id, count in result.all()}

    async def _reply_previews(self, parent_ids: List[UUID]) -> Dict[UUID, List[CommentWithAuthor]]:
        result = await self.db.execute(
            select(Comment)
            .options(selectinload(Comment.author))
            .where(Comment.parent_comment_id.in_(parent_ids))
            .order_by(Comment.created_at)
        )
        previews: Dict[UUID, List[CommentWithAuthor]] = {}
        for reply in result.scalars().all():
            bucket = previews.setdefault(reply.parent_comment_id, [])
            if len(bucket) < REPLY_PREVIEW_SIZE:
                bucket.append(CommentWithAuthor.model_validate(reply))
        return previews

    def _log(self, user_id: UUID, action: ActivityAction, comment: Comment) -> None:
        if self.activity:
            metadata = {"comment_id": str(comment.id)}
            if comment.parent_comment_id is not None:
                metadata["parent_comment_id"] = str(comment.parent_comment_id)
            self.activity.log(user_id, ActivityType.COMMENT, action, comment.video_id, TargetKind.VIDEO, metadata)
