from uuid import UUID

from fastapi import APIRouter, Depends, status
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_activity_logger
from app.core.exceptions import AppError, ServerError
from app.db.database import get_db
from app.schemas.comment import CommentCreate, CommentPage, CommentResponse, CommentUpdate, ReplyPage
from app.schemas.common import MessageResponse, page_meta
from app.schemas.token import TokenPayload
from app.services.activity_service import ActivityLogger
from app.services.comment_service import CommentService
from app.utils.pagination import Pagination
from app.utils.security import require_admin

comments_router = APIRouter()


def get_comment_service(
    db: AsyncSession = Depends(get_db),
    activity: ActivityLogger = Depends(get_activity_logger),
) -> CommentService:
    return CommentService(db, activity)


@comments_router.post("/", response_model=CommentResponse, status_code=status.HTTP_201_CREATED)
async def add_comment(
    payload: CommentCreate,
    admin: TokenPayload = Depends(require_admin),
    service: CommentService = Depends(get_comment_service),
):
    try:
        return CommentResponse.model_validate(await service.add_comment(admin.id, payload))
    except AppError:
        raise
    except Exception as e:
        logger.exception(f"Error adding comment: {e}")
        raise ServerError("Failed to add comment", e)


@comments_router.put("/{comment_id}", response_model=CommentResponse)
async def update_comment(
    comment_id: UUID,
    payload: CommentUpdate,
    admin: TokenPayload = Depends(require_admin),
    service: CommentService = Depends(get_comment_service),
):
    try:
        return CommentResponse.model_validate(await service.update_comment(comment_id, payload.content, admin.id))
    except AppError:
        raise
    except Exception as e:
        logger.exception(f"Error updating comment {comment_id}: {e}")
        raise ServerError("Failed to update comment", e)


@comments_router.delete("/{comment_id}", response_model=MessageResponse)
async def delete_comment(
    comment_id: UUID,
    admin: TokenPayload = Depends(require_admin),
    service: CommentService = Depends(get_comment_service),
):
    try:
        await service.delete_comment(comment_id, admin.id)
        return MessageResponse(message="Comment deleted successfully")
    except AppError:
        raise
    except Exception as e:
        logger.exception(f"Error deleting comment {comment_id}: {e}")
        raise ServerError("Failed to delete comment", e)


@comments_router.get("/video/{video_id}", response_model=CommentPage)
async def get_comments_by_video(
    video_id: UUID,
    pagination: Pagination = Depends(),
    service: CommentService = Depends(get_comment_service),
):
    try:
        threads, total = await service.get_comments_by_video(video_id, pagination)
        return CommentPage(**page_meta(total, pagination.page, pagination.limit), comments=threads)
    except AppError:
        raise
    except Exception as e:
        logger.exception(f"Error fetching comments of video {video_id}: {e}")
        raise ServerError("Failed to fetch comments", e)


@comments_router.get("/replies/{comment_id}", response_model=ReplyPage)
async def get_replies_by_comment(
    comment_id: UUID,
    pagination: Pagination = Depends(),
    service: CommentService = Depends(get_comment_service),
):
    try:
        replies, total = await service.get_replies_by_comment(comment_id, pagination)
        return ReplyPage(**page_meta(total, pagination.page, pagination.limit), replies=replies)
    except AppError:
        raise
    except Exception as e:
        logger.exception(f"Error fetching replies of comment {comment_id}: {e}")
        raise ServerError("Failed to fetch replies", e)
