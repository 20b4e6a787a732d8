from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import AppError, ServerError
from app.db.database import get_db
from app.schemas.common import MessageResponse
from app.schemas.tag import TagBulkCreate, TagBulkResponse, TagCreate, TagResponse
from app.services.tag_service import TagService

tags_router = APIRouter()


def get_tag_service(db: AsyncSession = Depends(get_db)) -> TagService:
    return TagService(db)


@tags_router.post("/", response_model=TagResponse, status_code=status.HTTP_201_CREATED)
async def create_tag(payload: TagCreate, service: TagService = Depends(get_tag_service)):
    try:
        return TagResponse.model_validate(await service.create_tag(payload.name))
    except AppError:
        raise
    except Exception as e:
        logger.exception(f"Error creating tag: {e}")
        raise ServerError("Failed to create tag", e)


@tags_router.post("/bulk", response_model=TagBulkResponse, status_code=status.HTTP_201_CREATED)
async def add_tags_in_bulk(payload: TagBulkCreate, service: TagService = Depends(get_tag_service)):
    try:
        new_tags = await service.add_tags_in_bulk(payload.tags)
        return TagBulkResponse(
            message="Tags added successfully",
            new_tags=[TagResponse.model_validate(tag) for tag in new_tags],
        )
    except AppError:
        raise
    except Exception as e:
        logger.exception(f"Error adding tags in bulk: {e}")
        raise ServerError("Failed to add tags", e)


@tags_router.get("/", response_model=List[TagResponse])
async def get_tags(service: TagService = Depends(get_tag_service)):
    try:
        return [TagResponse.model_validate(tag) for tag in await service.get_tags()]
    except AppError:
        raise
    except Exception as e:
        logger.exception(f"Error fetching tags: {e}")
        raise ServerError("Failed to fetch tags", e)


@tags_router.get("/search", response_model=List[TagResponse])
async def search_tags(query: Optional[str] = None, service: TagService = Depends(get_tag_service)):
    try:
        return [TagResponse.model_validate(tag) for tag in await service.search_tags(query)]
    except AppError:
        raise
    except Exception as e:
        logger.exception(f"Error searching tags: {e}")
        raise ServerError("Failed to search tags", e)


@tags_router.get("/{tag_id}", response_model=TagResponse)
async def get_tag(tag_id: UUID, service: TagService = Depends(get_tag_service)):
    try:
        return TagResponse.model_validate(await service.get_tag(tag_id))
    except AppError:
        raise
    except Exception as e:
        logger.exception(f"Error fetching tag {tag_id}: {e}")
        raise ServerError("Failed to fetch tag", e)


@tags_router.put("/{tag_id}", response_model=TagResponse)
async def update_tag(tag_id: UUID, payload: TagCreate, service: TagService = Depends(get_tag_service)):
    try:
        return TagResponse.model_validate(await service.update_tag(tag_id, payload.name))
    except AppError:
        raise
    except Exception as e:
        logger.exception(f"Error updating tag {tag_id}: {e}")
        raise ServerError("Failed to update tag", e)


@tags_router.delete("/{tag_id}", response_model=MessageResponse)
async def delete_tag(tag_id: UUID, service: TagService = Depends(get_tag_service)):
    try:
        await service.delete_tag(tag_id)
        return MessageResponse(message="Tag deleted successfully")
    except AppError:
        raise
    except Exception as e:
        logger.exception(f"Error deleting tag {tag_id}: {e}")
        raise ServerError("Failed to delete tag", e)
