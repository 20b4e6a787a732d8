from typing import Iterable, List, Optional
from uuid import UUID

from loguru import logger
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import BadRequestError, NotFoundError
from app.models.tags import Tag
from app.utils.search import contains_pattern

TAG_EXISTS_MESSAGE = "Tag already exists"
TAG_NOT_FOUND_MESSAGE = "Tag not found"


def split_tag_names(raw: Optional[str]) -> List[str]:
    """Comma separated names, trimmed, blanks and repeats removed, order kept."""
    if not raw:
        return []
    names: List[str] = []
    for part in raw.split(","):
        name = part.strip()
        if name and name not in names:
            names.append(name)
    return names


class TagService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_tag(self, name: str) -> Tag:
        tag = Tag(name=name.strip())
        self.db.add(tag)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise BadRequestError(TAG_EXISTS_MESSAGE)
        logger.info(f"Created tag {tag.name}")
        return tag

    async def get_tags(self) -> List[Tag]:
        result = await self.db.execute(select(Tag).order_by(Tag.name))
        return list(result.scalars().all())

    async def get_tag(self, tag_id: UUID) -> Tag:
        tag = await self.db.get(Tag, tag_id)
        if tag is None:
            raise NotFoundError(TAG_NOT_FOUND_MESSAGE)
        return tag

    async def update_tag(self, tag_id: UUID, name: str) -> Tag:
        tag = await self.get_tag(tag_id)
        tag.name = name.strip()
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise BadRequestError(TAG_EXISTS_MESSAGE)
        return tag

    async def delete_tag(self, tag_id: UUID) -> None:
        tag = await self.get_tag(tag_id)
        await self.db.delete(tag)
        await self.db.commit()
        logger.info(f"Deleted tag {tag.name}")

    async def add_tags_in_bulk(self, raw: str) -> List[Tag]:
        names = split_tag_names(raw)
        if not names:
            raise BadRequestError("At least one tag name is required")

        result = await self.db.execute(select(Tag.name).where(Tag.name.in_(names)))
        existing = set(result.scalars().all())

        new_tags = [Tag(name=name) for name in names if name not in existing]
        self.db.add_all(new_tags)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise BadRequestError(TAG_EXISTS_MESSAGE)

        logger.info(f"Bulk insert added {len(new_tags)} of {len(names)} tags")
        return new_tags

    async def search_tags(self, query: Optional[str]) -> List[Tag]:
        if not query or not query.strip():
            raise BadRequestError("Query parameter is required")

        pattern = contains_pattern(query.strip())
        result = await self.db.execute(
            select(Tag).where(Tag.name.ilike(pattern, escape="\\")).order_by(Tag.name)
        )
        return list(result.scalars().all())

    async def resolve_tags(self, names: Iterable[str]) -> List[Tag]:
        """Map names to tags, creating any that do not exist yet.

        Does not commit; new tags are flushed inside a savepoint so a concurrent
        insert of the same name falls back to the existing row.
        """
        tags: List[Tag] = []
        for name in names:
            result = await self.db.execute(select(Tag).where(Tag.name == name))
            tag = result.scalar_one_or_none()
            if tag is None:
                tag = Tag(name=name)
                try:
                    async with self.db.begin_nested():
                        self.db.add(tag)
                except IntegrityError:
                    result = await self.db.execute(select(Tag).where(Tag.name == name))
                    tag = result.scalar_one()
            tags.append(tag)
        return tags
