from typing import Any, List, Sequence, Tuple

from fastapi import Query
from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession


class Pagination:
    def __init__(
        self,
        page: int = Query(default=1, ge=1),
        limit: int = Query(default=10, ge=1, le=100),
    ):
        self.page = page
        self.limit = limit

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


class ActivityPagination(Pagination):
    def __init__(
        self,
        page: int = Query(default=1, ge=1),
        limit: int = Query(default=20, ge=1, le=100),
    ):
        super().__init__(page, limit)


async def paginate(
    db: AsyncSession,
    stmt: Select,
    pagination: Pagination,
    options: Sequence[Any] = (),
) -> Tuple[List[Any], int]:
    """Run ``stmt`` for one page and count every row it matches.

    Loader options are applied to the page query only.
    """
    count_stmt = select(func.count()).select_from(stmt.order_by(None).subquery())
    total = (await db.execute(count_stmt)).scalar_one()

    page_stmt = stmt.limit(pagination.limit).offset(pagination.offset)
    if options:
        page_stmt = page_stmt.options(*options)
    result = await db.execute(page_stmt)
    return list(result.scalars().all()), int(total)
