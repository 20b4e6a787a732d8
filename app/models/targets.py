"""Typed references for polymorphic ``target``/``content`` columns.

Reports and activities point at rows of different tables. The kind stored next to
the id selects the table through ``TARGET_MODELS`` instead of a dynamic lookup.
"""

from enum import Enum
from typing import Dict, Iterable, List
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.comments import Comment
from app.models.users import Users
from app.models.videos import Video


class TargetKind(str, Enum):
    VIDEO = "Video"
    COMMENT = "Comment"
    USER = "User"


class ContentKind(str, Enum):
    VIDEO = "Video"
    COMMENT = "Comment"


TARGET_MODELS = {
    TargetKind.VIDEO: Video,
    TargetKind.COMMENT: Comment,
    TargetKind.USER: Users,
}

SUMMARY_FIELDS = {
    TargetKind.VIDEO: ("title",),
    TargetKind.COMMENT: ("content",),
    TargetKind.USER: ("username", "email"),
}


async def get_target(db: AsyncSession, kind: TargetKind, target_id: UUID):
    model = TARGET_MODELS[TargetKind(kind)]
    result = await db.execute(select(model).where(model.id == target_id))
    return result.scalar_one_or_none()


async def summarize_targets(
    db: AsyncSession, kind: TargetKind, target_ids: Iterable[UUID]
) -> Dict[UUID, Dict[str, object]]:
    kind = TargetKind(kind)
    ids: List[UUID] = list(set(target_ids))
    if not ids:
        return {}

    model = TARGET_MODELS[kind]
    fields = SUMMARY_FIELDS[kind]
    columns = [model.id] + [getattr(model, field) for field in fields]
    result = await db.execute(select(*columns).where(model.id.in_(ids)))

    summaries: Dict[UUID, Dict[str, object]] = {}
    for row in result.all():
        summary: Dict[str, object] = {"id": row[0], "kind": kind.value}
        summary.update(zip(fields, row[1:]))
        summaries[row[0]] = summary
    return summaries

