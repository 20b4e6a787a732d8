from typing import List, Optional, Tuple
from uuid import UUID

from loguru import logger
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import NotFoundError
from app.models.activities import ActivityAction, ActivityType
from app.models.reports import Report, ReportStatus
from app.models.targets import ContentKind, TargetKind, get_target
from app.schemas.report import ReportCreate
from app.services.activity_service import ActivityLogger
from app.utils.pagination import Pagination, paginate


class ReportService:
    def __init__(self, db: AsyncSession, activity: Optional[ActivityLogger] = None):
        self.db = db
        self.activity = activity

    async def report_content(self, payload: ReportCreate, reporter_id: Optional[UUID] = None) -> Report:
        kind = TargetKind(payload.content_type.value)
        if await get_target(self.db, kind, payload.content_id) is None:
            raise NotFoundError(f"{kind.value} not found")

        report = Report(
            content_type=payload.content_type.value,
            content_id=payload.content_id,
            reporter_id=reporter_id,
            reason=payload.reason.value,
            description=payload.description,
        )
        self.db.add(report)
        await self.db.commit()
        logger.info(f"{kind.value} {payload.content_id} reported for {payload.reason.value}")

        if self.activity and reporter_id is not None:
            self.activity.log(
                reporter_id,
                ActivityType.REPORT,
                ActivityAction.REPORT,
                payload.content_id,
                kind,
                {"reason": payload.reason.value},
            )
        return report

    async def get_reports(
        self,
        pagination: Pagination,
        status: Optional[ReportStatus] = None,
        content_type: Optional[ContentKind] = None,
    ) -> Tuple[List[Report], int]:
        stmt = select(Report)
        if status is not None:
            stmt = stmt.where(Report.status == status.value)
        if content_type is not None:
            stmt = stmt.where(Report.content_type == content_type.value)
        return await paginate(self.db, stmt.order_by(Report.created_at.desc()), pagination)

    async def update_report_status(self, report_id: UUID, status: ReportStatus) -> Report:
        report = await self.db.get(Report, report_id)
        if report is None:
            raise NotFoundError("Report not found")

        report.status = status.value
        await self.db.commit()
        logger.info(f"Report {report_id} moved to {status.value}")
        return report
