from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_activity_logger
from app.core.exceptions import AppError, ServerError
from app.db.database import get_db
from app.models.reports import ReportStatus
from app.models.targets import ContentKind
from app.schemas.common import MessageResponse, page_meta
from app.schemas.report import ReportCreate, ReportPage, ReportResponse, ReportStatusUpdate
from app.schemas.token import TokenPayload
from app.services.activity_service import ActivityLogger
from app.services.report_service import ReportService
from app.utils.pagination import Pagination
from app.utils.security import get_optional_user, require_admin

reports_router = APIRouter()


def get_report_service(
    db: AsyncSession = Depends(get_db),
    activity: ActivityLogger = Depends(get_activity_logger),
) -> ReportService:
    return ReportService(db, activity)


@reports_router.post("/", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
async def report_content(
    payload: ReportCreate,
    user: Optional[TokenPayload] = Depends(get_optional_user),
    service: ReportService = Depends(get_report_service),
):
    try:
        await service.report_content(payload, reporter_id=user.id if user else None)
        return MessageResponse(message=f"{payload.content_type.value} reported successfully")
    except AppError:
        raise
    except Exception as e:
        logger.exception(f"Error reporting content: {e}")
        raise ServerError("Failed to report content", e)


@reports_router.get("/", response_model=ReportPage)
async def get_reports(
    report_status: Optional[ReportStatus] = Query(default=None, alias="status"),
    content_type: Optional[ContentKind] = Query(default=None, alias="contentType"),
    pagination: Pagination = Depends(),
    admin: TokenPayload = Depends(require_admin),
    service: ReportService = Depends(get_report_service),
):
    try:
        reports, total = await service.get_reports(pagination, status=report_status, content_type=content_type)
        return ReportPage(
            **page_meta(total, pagination.page, pagination.limit),
            reports=[ReportResponse.model_validate(report) for report in reports],
        )
    except AppError:
        raise
    except Exception as e:
        logger.exception(f"Error fetching reports: {e}")
        raise ServerError("Failed to fetch reports", e)


@reports_router.patch("/{report_id}", response_model=ReportResponse)
async def update_report_status(
    report_id: UUID,
    payload: ReportStatusUpdate,
    admin: TokenPayload = Depends(require_admin),
    service: ReportService = Depends(get_report_service),
):
    try:
        return ReportResponse.model_validate(await service.update_report_status(report_id, payload.status))
    except AppError:
        raise
    except Exception as e:
        logger.exception(f"Error updating report {report_id}: {e}")
        raise ServerError("Failed to update report", e)
