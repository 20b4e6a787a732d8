from typing import Optional

from fastapi import Depends, Request

from app.core.config import Settings
from app.schemas.token import TokenPayload
from app.services.activity_service import ActivityLogger
from app.services.email_service import EmailService
from app.services.reaction_service import Identity
from app.services.storage_service import VideoStorage
from app.services.thumbnail_service import ThumbnailService
from app.utils.security import get_optional_user

UNKNOWN = "unknown"


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_activity_logger(request: Request) -> ActivityLogger:
    return request.app.state.activity_logger


def get_mailer(request: Request) -> EmailService:
    return request.app.state.mailer


def get_storage(request: Request) -> VideoStorage:
    return request.app.state.storage


def get_thumbnailer(request: Request) -> ThumbnailService:
    return request.app.state.thumbnailer


def client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    if request.client is not None and request.client.host:
        return request.client.host
    return UNKNOWN


async def get_identity(
    request: Request,
    user: Optional[TokenPayload] = Depends(get_optional_user),
) -> Identity:
    device = request.headers.get("x-device-id") or request.headers.get("user-agent") or UNKNOWN
    return Identity(
        device_id=device[:512],
        ip_address=client_ip(request)[:64],
        user_id=user.id if user is not None else None,
    )
