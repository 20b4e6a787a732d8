from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_activity_logger, get_mailer, get_settings
from app.core.config import Settings
from app.core.exceptions import AppError, ServerError
from app.db.database import get_db
from app.schemas.common import MessageResponse
from app.schemas.token import Token, TokenPayload, TokenType
from app.schemas.user import (
    ChangePasswordRequest,
    ForgotPasswordRequest,
    ProfileUpdateResponse,
    ResetPasswordRequest,
    UserCreate,
    UserList,
    UserLogin,
    UserResponse,
    UserUpdate,
)
from app.services.activity_service import ActivityLogger
from app.services.email_service import EmailService
from app.services.user_service import UserService
from app.utils.security import get_current_user, get_reset_user, verify_token

users_router = APIRouter()


def get_user_service(
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
    mailer: EmailService = Depends(get_mailer),
    activity: ActivityLogger = Depends(get_activity_logger),
) -> UserService:
    return UserService(db, settings, mailer=mailer, activity=activity)


@users_router.post("/signup", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
async def sign_up(payload: UserCreate, service: UserService = Depends(get_user_service)):
    try:
        await service.sign_up(payload)
        return MessageResponse(
            message="Registration successful! Please check your email to activate your account."
        )
    except AppError:
        raise
    except Exception as e:
        logger.exception(f"Error registering user: {e}")
        raise ServerError("Failed to register user", e)


@users_router.post("/signin", response_model=Token)
async def sign_in(payload: UserLogin, service: UserService = Depends(get_user_service)):
    try:
        return Token(token=await service.sign_in(payload.email, payload.password))
    except AppError:
        raise
    except Exception as e:
        logger.exception(f"Error signing in: {e}")
        raise ServerError("Failed to sign in", e)


@users_router.get("/activate", response_model=MessageResponse)
async def activate_account(
    token: str = Query(..., min_length=1),
    settings: Settings = Depends(get_settings),
    service: UserService = Depends(get_user_service),
):
    identity = verify_token(token, settings.jwt, TokenType.ACTIVATION)
    try:
        await service.activate(identity.id)
        return MessageResponse(message="Your account has been activated successfully.")
    except AppError:
        raise
    except Exception as e:
        logger.exception(f"Error activating account {identity.id}: {e}")
        raise ServerError("Failed to activate account", e)


@users_router.post("/change-password", response_model=MessageResponse)
async def change_password(
    payload: ChangePasswordRequest,
    user: TokenPayload = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
):
    try:
        await service.change_password(user.id, payload.old_password, payload.new_password)
        return MessageResponse(message="Your password has been updated successfully.")
    except AppError:
        raise
    except Exception as e:
        logger.exception(f"Error changing password for {user.id}: {e}")
        raise ServerError("Failed to change password", e)


@users_router.post("/forgot-password", response_model=MessageResponse)
async def forgot_password(payload: ForgotPasswordRequest, service: UserService = Depends(get_user_service)):
    try:
        await service.forgot_password(payload.email)
        return MessageResponse(message="A password reset link has been sent to your email address.")
    except AppError:
        raise
    except Exception as e:
        logger.exception(f"Error sending reset link: {e}")
        raise ServerError("Failed to send password reset email", e)


@users_router.post("/reset-password", response_model=MessageResponse)
async def reset_password(
    payload: ResetPasswordRequest,
    user: TokenPayload = Depends(get_reset_user),
    service: UserService = Depends(get_user_service),
):
    try:
        await service.reset_password(user.id, payload.new_password)
        return MessageResponse(message="Your password has been reset successfully.")
    except AppError:
        raise
    except Exception as e:
        logger.exception(f"Error resetting password for {user.id}: {e}")
        raise ServerError("Failed to reset password", e)


@users_router.put("/", response_model=ProfileUpdateResponse)
async def update_user(
    payload: UserUpdate,
    user: TokenPayload = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
):
    try:
        updated = await service.update_user(user.id, payload)
        return ProfileUpdateResponse(
            message="Your profile has been updated successfully.",
            user=UserResponse.model_validate(updated),
        )
    except AppError:
        raise
    except Exception as e:
        logger.exception(f"Error updating user {user.id}: {e}")
        raise ServerError("Failed to update user", e)


@users_router.delete("/", response_model=MessageResponse)
async def delete_user(
    user: TokenPayload = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
):
    try:
        await service.delete_user(user.id)
        return MessageResponse(message="User has been deleted successfully.")
    except AppError:
        raise
    except Exception as e:
        logger.exception(f"Error deleting user {user.id}: {e}")
        raise ServerError("Failed to delete user", e)


@users_router.get("/my-account", response_model=UserResponse)
async def my_account(
    user: TokenPayload = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
):
    try:
        return UserResponse.model_validate(await service.get_user(user.id))
    except AppError:
        raise
    except Exception as e:
        logger.exception(f"Error fetching account {user.id}: {e}")
        raise ServerError("Failed to fetch account", e)


@users_router.get("/search", response_model=UserList)
async def search_users(
    q: Optional[str] = None,
    user_status: Optional[str] = Query(default=None, alias="status"),
    role: Optional[str] = None,
    user: TokenPayload = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
):
    try:
        users = await service.search_users(q=q, status=user_status, role=role)
        return UserList(users=[UserResponse.model_validate(found) for found in users])
    except AppError:
        raise
    except Exception as e:
        logger.exception(f"Error searching users: {e}")
        raise ServerError("Failed to search users", e)


@users_router.get("/{user_id}", response_model=UserResponse)
async def view_user(
    user_id: UUID,
    user: TokenPayload = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
):
    try:
        return UserResponse.model_validate(await service.get_user(user_id))
    except AppError:
        raise
    except Exception as e:
        logger.exception(f"Error fetching user {user_id}: {e}")
        raise ServerError("Failed to fetch user", e)
