from typing import List, Optional
from uuid import UUID

from loguru import logger
from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import Settings
from app.core.exceptions import AuthenticationError, ConflictError, NotFoundError
from app.models.activities import ActivityAction, ActivityType
from app.models.targets import TargetKind
from app.models.users import Users
from app.schemas.token import TokenType
from app.schemas.user import UserCreate, UserUpdate
from app.services.activity_service import ActivityLogger
from app.services.email_service import EmailService
from app.templates.emails import reset_password_template, signup_template
from app.utils.search import contains_pattern
from app.utils.security import create_token, hash_password, verify_password

INVALID_CREDENTIALS_MESSAGE = "The provided credentials are invalid."
USER_NOT_FOUND_MESSAGE = "User not found. Please verify that you are using the correct details and try again."


class UserService:
    def __init__(
        self,
        db: AsyncSession,
        settings: Settings,
        mailer: Optional[EmailService] = None,
        activity: Optional[ActivityLogger] = None,
    ):
        self.db = db
        self.settings = settings
        self.mailer = mailer
        self.activity = activity

    async def get_by_email(self, email: str) -> Optional[Users]:
        result = await self.db.execute(select(Users).where(Users.email == email.strip().lower()))
        return result.scalar_one_or_none()

    async def get_user(self, user_id: UUID, message: str = USER_NOT_FOUND_MESSAGE) -> Users:
        user = await self.db.get(Users, user_id)
        if user is None:
            raise NotFoundError(message)
        return user

    async def sign_up(self, payload: UserCreate) -> Users:
        email = payload.email.strip().lower()
        if await self.get_by_email(email):
            raise ConflictError("An account with this email already exists.")

        user = Users(
            email=email,
            password=hash_password(payload.password),
            username=payload.username.strip() if payload.username else None,
            first_name=payload.first_name,
            last_name=payload.last_name,
            accept_marketing=payload.accept_marketing,
            accept_terms=payload.accept_terms,
        )
        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            if await self.get_by_email(email):
                raise ConflictError("An account with this email already exists.")
            raise ConflictError("An account with this username already exists.")

        logger.info(f"Registered user {user.id} ({user.email})")

        token = create_token(user.id, user.role, self.settings.jwt, token_type=TokenType.ACTIVATION)
        activation_link = f"{self.settings.app.base_url}/activate?token={token}"
        await self._send(
            user.email,
            "Welcome to Our Service!",
            signup_template(user.username or user.email, activation_link),
        )

        if self.activity:
            self.activity.log(user.id, ActivityType.ACCOUNT, ActivityAction.CREATE, user.id, TargetKind.USER)
        return user

    async def sign_in(self, email: str, password: str) -> str:
        user = await self.get_by_email(email)
        if user is None or not verify_password(password, user.password):
            raise AuthenticationError(INVALID_CREDENTIALS_MESSAGE)
        return create_token(user.id, user.role, self.settings.jwt)

    async def activate(self, user_id: UUID) -> Users:
        user = await self.get_user(user_id)
        if not user.email_activated:
            user.email_activated = True
            await self.db.commit()
            logger.info(f"Activated account {user.id}")
        return user

    async def change_password(self, user_id: UUID, old_password: str, new_password: str) -> None:
        user = await self.db.get(Users, user_id)
        if user is None or not verify_password(old_password, user.password):
            raise AuthenticationError(INVALID_CREDENTIALS_MESSAGE)
        user.password = hash_password(new_password)
        await self.db.commit()

    async def forgot_password(self, email: str) -> None:
        user = await self.get_by_email(email)
        if user is None:
            raise NotFoundError("No user found with the provided email address.")

        token = create_token(user.id, user.role, self.settings.jwt, token_type=TokenType.RESET)
        reset_link = f"{self.settings.app.base_url}/reset-password?token={token}"
        if self.mailer is not None:
            await self.mailer.send(user.email, "Password Reset Request", reset_password_template(reset_link))

    async def reset_password(self, user_id: UUID, new_password: str) -> None:
        user = await self.get_user(user_id)
        user.password = hash_password(new_password)
        await self.db.commit()
        logger.info(f"Password reset for user {user.id}")

    async def update_user(self, user_id: UUID, payload: UserUpdate) -> Users:
        user = await self.get_user(user_id)
        changes = payload.model_dump(exclude_unset=True)
        if changes.get("email"):
            changes["email"] = changes["email"].strip().lower()
        for field, value in changes.items():
            setattr(user, field, value)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise ConflictError("An account with this email or username already exists.")
        return user

    async def delete_user(self, user_id: UUID) -> None:
        user = await self.get_user(user_id)
        await self.db.delete(user)
        await self.db.commit()
        logger.info(f"Deleted user {user_id}")

    async def search_users(
        self,
        q: Optional[str] = None,
        status: Optional[str] = None,
        role: Optional[str] = None,
    ) -> List[Users]:
        stmt = select(Users)
        if q:
            pattern = contains_pattern(q)
            stmt = stmt.where(
                or_(
                    Users.first_name.ilike(pattern, escape="\\"),
                    Users.last_name.ilike(pattern, escape="\\"),
                    Users.email.ilike(pattern, escape="\\"),
                    Users.username.ilike(pattern, escape="\\"),
                )
            )
        if status:
            stmt = stmt.where(Users.status == status)
        if role:
            stmt = stmt.where(Users.role == role)

        result = await self.db.execute(stmt.order_by(Users.created_at))
        return list(result.scalars().all())

    async def _send(self, to: str, subject: str, html: str) -> None:
        if self.mailer is None:
            return
        try:
            await self.mailer.send(to, subject, html)
        except Exception as e:
            logger.exception(f"Failed to send '{subject}' to {to}: {e}")
