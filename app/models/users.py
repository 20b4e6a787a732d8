from enum import Enum

from sqlalchemy import Boolean, Column, DateTime, Integer, String, Uuid

from app.db.database import BaseModel
from app.utils.dates import utcnow


class UserRole(str, Enum):
    ADMIN = "admin"
    USER = "user"


class Users(BaseModel):
    __tablename__ = "users"

    email = Column(String(255), unique=True, index=True, nullable=False)
    password = Column(String(255), nullable=False)
    username = Column(String(100), unique=True, index=True, nullable=True)

    first_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)

    email_activated = Column(Boolean, default=False, nullable=False)
    role = Column(String(20), default=UserRole.USER.value, nullable=False, index=True)
    status = Column(String(20), default="active", nullable=False, index=True)
    accept_marketing = Column(Boolean, default=False, nullable=False)
    accept_terms = Column(Boolean, default=False, nullable=False)

    credits = Column(Integer, default=5, nullable=False)
    subscription_tier_id = Column(Uuid, nullable=True)
    subscription_end_date = Column(DateTime, nullable=True)
    last_credit_refresh = Column(DateTime, default=utcnow, nullable=False)
    next_credit_refresh_date = Column(DateTime, default=utcnow, nullable=False)

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value
