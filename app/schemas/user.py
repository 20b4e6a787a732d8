from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class UserBase(BaseModel):
    email: EmailStr
    username: Optional[str] = Field(default=None, min_length=1, max_length=100)
    first_name: Optional[str] = Field(default=None, max_length=100, alias="firstName")
    last_name: Optional[str] = Field(default=None, max_length=100, alias="lastName")

    model_config = ConfigDict(populate_by_name=True)


class UserCreate(UserBase):
    password: str = Field(..., min_length=6)
    accept_marketing: bool = Field(default=False, alias="acceptMarketing")
    accept_terms: bool = Field(default=False, alias="acceptTerms")


class UserLogin(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class UserUpdate(BaseModel):
    """Self-service profile update. Unknown fields, the password included, are ignored."""

    email: Optional[EmailStr] = None
    username: Optional[str] = Field(default=None, min_length=1, max_length=100)
    first_name: Optional[str] = Field(default=None, max_length=100, alias="firstName")
    last_name: Optional[str] = Field(default=None, max_length=100, alias="lastName")
    accept_marketing: Optional[bool] = Field(default=None, alias="acceptMarketing")
    accept_terms: Optional[bool] = Field(default=None, alias="acceptTerms")

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class ChangePasswordRequest(BaseModel):
    old_password: str = Field(..., min_length=1, alias="oldPassword")
    new_password: str = Field(..., min_length=6, alias="newPassword")

    model_config = ConfigDict(populate_by_name=True)


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class ResetPasswordRequest(BaseModel):
    new_password: str = Field(..., min_length=6, alias="newPassword")

    model_config = ConfigDict(populate_by_name=True)


class UserResponse(BaseModel):
    id: UUID
    email: str
    username: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email_activated: bool
    role: str
    status: str
    accept_marketing: bool
    accept_terms: bool
    credits: int
    subscription_tier_id: Optional[UUID] = None
    subscription_end_date: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class UserBrief(BaseModel):
    id: UUID
    username: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class UserList(BaseModel):
    users: List[UserResponse]


class ProfileUpdateResponse(BaseModel):
    message: str
    user: UserResponse
