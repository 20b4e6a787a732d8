from enum import Enum
from uuid import UUID

from pydantic import BaseModel

from app.models.users import UserRole


class TokenType(str, Enum):
    ACCESS = "access"
    ACTIVATION = "activation"
    RESET = "reset"


class Token(BaseModel):
    token: str


class TokenPayload(BaseModel):
    """Identity attached to an authenticated request."""

    id: UUID
    role: str
    type: TokenType = TokenType.ACCESS

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value
