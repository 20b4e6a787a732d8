from datetime import datetime, timedelta, timezone
from typing import Optional
from uuid import UUID

from fastapi import Depends, Request
from fastapi.security import APIKeyHeader
import jwt
from loguru import logger
from passlib.context import CryptContext

from app.core.config import JWTSettings
from app.core.exceptions import AuthenticationError, ServerError
from app.schemas.token import TokenPayload, TokenType

auth_scheme = APIKeyHeader(name="Authorization", scheme_name="Bearer", auto_error=False)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

NO_TOKEN_MESSAGE = "Authentication failed: No token was provided."
INVALID_TOKEN_MESSAGE = "Authentication failed: Invalid token provided."
FORBIDDEN_MESSAGE = "You are not authorized to perform this action."


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    try:
        return pwd_context.verify(plain, hashed)
    except ValueError:
        return False


def create_token(
    user_id: UUID,
    role: str,
    jwt_settings: JWTSettings,
    token_type: TokenType = TokenType.ACCESS,
    expires_in: Optional[timedelta] = None,
) -> str:
    expire = datetime.now(timezone.utc) + (expires_in or timedelta(days=jwt_settings.token_expire_days))
    payload = {
        "id": str(user_id),
        "role": role,
        "type": token_type.value,
        "exp": expire,
    }
    return jwt.encode(payload, jwt_settings.secret_key, algorithm=jwt_settings.algorithm)


def verify_token(token: str, jwt_settings: JWTSettings, expected_type: TokenType = TokenType.ACCESS) -> TokenPayload:
    try:
        payload = jwt.decode(token, jwt_settings.secret_key, algorithms=[jwt_settings.algorithm])
    except jwt.InvalidTokenError:
        raise AuthenticationError(INVALID_TOKEN_MESSAGE)

    try:
        identity = TokenPayload(
            id=payload.get("id"),
            role=payload.get("role") or "user",
            type=payload.get("type") or TokenType.ACCESS.value,
        )
    except ValueError:
        raise AuthenticationError(INVALID_TOKEN_MESSAGE)

    if identity.type != expected_type:
        raise AuthenticationError(INVALID_TOKEN_MESSAGE)
    return identity


def _extract_bearer(token: Optional[str]) -> Optional[str]:
    if not token:
        return None
    if token.startswith("Bearer "):
        token = token[7:]
    return token.strip() or None


def _authenticate(request: Request, token: Optional[str], expected_type: TokenType) -> TokenPayload:
    raw = _extract_bearer(token)
    if raw is None:
        raise AuthenticationError(NO_TOKEN_MESSAGE)

    try:
        return verify_token(raw, request.app.state.settings.jwt, expected_type)
    except AuthenticationError:
        raise
    except Exception as e:
        logger.exception(f"Token verification failed unexpectedly: {e}")
        raise ServerError(
            "Authentication failed: An internal server error occurred. Please try again later."
        )


async def get_current_user(request: Request, token: Optional[str] = Depends(auth_scheme)) -> TokenPayload:
    return _authenticate(request, token, TokenType.ACCESS)


async def get_optional_user(request: Request, token: Optional[str] = Depends(auth_scheme)) -> Optional[TokenPayload]:
    """Identity of the caller when a valid token is sent, ``None`` for anonymous callers."""
    if _extract_bearer(token) is None:
        return None
    return _authenticate(request, token, TokenType.ACCESS)


async def get_reset_user(request: Request, token: Optional[str] = Depends(auth_scheme)) -> TokenPayload:
    return _authenticate(request, token, TokenType.RESET)


async def require_admin(user: TokenPayload = Depends(get_current_user)) -> TokenPayload:
    if not user.is_admin:
        raise AuthenticationError(FORBIDDEN_MESSAGE)
    return user
