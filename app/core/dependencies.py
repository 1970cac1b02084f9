# app/core/dependencies.py
import logging

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.security import Principal, TokenKind, token_service
from app.database import get_db
from app.domains.user.service import UserService
from app.exceptions.auth import InvalidTokenError
from app.exceptions.base import AuthenticationError
from models import User

logger = logging.getLogger(__name__)

ACCESS_TOKEN_COOKIE = "access_token"
REFRESH_TOKEN_COOKIE = "refresh_token"

security = HTTPBearer(auto_error=False)

__all__ = [
    "ACCESS_TOKEN_COOKIE",
    "REFRESH_TOKEN_COOKIE",
    "get_bearer_token",
    "get_current_principal",
    "get_current_user",
    "get_db",
]


def get_bearer_token(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> str:
    """Read the access token from the Authorization header, else the cookie.

    Raises:
        AuthenticationError: If neither carries a token
    """
    if credentials and credentials.credentials:
        return credentials.credentials

    token = request.cookies.get(ACCESS_TOKEN_COOKIE)
    if token:
        return token

    raise AuthenticationError("Missing or invalid authorization header")


def get_current_principal(
    request: Request,
    token: str = Depends(get_bearer_token),
) -> Principal:
    """Verify the access token and return the identity it carries.

    Verification failure always means unauthenticated; an expired token
    raises ``TokenExpiredError`` so clients can refresh and retry.
    """
    principal = token_service.verify(token, TokenKind.ACCESS)

    # Add user info to request state for logging
    request.state.user_id = principal.user_id
    return principal


async def get_current_user(
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Load the user behind the principal.

    Raises:
        InvalidTokenError: If the user no longer exists or is inactive
    """
    user = await UserService(db).get_user_by_id(principal.user_id)
    if not user or not user.is_active:
        logger.warning("Token for unknown or inactive user %s", principal.user_id)
        raise InvalidTokenError("User account is not available")
    return user
