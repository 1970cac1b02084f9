"""Authentication service: credential checks, token issuance, sessions."""

import logging
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.security import Principal, TokenKind, TokenService, token_service, verify_password
from app.domains.auth.sessions import SessionLedger
from app.domains.user.service import UserService
from app.exceptions.auth import InvalidCredentialsError, InvalidTokenError, SessionRevokedError
from app.schemas.user import RegisterRequest
from models.user import User

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoginResult:
    user: User
    access_token: str
    refresh_token: str


class AuthService:
    """Service class for authentication business logic."""

    def __init__(self, db: AsyncSession, tokens: TokenService | None = None):
        self.db = db
        self.tokens = tokens or token_service
        self.users = UserService(db)
        self.sessions = SessionLedger(db)

    async def verify_credentials(self, email: str, password: str) -> User:
        """Return the user for a matching email/password pair.

        Unknown email, wrong password and deactivated account are
        indistinguishable to the caller.
        """
        user = await self.users.get_user_by_email(email)
        if not user or not user.is_active or not verify_password(password, user.password_hash):
            raise InvalidCredentialsError()
        return user

    async def login(self, email: str, password: str) -> LoginResult:
        try:
            user = await self.verify_credentials(email, password)
        except InvalidCredentialsError:
            logger.info("Failed login attempt for %s", email)
            raise
        result = await self._start_session(user)
        logger.info("User %s logged in", user.id)
        return result

    async def register(self, data: RegisterRequest) -> LoginResult:
        user = await self.users.create_user(
            email=str(data.email), password=data.password, name=data.name
        )
        logger.info("Registered user %s", user.id)
        return await self._start_session(user)

    async def refresh_access_token(self, refresh_token: str | None) -> str:
        """Issue a new access token for a live refresh-token session."""
        if not refresh_token:
            raise InvalidTokenError("Refresh token is required")
        principal = self.tokens.verify(refresh_token, TokenKind.REFRESH)
        if not await self.sessions.is_active(refresh_token):
            raise SessionRevokedError()
        return self.tokens.issue_access_token(principal)

    async def logout(self, refresh_token: str | None) -> bool:
        if not refresh_token:
            return False
        return await self.sessions.revoke(refresh_token)

    async def _start_session(self, user: User) -> LoginResult:
        principal = Principal(user_id=user.id, email=user.email)
        access_token = self.tokens.issue_access_token(principal)
        refresh_token = self.tokens.issue_refresh_token(principal)
        await self.sessions.record_session(
            user.id, refresh_token, self.tokens.ttl(TokenKind.REFRESH)
        )
        return LoginResult(user=user, access_token=access_token, refresh_token=refresh_token)
