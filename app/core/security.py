"""Security related functions: password hashing and token issuance."""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from uuid import UUID

import bcrypt
import jwt

from app.core.config import settings
from app.exceptions.auth import InvalidTokenError, TokenExpiredError

logger = logging.getLogger(__name__)


def hash_password(password: str) -> str:
    """Hash a plaintext password with bcrypt."""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str | None) -> bool:
    """Check a plaintext password against a stored bcrypt hash."""
    if not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash.
        return False


class TokenKind(str, Enum):
    ACCESS = "access"
    REFRESH = "refresh"


@dataclass(frozen=True)
class Principal:
    """Identity carried by a verified token."""

    user_id: UUID
    email: str


class TokenService:
    """
    Issues and verifies access and refresh tokens.

    Both kinds sign the payload ``{userId, email}`` but with distinct
    secrets and lifetimes, so a refresh token never verifies as an access
    token and vice versa. Verification is pure: it reads nothing but the
    token and the configured secrets.

    :ivar algorithm: JWT signing algorithm.
    :type algorithm: str
    """

    def __init__(
        self,
        access_secret: str | None = None,
        refresh_secret: str | None = None,
        algorithm: str | None = None,
        access_ttl: timedelta | None = None,
        refresh_ttl: timedelta | None = None,
    ):
        self.algorithm = algorithm or settings.jwt_algorithm
        self._secrets = {
            TokenKind.ACCESS: access_secret or settings.jwt_secret_key,
            TokenKind.REFRESH: refresh_secret or settings.jwt_refresh_secret_key,
        }
        self._ttls = {
            TokenKind.ACCESS: access_ttl
            or timedelta(minutes=settings.access_token_expire_minutes),
            TokenKind.REFRESH: refresh_ttl or timedelta(days=settings.refresh_token_expire_days),
        }

    def ttl(self, kind: TokenKind) -> timedelta:
        return self._ttls[kind]

    def issue_access_token(self, principal: Principal) -> str:
        return self._issue(principal, TokenKind.ACCESS)

    def issue_refresh_token(self, principal: Principal) -> str:
        return self._issue(principal, TokenKind.REFRESH)

    def verify(self, token: str, kind: TokenKind = TokenKind.ACCESS) -> Principal:
        """
        Verify a token of the given kind and return its principal.

        :raises TokenExpiredError: The signature is valid but the token has expired.
        :raises InvalidTokenError: Anything else: bad signature, wrong kind,
            malformed payload.
        """
        if not token:
            raise InvalidTokenError()
        try:
            payload = jwt.decode(
                token,
                self._secrets[kind],
                algorithms=[self.algorithm],
                options={"require": ["exp", "userId", "email"]},
            )
        except jwt.ExpiredSignatureError as e:
            raise TokenExpiredError() from e
        except jwt.InvalidTokenError as e:
            logger.debug("Rejected %s token: %s", kind.value, e)
            raise InvalidTokenError() from e

        if payload.get("type", kind.value) != kind.value:
            raise InvalidTokenError()
        try:
            return Principal(user_id=UUID(str(payload["userId"])), email=str(payload["email"]))
        except ValueError as e:
            raise InvalidTokenError() from e

    def _issue(self, principal: Principal, kind: TokenKind) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            "userId": str(principal.user_id),
            "email": principal.email,
            "type": kind.value,
            "iat": now,
            "exp": now + self._ttls[kind],
        }
        if kind is TokenKind.REFRESH:
            # Two logins in the same second must still yield distinct session rows.
            payload["jti"] = uuid.uuid4().hex
        return jwt.encode(payload, self._secrets[kind], algorithm=self.algorithm)


token_service = TokenService()
