"""Session ledger: the record of refresh tokens issued at login."""

import logging
from datetime import datetime, timedelta, timezone
from uuid import UUID

from sqlalchemy import and_, delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from app.shared.persistence import commit_or_raise
from models.session import UserSession

logger = logging.getLogger(__name__)


class SessionLedger:
    """Persists refresh-token sessions and answers whether one is still live.

    A session is written once per login, never per access-token refresh.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def record_session(
        self, user_id: UUID, refresh_token: str, ttl: timedelta
    ) -> UserSession:
        session = UserSession(
            user_id=user_id,
            refresh_token=refresh_token,
            expires_at=datetime.now(timezone.utc) + ttl,
        )
        self.db.add(session)
        await commit_or_raise(self.db, "record session")
        await self.db.refresh(session)
        logger.info("Recorded session %s for user %s", session.id, user_id)
        return session

    async def is_active(self, refresh_token: str) -> bool:
        """True when the token has a session row that has not expired."""
        stmt = select(UserSession.id).where(
            and_(
                UserSession.refresh_token == refresh_token,
                UserSession.expires_at > datetime.now(timezone.utc),
            )
        )
        result = await self.db.execute(stmt)
        return result.first() is not None

    async def revoke(self, refresh_token: str) -> bool:
        """Delete the session for a refresh token. Returns whether one existed."""
        stmt = delete(UserSession).where(UserSession.refresh_token == refresh_token)
        result = await self.db.execute(stmt)
        await commit_or_raise(self.db, "revoke session")
        revoked = (result.rowcount or 0) > 0
        if revoked:
            logger.info("Revoked session")
        return revoked

    async def purge_expired(self) -> int:
        """Remove sessions past their expiry; returns how many were removed."""
        stmt = delete(UserSession).where(UserSession.expires_at <= datetime.now(timezone.utc))
        result = await self.db.execute(stmt)
        await commit_or_raise(self.db, "purge expired sessions")
        return result.rowcount or 0
