"""Commit helpers shared by the domain services.

Persistence failures never reach the client verbatim: unique-constraint
violations become a ``ConflictError`` (or the one supplied by the caller),
everything else is logged and surfaced as a generic ``InternalError``.
"""

import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions.base import BaseAppException, ConflictError, InternalError

logger = logging.getLogger(__name__)


async def commit_or_raise(
    db: AsyncSession,
    action: str,
    conflict: BaseAppException | None = None,
) -> None:
    """Commit the session, rolling back and mapping any failure."""
    try:
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        logger.warning("Integrity error while trying to %s: %s", action, e.orig)
        raise (conflict or ConflictError(f"Failed to {action}: conflicting data")) from e
    except SQLAlchemyError as e:
        await db.rollback()
        logger.exception("Database error while trying to %s", action)
        raise InternalError(f"Failed to {action}") from e
