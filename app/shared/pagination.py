"""Pagination utilities."""

from collections.abc import Sequence
from typing import Any, Dict

from pydantic import BaseModel, Field
from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm.interfaces import LoaderOption
from sqlalchemy.sql import Select


class PaginationParams(BaseModel):
    """Pagination parameters."""

    page: int = Field(default=1, ge=1, description="Page number (1-based)")
    size: int = Field(default=20, ge=1, le=100, description="Page size")


async def paginate(
    db: AsyncSession,
    query: Select,
    pagination: PaginationParams,
    options: Sequence[LoaderOption] = (),
) -> Dict[str, Any]:
    """
    Paginate a SQLAlchemy query.

    Args:
        db: Database session
        query: SQLAlchemy select query
        pagination: Pagination parameters
        options: Loader options applied to the page query only

    Returns:
        Dictionary with pagination info and items
    """

    # Count over the bare query; loader options and ordering don't affect the total
    subquery = query.order_by(None).subquery()
    count_query = select(func.count()).select_from(subquery)
    total_result = await db.execute(count_query)
    total = total_result.scalar() or 0

    # Calculate pagination info
    total_pages = (total + pagination.size - 1) // pagination.size  # Ceiling division
    has_next = pagination.page < total_pages
    has_prev = pagination.page > 1

    # Apply pagination to query
    offset = (pagination.page - 1) * pagination.size
    paginated_query = query.options(*options).offset(offset).limit(pagination.size)

    # Execute query
    result = await db.execute(paginated_query)
    items = result.scalars().all()

    return {
        "items": items,
        "total": total,
        "page": pagination.page,
        "size": pagination.size,
        "has_next": has_next,
        "has_prev": has_prev,
        "total_pages": total_pages,
    }
