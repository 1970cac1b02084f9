"""Base schemas for the application.

Every schema speaks camelCase on the wire (``workspaceId``,
``accessToken``) and accepts snake_case field names as well.
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class BaseSchema(BaseModel):
    """Base schema class with common configuration."""

    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class BaseModelSchema(BaseSchema):
    """Base schema for database models."""

    id: UUID
    created_at: datetime
    updated_at: datetime | None = None


class SuccessResponse(BaseSchema):
    """Standard acknowledgement for mutations that return no entity."""

    success: bool = True
    message: str | None = None
