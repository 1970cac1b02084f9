"""Section schemas."""

from __future__ import annotations

from uuid import UUID

from pydantic import Field, field_validator

from .base import BaseModelSchema, BaseSchema
from .task import TaskResponse


class SectionCreate(BaseSchema):
    name: str = Field(..., min_length=1, max_length=255)
    order: int | None = Field(None, ge=0)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Section name is required")
        return v


class SectionResponse(BaseModelSchema):
    project_id: UUID
    name: str
    order: int
    task_count: int | None = None


class SectionWithTasks(SectionResponse):
    tasks: list[TaskResponse] = []


class SectionListResponse(BaseSchema):
    success: bool = True
    sections: list[SectionWithTasks]


class SectionEnvelope(BaseSchema):
    success: bool = True
    message: str | None = None
    section: SectionResponse
