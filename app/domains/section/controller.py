"""Section API controller, nested under projects."""

from uuid import UUID

from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.dependencies import get_current_principal, get_db
from app.core.security import Principal
from app.domains.section.service import SectionService
from app.schemas.section import (
    SectionCreate,
    SectionEnvelope,
    SectionListResponse,
    SectionResponse,
    SectionWithTasks,
)

router = APIRouter(prefix="/api/projects/{project_id}/sections", tags=["sections"])


@router.get("", response_model=SectionListResponse)
async def get_sections(
    project_id: UUID = Path(..., description="Project ID"),
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    sections = await SectionService(db).list_sections(project_id, principal.user_id)
    return SectionListResponse(sections=[SectionWithTasks.model_validate(s) for s in sections])


@router.post("", response_model=SectionEnvelope, status_code=201)
async def create_section(
    section_data: SectionCreate,
    project_id: UUID = Path(..., description="Project ID"),
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    section = await SectionService(db).create_section(project_id, section_data, principal.user_id)
    return SectionEnvelope(
        message="Section created successfully", section=SectionResponse.model_validate(section)
    )
