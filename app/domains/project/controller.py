"""Project API controller with FastAPI endpoints."""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.ext.asyncio import AsyncSession

# Import schemas to ensure model rebuilding happens
import app.schemas  # noqa: F401
from app.core.dependencies import get_current_principal, get_db
from app.core.security import Principal
from app.domains.project.service import ProjectService
from app.schemas.base import SuccessResponse
from app.schemas.project import (
    ProjectCreate,
    ProjectDetail,
    ProjectEnvelope,
    ProjectListResponse,
    ProjectResponse,
    ProjectUpdate,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/projects", tags=["projects"])


@router.get("/", response_model=ProjectListResponse)
async def get_projects(
    workspace_id: UUID | None = Query(None, alias="workspaceId"),
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """List projects across the caller's workspaces."""
    projects = await ProjectService(db).get_projects_list(principal.user_id, workspace_id)
    return ProjectListResponse(
        projects=[ProjectResponse.model_validate(p) for p in projects],
        total=len(projects),
    )


@router.post("/", response_model=ProjectEnvelope, status_code=201)
async def create_project(
    project_data: ProjectCreate,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """Create a new project."""
    project = await ProjectService(db).create_project(project_data, principal.user_id)
    return ProjectEnvelope(
        message="Project created successfully", project=ProjectDetail.model_validate(project)
    )


@router.get("/{project_id}", response_model=ProjectEnvelope)
async def get_project(
    project_id: UUID = Path(..., description="Project ID"),
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """Get a specific project by ID."""
    project = await ProjectService(db).get_project(project_id, principal.user_id)
    return ProjectEnvelope(project=ProjectDetail.model_validate(project))


@router.put("/{project_id}", response_model=ProjectEnvelope)
async def update_project(
    project_data: ProjectUpdate,
    project_id: UUID = Path(..., description="Project ID"),
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """Update a project. Only supplied fields change."""
    project = await ProjectService(db).update_project(project_id, project_data, principal.user_id)
    return ProjectEnvelope(
        message="Project updated successfully", project=ProjectDetail.model_validate(project)
    )


@router.delete("/{project_id}", response_model=SuccessResponse)
async def delete_project(
    project_id: UUID = Path(..., description="Project ID"),
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """Delete a project. Refused while it still has tasks."""
    await ProjectService(db).delete_project(project_id, principal.user_id)
    return SuccessResponse(message="Project deleted successfully")
