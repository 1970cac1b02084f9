"""Workspace API controller with FastAPI endpoints."""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.dependencies import get_current_principal, get_db
from app.core.security import Principal
from app.domains.workspace.service import WorkspaceService
from app.schemas.workspace import (
    MemberAdd,
    MemberEnvelope,
    MemberListResponse,
    MemberResponse,
    WorkspaceCreate,
    WorkspaceEnvelope,
    WorkspaceListResponse,
    WorkspaceResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/workspaces", tags=["workspaces"])


@router.get("/", response_model=WorkspaceListResponse)
async def get_workspaces(
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """List the workspaces the caller belongs to."""
    workspaces = await WorkspaceService(db).list_workspaces(principal.user_id)
    return WorkspaceListResponse(
        workspaces=[WorkspaceResponse.model_validate(w) for w in workspaces],
        total=len(workspaces),
    )


@router.post("/", response_model=WorkspaceEnvelope, status_code=201)
async def create_workspace(
    workspace_data: WorkspaceCreate,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """Create a workspace with the caller as its admin."""
    workspace = await WorkspaceService(db).create_workspace(workspace_data, principal.user_id)
    return WorkspaceEnvelope(
        message="Workspace created successfully",
        workspace=WorkspaceResponse.model_validate(workspace),
    )


@router.get("/{workspace_id}/members", response_model=MemberListResponse)
async def get_members(
    workspace_id: UUID = Path(..., description="Workspace ID"),
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """List a workspace's members."""
    members = await WorkspaceService(db).list_members(workspace_id, principal.user_id)
    return MemberListResponse(
        members=[MemberResponse.model_validate(m) for m in members],
        total=len(members),
    )


@router.post("/{workspace_id}/members", response_model=MemberEnvelope, status_code=201)
async def add_member(
    member_data: MemberAdd,
    workspace_id: UUID = Path(..., description="Workspace ID"),
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """Add an existing user to a workspace (admins only)."""
    member = await WorkspaceService(db).add_member(workspace_id, member_data, principal.user_id)
    return MemberEnvelope(
        message="Member added successfully", member=MemberResponse.model_validate(member)
    )
