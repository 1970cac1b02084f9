"""Task API controller with FastAPI endpoints."""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.dependencies import get_current_principal, get_db
from app.core.security import Principal
from app.domains.task.service import TaskService
from app.schemas.base import SuccessResponse
from app.schemas.task import (
    AttachmentCreate,
    AttachmentEnvelope,
    AttachmentResponse,
    CommentCreate,
    CommentEnvelope,
    CommentResponse,
    SubtaskCreate,
    SubtaskEnvelope,
    SubtaskResponse,
    SubtaskUpdate,
    TagCreate,
    TagEnvelope,
    TagResponse,
    TaskCreate,
    TaskDetail,
    TaskEnvelope,
    TaskFilter,
    TaskListResponse,
    TaskResponse,
    TaskUpdate,
)
from app.shared.pagination import PaginationParams
from models.task import TaskStatus

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/tasks", tags=["tasks"])


@router.get("/", response_model=TaskListResponse)
async def get_tasks(
    project_id: UUID | None = Query(None, alias="projectId"),
    status: TaskStatus | None = Query(None),
    page: int = Query(1, ge=1),
    size: int = Query(20, ge=1, le=100),
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """Get paginated list of tasks the caller owns or is assigned."""
    filters = TaskFilter(project_id=project_id, status=status)
    pagination = PaginationParams(page=page, size=size)

    service = TaskService(db)
    result = await service.get_tasks_list(
        user_id=principal.user_id, filters=filters, pagination=pagination
    )

    return TaskListResponse(
        tasks=[TaskResponse.model_validate(task) for task in result["items"]],
        total=result["total"],
        page=result["page"],
        size=result["size"],
        has_next=result["has_next"],
        has_prev=result["has_prev"],
    )


@router.post("/", response_model=TaskEnvelope, status_code=201)
async def create_task(
    task_data: TaskCreate,
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """Create a task; without a project it lands in the caller's default project."""
    task = await TaskService(db).create_task(task_data, principal.user_id)
    return TaskEnvelope(message="Task created successfully", task=TaskDetail.model_validate(task))


@router.get("/{task_id}", response_model=TaskEnvelope)
async def get_task(
    task_id: UUID = Path(..., description="Task ID"),
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    task = await TaskService(db).get_task(task_id, principal.user_id)
    return TaskEnvelope(task=TaskDetail.model_validate(task))


@router.patch("/{task_id}", response_model=TaskEnvelope)
async def update_task(
    task_data: TaskUpdate,
    task_id: UUID = Path(..., description="Task ID"),
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """Partially update a task. Omitted fields are untouched."""
    task = await TaskService(db).update_task(task_id, task_data, principal.user_id)
    return TaskEnvelope(message="Task updated successfully", task=TaskDetail.model_validate(task))


@router.delete("/{task_id}", response_model=SuccessResponse)
async def delete_task(
    task_id: UUID = Path(..., description="Task ID"),
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    await TaskService(db).delete_task(task_id, principal.user_id)
    return SuccessResponse(message="Task deleted successfully")


# Child resources


@router.post("/{task_id}/subtasks", response_model=SubtaskEnvelope, status_code=201)
async def create_subtask(
    subtask_data: SubtaskCreate,
    task_id: UUID = Path(..., description="Task ID"),
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    subtask = await TaskService(db).add_subtask(task_id, subtask_data, principal.user_id)
    return SubtaskEnvelope(subtask=SubtaskResponse.model_validate(subtask))


@router.patch("/{task_id}/subtasks/{subtask_id}", response_model=SubtaskEnvelope)
async def update_subtask(
    subtask_data: SubtaskUpdate,
    task_id: UUID = Path(..., description="Task ID"),
    subtask_id: UUID = Path(..., description="Subtask ID"),
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    subtask = await TaskService(db).update_subtask(
        task_id, subtask_id, subtask_data, principal.user_id
    )
    return SubtaskEnvelope(subtask=SubtaskResponse.model_validate(subtask))


@router.post("/{task_id}/comments", response_model=CommentEnvelope, status_code=201)
async def create_comment(
    comment_data: CommentCreate,
    task_id: UUID = Path(..., description="Task ID"),
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    comment = await TaskService(db).add_comment(task_id, comment_data, principal.user_id)
    return CommentEnvelope(comment=CommentResponse.model_validate(comment))


@router.post("/{task_id}/attachments", response_model=AttachmentEnvelope, status_code=201)
async def create_attachment(
    attachment_data: AttachmentCreate,
    task_id: UUID = Path(..., description="Task ID"),
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """Record attachment metadata for a file uploaded elsewhere."""
    attachment = await TaskService(db).add_attachment(task_id, attachment_data, principal.user_id)
    return AttachmentEnvelope(attachment=AttachmentResponse.model_validate(attachment))


@router.post("/{task_id}/tags", response_model=TagEnvelope, status_code=201)
async def add_tag(
    tag_data: TagCreate,
    task_id: UUID = Path(..., description="Task ID"),
    principal: Principal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    tag = await TaskService(db).add_tag(task_id, tag_data, principal.user_id)
    return TagEnvelope(tag=TagResponse.model_validate(tag))
