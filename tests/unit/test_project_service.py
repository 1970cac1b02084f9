"""
Unit tests for ProjectService.

Covers role-gated creation and updates, the duplicate-name rule, the
explicit-null handling of partial updates and deletion rules.
"""

import uuid

import pytest

from app.domains.project.service import ProjectService
from app.exceptions.project import (
    DuplicateProjectError,
    ProjectHasTasksError,
    ProjectNotFoundError,
)
from app.exceptions.workspace import InsufficientRoleError, WorkspaceAccessDeniedError
from app.schemas.project import ProjectCreate, ProjectUpdate
from models import WorkspaceRole

from factories import MemberFactory, ProjectFactory, SectionFactory, WorkspaceFactory, persist


class TestCreateProject:
    @pytest.mark.asyncio
    async def test_create_project_success(self, test_db, test_user, test_workspace):
        """Test successful project creation."""
        result = await ProjectService(test_db).create_project(
            ProjectCreate(name="Roadmap", workspace_id=test_workspace.id), test_user.id
        )

        assert result["name"] == "Roadmap"
        assert result["color"] == "#0066FF"
        assert result["workspace_name"] == "Acme"
        assert result["member_role"] is WorkspaceRole.ADMIN
        assert result["sections"] == []
        assert result["task_count"] == 0

    @pytest.mark.asyncio
    async def test_create_with_default_sections(self, test_db, test_user, test_workspace):
        result = await ProjectService(test_db).create_project(
            ProjectCreate(
                name="Board", workspace_id=test_workspace.id, create_default_sections=True
            ),
            test_user.id,
        )

        assert [(s["name"], s["order"]) for s in result["sections"]] == [
            ("To Do", 1),
            ("In Progress", 2),
            ("Review", 3),
            ("Done", 4),
        ]
        assert result["section_count"] == 4

    @pytest.mark.asyncio
    async def test_member_may_create(self, test_db, test_user_2, workspace_member, test_workspace):
        result = await ProjectService(test_db).create_project(
            ProjectCreate(name="Mine", workspace_id=test_workspace.id), test_user_2.id
        )
        assert result["member_role"] is WorkspaceRole.MEMBER

    @pytest.mark.asyncio
    async def test_viewer_cannot_create(self, test_db, viewer, test_workspace):
        with pytest.raises(InsufficientRoleError):
            await ProjectService(test_db).create_project(
                ProjectCreate(name="Nope", workspace_id=test_workspace.id), viewer.id
            )

    @pytest.mark.asyncio
    @pytest.mark.parametrize("use_real_workspace", [True, False])
    async def test_non_member_denied_regardless_of_workspace(
        self, test_db, outsider, test_workspace, use_real_workspace
    ):
        workspace_id = test_workspace.id if use_real_workspace else uuid.uuid4()

        with pytest.raises(WorkspaceAccessDeniedError):
            await ProjectService(test_db).create_project(
                ProjectCreate(name="Nope", workspace_id=workspace_id), outsider.id
            )

    @pytest.mark.asyncio
    async def test_duplicate_name_in_workspace(self, test_db, test_user, test_project):
        with pytest.raises(DuplicateProjectError):
            await ProjectService(test_db).create_project(
                ProjectCreate(name=test_project.name, workspace_id=test_project.workspace_id),
                test_user.id,
            )

    @pytest.mark.asyncio
    async def test_same_name_in_other_workspace(self, test_db, test_user, test_project):
        other = await persist(test_db, WorkspaceFactory.build())
        await persist(
            test_db,
            MemberFactory.build(
                user_id=test_user.id, workspace_id=other.id, role=WorkspaceRole.ADMIN
            ),
        )

        result = await ProjectService(test_db).create_project(
            ProjectCreate(name=test_project.name, workspace_id=other.id), test_user.id
        )
        assert result["workspace_id"] == other.id


class TestGetProjects:
    @pytest.mark.asyncio
    async def test_list_annotates_projects(self, test_db, test_user, test_project, test_task):
        projects = await ProjectService(test_db).get_projects_list(test_user.id)

        assert len(projects) == 1
        assert projects[0]["id"] == test_project.id
        assert projects[0]["workspace_name"] == "Acme"
        assert projects[0]["member_role"] is WorkspaceRole.ADMIN
        assert projects[0]["task_count"] == 1
        assert projects[0]["section_count"] == 0

    @pytest.mark.asyncio
    async def test_list_excludes_foreign_workspaces(self, test_db, outsider, test_project):
        assert await ProjectService(test_db).get_projects_list(outsider.id) == []

    @pytest.mark.asyncio
    async def test_list_filters_by_workspace(self, test_db, test_user, test_project):
        other = await persist(test_db, WorkspaceFactory.build())
        await persist(
            test_db,
            MemberFactory.build(user_id=test_user.id, workspace_id=other.id),
            ProjectFactory.build(workspace_id=other.id),
        )
        service = ProjectService(test_db)

        assert len(await service.get_projects_list(test_user.id)) == 2
        filtered = await service.get_projects_list(test_user.id, workspace_id=other.id)
        assert [p["workspace_id"] for p in filtered] == [other.id]

    @pytest.mark.asyncio
    async def test_detail_lists_sections_and_backlog(
        self, test_db, test_user, test_project, test_section, test_task
    ):
        await persist(test_db, SectionFactory.build(project_id=test_project.id, order=0))

        detail = await ProjectService(test_db).get_project(test_project.id, test_user.id)

        assert [s["order"] for s in detail["sections"]] == [0, 1]
        assert detail["workspace"].id == test_project.workspace_id
        assert [t.id for t in detail["tasks"]] == [test_task.id]
        assert detail["task_count"] == 1

    @pytest.mark.asyncio
    async def test_detail_hidden_from_non_members(self, test_db, outsider, test_project):
        with pytest.raises(ProjectNotFoundError):
            await ProjectService(test_db).get_project(test_project.id, outsider.id)


class TestUpdateProject:
    @pytest.mark.asyncio
    async def test_partial_update(self, test_db, test_user, test_project):
        result = await ProjectService(test_db).update_project(
            test_project.id, ProjectUpdate(icon="rocket"), test_user.id
        )

        assert result["icon"] == "rocket"
        assert result["name"] == "Test Project"

    @pytest.mark.asyncio
    async def test_explicit_nulls(self, test_db, test_user, test_project):
        await ProjectService(test_db).update_project(
            test_project.id, ProjectUpdate(icon="rocket"), test_user.id
        )

        result = await ProjectService(test_db).update_project(
            test_project.id,
            ProjectUpdate.model_validate(
                {"name": None, "color": None, "description": None, "icon": None}
            ),
            test_user.id,
        )

        assert result["name"] == "Test Project"
        assert result["color"] == "#0066FF"
        assert result["description"] is None
        assert result["icon"] is None

    @pytest.mark.asyncio
    async def test_rename_onto_existing_name(self, test_db, test_user, test_project):
        other = await persist(
            test_db, ProjectFactory.build(workspace_id=test_project.workspace_id, name="Other")
        )

        with pytest.raises(DuplicateProjectError):
            await ProjectService(test_db).update_project(
                other.id, ProjectUpdate(name=test_project.name), test_user.id
            )

    @pytest.mark.asyncio
    async def test_viewer_update_is_hidden(self, test_db, viewer, test_project):
        with pytest.raises(ProjectNotFoundError):
            await ProjectService(test_db).update_project(
                test_project.id, ProjectUpdate(name="x"), viewer.id
            )


class TestDeleteProject:
    @pytest.mark.asyncio
    async def test_delete_empty_project_cascades_sections(
        self, test_db, test_user, test_project, test_section
    ):
        service = ProjectService(test_db)

        assert await service.delete_project(test_project.id, test_user.id) is True
        with pytest.raises(ProjectNotFoundError):
            await service.get_project(test_project.id, test_user.id)

    @pytest.mark.asyncio
    async def test_delete_with_tasks_conflicts(self, test_db, test_user, test_task):
        with pytest.raises(ProjectHasTasksError) as exc_info:
            await ProjectService(test_db).delete_project(test_task.project_id, test_user.id)
        assert exc_info.value.task_count == 1

    @pytest.mark.asyncio
    async def test_member_cannot_delete(self, test_db, test_user_2, workspace_member, test_project):
        with pytest.raises(ProjectNotFoundError):
            await ProjectService(test_db).delete_project(test_project.id, test_user_2.id)
