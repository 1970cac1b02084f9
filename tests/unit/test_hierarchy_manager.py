"""Unit tests for the hierarchy manager: ordering and default containers."""

import pytest
from sqlalchemy import func
from sqlalchemy.future import select

from app.domains.hierarchy.manager import (
    DEFAULT_PROJECT_NAME,
    DEFAULT_WORKSPACE_NAME,
    HierarchyManager,
    default_workspace_slug,
)
from models import Project, Section, Subtask, Workspace, WorkspaceMember, WorkspaceRole

from factories import (
    MemberFactory,
    ProjectFactory,
    SectionFactory,
    TaskFactory,
    WorkspaceFactory,
    persist,
)


async def count(db, model, *criteria) -> int:
    result = await db.execute(select(func.count()).select_from(model).where(*criteria))
    return result.scalar()


class TestEnsureDefaultContainer:
    @pytest.mark.asyncio
    async def test_bootstraps_workspace_project_and_sections(self, test_db, outsider):
        manager = HierarchyManager(test_db)

        project_id = await manager.ensure_default_container(outsider.id)

        project = await test_db.get(Project, project_id)
        workspace = await test_db.get(Workspace, project.workspace_id)
        assert project.name == DEFAULT_PROJECT_NAME
        assert workspace.name == DEFAULT_WORKSPACE_NAME
        assert workspace.slug == default_workspace_slug(outsider.id)

        member = (
            await test_db.execute(
                select(WorkspaceMember).where(WorkspaceMember.user_id == outsider.id)
            )
        ).scalar_one()
        assert member.role is WorkspaceRole.ADMIN

        sections = (
            await test_db.execute(
                select(Section.name, Section.order)
                .where(Section.project_id == project_id)
                .order_by(Section.order)
            )
        ).all()
        assert [tuple(row) for row in sections] == [("To Do", 0), ("In Progress", 1), ("Done", 2)]

    @pytest.mark.asyncio
    async def test_is_idempotent(self, test_db, outsider):
        manager = HierarchyManager(test_db)

        first = await manager.ensure_default_container(outsider.id)
        second = await manager.ensure_default_container(outsider.id)

        assert first == second
        assert await count(test_db, WorkspaceMember, WorkspaceMember.user_id == outsider.id) == 1
        assert await count(test_db, Project) == 1

    @pytest.mark.asyncio
    async def test_reuses_existing_workspace_and_project(self, test_db, test_user, test_project):
        project_id = await HierarchyManager(test_db).ensure_default_container(test_user.id)

        assert project_id == test_project.id
        assert await count(test_db, Workspace) == 1

    @pytest.mark.asyncio
    async def test_creates_project_in_existing_empty_workspace(
        self, test_db, test_user, test_workspace
    ):
        project_id = await HierarchyManager(test_db).ensure_default_container(test_user.id)

        project = await test_db.get(Project, project_id)
        assert project.workspace_id == test_workspace.id
        assert project.name == DEFAULT_PROJECT_NAME
        assert await count(test_db, Workspace) == 1

    @pytest.mark.asyncio
    async def test_prefers_workspace_where_user_can_create(
        self, test_db, test_workspace, viewer
    ):
        own = await persist(test_db, WorkspaceFactory.build())
        await persist(
            test_db,
            MemberFactory.build(user_id=viewer.id, workspace_id=own.id, role=WorkspaceRole.ADMIN),
        )

        project_id = await HierarchyManager(test_db).ensure_default_container(viewer.id)

        project = await test_db.get(Project, project_id)
        assert project.workspace_id == own.id


class TestLostProvisioningRace:
    """The insert hits a unique constraint; the rows already there are reused."""

    # A failed insert rolls the session back and expires every loaded
    # instance, so ids are read before the manager runs.

    @pytest.mark.asyncio
    async def test_workspace_created_by_concurrent_request(self, test_db, outsider):
        user_id = outsider.id
        winner = await persist(
            test_db, WorkspaceFactory.build(slug=default_workspace_slug(user_id))
        )
        winner_id = winner.id
        await persist(
            test_db,
            MemberFactory.build(user_id=user_id, workspace_id=winner_id, role=WorkspaceRole.ADMIN),
        )

        workspace_id = await HierarchyManager(test_db)._create_default_workspace(user_id)

        assert workspace_id == winner_id
        assert await count(test_db, Workspace) == 1
        assert await count(test_db, WorkspaceMember, WorkspaceMember.user_id == user_id) == 1

    @pytest.mark.asyncio
    async def test_default_slug_held_by_foreign_workspace(self, test_db, test_user, outsider):
        user_id = outsider.id
        base = default_workspace_slug(user_id)
        squatted = await persist(test_db, WorkspaceFactory.build(slug=base))
        squatted_id = squatted.id
        await persist(
            test_db,
            MemberFactory.build(
                user_id=test_user.id, workspace_id=squatted_id, role=WorkspaceRole.ADMIN
            ),
        )

        project_id = await HierarchyManager(test_db).ensure_default_container(user_id)

        project = await test_db.get(Project, project_id)
        workspace = await test_db.get(Workspace, project.workspace_id)
        assert workspace.id != squatted_id
        assert workspace.slug.startswith(f"{base}-")
        assert len(workspace.slug) == len(base) + 9
        member = (
            await test_db.execute(
                select(WorkspaceMember).where(WorkspaceMember.user_id == user_id)
            )
        ).scalar_one()
        assert member.workspace_id == workspace.id
        assert member.role is WorkspaceRole.ADMIN
        assert await count(test_db, Project, Project.workspace_id == squatted_id) == 0

    @pytest.mark.asyncio
    async def test_project_created_by_concurrent_request(self, test_db, test_workspace):
        workspace_id = test_workspace.id
        winner = await persist(
            test_db, ProjectFactory.build(workspace_id=workspace_id, name=DEFAULT_PROJECT_NAME)
        )
        winner_id = winner.id

        project_id = await HierarchyManager(test_db)._create_default_project(workspace_id)

        assert project_id == winner_id
        assert await count(test_db, Project, Project.workspace_id == workspace_id) == 1
        assert await count(test_db, Section, Section.project_id == winner_id) == 0


class TestNextOrder:
    @pytest.mark.asyncio
    async def test_section_order_starts_at_one(self, test_db, test_project):
        assert await HierarchyManager(test_db).next_section_order(test_project.id) == 1

    @pytest.mark.asyncio
    async def test_section_order_follows_max(self, test_db, test_project):
        await persist(
            test_db,
            SectionFactory.build(project_id=test_project.id, order=1),
            SectionFactory.build(project_id=test_project.id, order=7),
        )
        assert await HierarchyManager(test_db).next_section_order(test_project.id) == 8

    @pytest.mark.asyncio
    async def test_task_order_is_scoped_by_section(
        self, test_db, test_user, test_project, test_section
    ):
        await persist(
            test_db,
            TaskFactory.build(project_id=test_project.id, owner_id=test_user.id, order=4),
            TaskFactory.build(
                project_id=test_project.id,
                section_id=test_section.id,
                owner_id=test_user.id,
                order=9,
            ),
        )
        manager = HierarchyManager(test_db)

        assert await manager.next_task_order(test_project.id, None) == 5
        assert await manager.next_task_order(test_project.id, test_section.id) == 10

    @pytest.mark.asyncio
    async def test_task_order_is_scoped_by_project(self, test_db, test_user, test_workspace):
        first, second = await persist(
            test_db,
            ProjectFactory.build(workspace_id=test_workspace.id),
            ProjectFactory.build(workspace_id=test_workspace.id),
        )
        await persist(
            test_db, TaskFactory.build(project_id=first.id, owner_id=test_user.id, order=3)
        )

        assert await HierarchyManager(test_db).next_task_order(second.id, None) == 1

    @pytest.mark.asyncio
    async def test_subtask_order(self, test_db, test_task):
        manager = HierarchyManager(test_db)
        assert await manager.next_subtask_order(test_task.id) == 1

        await persist(test_db, Subtask(task_id=test_task.id, title="step", order=2))
        assert await manager.next_subtask_order(test_task.id) == 3

    def test_canonical_sections(self, test_project):
        sections = HierarchyManager.canonical_sections(test_project.id)

        assert [(s.name, s.order) for s in sections] == [
            ("To Do", 1),
            ("In Progress", 2),
            ("Review", 3),
            ("Done", 4),
        ]
        assert all(s.project_id == test_project.id for s in sections)
