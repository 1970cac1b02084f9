"""Unit tests for SectionService."""

import uuid

import pytest

from app.domains.section.service import SectionService
from app.exceptions.project import ProjectNotFoundError
from app.schemas.section import SectionCreate

from factories import TaskFactory, persist


class TestSectionService:
    @pytest.mark.asyncio
    async def test_sections_numbered_in_creation_order(self, test_db, test_user, test_project):
        service = SectionService(test_db)

        orders = [
            (await service.create_section(test_project.id, SectionCreate(name=n), test_user.id))[
                "order"
            ]
            for n in ("A", "B", "C")
        ]

        assert orders == [1, 2, 3]

    @pytest.mark.asyncio
    async def test_explicit_order(self, test_db, test_user, test_project):
        section = await SectionService(test_db).create_section(
            test_project.id, SectionCreate(name="First", order=0), test_user.id
        )
        assert section["order"] == 0

    @pytest.mark.asyncio
    async def test_list_includes_ordered_tasks(
        self, test_db, test_user, test_project, test_section
    ):
        await persist(
            test_db,
            TaskFactory.build(
                project_id=test_project.id,
                section_id=test_section.id,
                owner_id=test_user.id,
                title="second",
                order=2,
            ),
            TaskFactory.build(
                project_id=test_project.id,
                section_id=test_section.id,
                owner_id=test_user.id,
                title="first",
                order=1,
            ),
        )

        sections = await SectionService(test_db).list_sections(test_project.id, test_user.id)

        assert len(sections) == 1
        assert sections[0]["task_count"] == 2
        assert [t.title for t in sections[0]["tasks"]] == ["first", "second"]

    @pytest.mark.asyncio
    async def test_viewer_can_list_but_not_create(self, test_db, viewer, test_project):
        service = SectionService(test_db)

        assert await service.list_sections(test_project.id, viewer.id) == []
        with pytest.raises(ProjectNotFoundError):
            await service.create_section(test_project.id, SectionCreate(name="x"), viewer.id)

    @pytest.mark.asyncio
    async def test_unknown_project(self, test_db, test_user):
        with pytest.raises(ProjectNotFoundError):
            await SectionService(test_db).list_sections(uuid.uuid4(), test_user.id)
