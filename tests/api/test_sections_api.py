"""API tests for the section endpoints nested under a project."""

import uuid

import pytest
from fastapi import status
from httpx import AsyncClient

from factories import TaskFactory, auth_headers_for, persist


class TestSectionController:
    @pytest.mark.asyncio
    async def test_create_sections_get_increasing_order(
        self, client: AsyncClient, auth_headers, test_project
    ):
        orders = []
        for name in ("Backlog", "Doing", "Done"):
            response = await client.post(
                f"/api/projects/{test_project.id}/sections",
                json={"name": name},
                headers=auth_headers,
            )
            assert response.status_code == status.HTTP_201_CREATED
            orders.append(response.json()["section"]["order"])

        assert orders == [1, 2, 3]

    @pytest.mark.asyncio
    async def test_create_section_with_explicit_order(
        self, client: AsyncClient, auth_headers, test_project
    ):
        response = await client.post(
            f"/api/projects/{test_project.id}/sections",
            json={"name": "Pinned", "order": 0},
            headers=auth_headers,
        )

        assert response.status_code == status.HTTP_201_CREATED
        section = response.json()["section"]
        assert section["order"] == 0
        assert section["projectId"] == str(test_project.id)

    @pytest.mark.asyncio
    async def test_create_section_blank_name(
        self, client: AsyncClient, auth_headers, test_project
    ):
        response = await client.post(
            f"/api/projects/{test_project.id}/sections",
            json={"name": "  "},
            headers=auth_headers,
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    @pytest.mark.asyncio
    async def test_list_sections_with_tasks(
        self, client: AsyncClient, auth_headers, test_db, test_project, test_section, test_user
    ):
        await persist(
            test_db,
            TaskFactory.build(
                project_id=test_project.id,
                section_id=test_section.id,
                owner_id=test_user.id,
                title="Second",
                order=2,
            ),
            TaskFactory.build(
                project_id=test_project.id,
                section_id=test_section.id,
                owner_id=test_user.id,
                title="First",
                order=1,
            ),
        )

        response = await client.get(
            f"/api/projects/{test_project.id}/sections", headers=auth_headers
        )

        assert response.status_code == status.HTTP_200_OK
        sections = response.json()["sections"]
        assert len(sections) == 1
        assert sections[0]["taskCount"] == 2
        assert [t["title"] for t in sections[0]["tasks"]] == ["First", "Second"]

    @pytest.mark.asyncio
    async def test_viewer_can_list_but_not_create(
        self, client: AsyncClient, viewer, test_project, test_section
    ):
        headers = auth_headers_for(viewer)

        response = await client.get(f"/api/projects/{test_project.id}/sections", headers=headers)
        assert response.status_code == status.HTTP_200_OK

        response = await client.post(
            f"/api/projects/{test_project.id}/sections", json={"name": "Nope"}, headers=headers
        )
        assert response.status_code == status.HTTP_404_NOT_FOUND

    @pytest.mark.asyncio
    async def test_outsider_cannot_list(
        self, client: AsyncClient, outsider_headers, test_project
    ):
        response = await client.get(
            f"/api/projects/{test_project.id}/sections", headers=outsider_headers
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND

    @pytest.mark.asyncio
    async def test_unknown_project(self, client: AsyncClient, auth_headers):
        response = await client.get(
            f"/api/projects/{uuid.uuid4()}/sections", headers=auth_headers
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND
