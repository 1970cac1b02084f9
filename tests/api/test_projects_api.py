"""
API tests for the project endpoints.

Tests project CRUD, workspace scoping, role checks and the delete guard.
"""

import uuid

import pytest
from fastapi import status
from httpx import AsyncClient

from factories import ProjectFactory, TaskFactory, auth_headers_for, persist


class TestProjectCreate:
    @pytest.mark.asyncio
    async def test_create_project_success(
        self, client: AsyncClient, auth_headers, test_workspace
    ):
        response = await client.post(
            "/api/projects/",
            json={
                "name": "Launch",
                "description": "Launch plan",
                "workspaceId": str(test_workspace.id),
            },
            headers=auth_headers,
        )

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data["success"] is True
        project = data["project"]
        assert project["name"] == "Launch"
        assert project["workspaceId"] == str(test_workspace.id)
        assert project["color"] == "#0066FF"
        assert project["sections"] == []

    @pytest.mark.asyncio
    async def test_create_project_with_default_sections(
        self, client: AsyncClient, auth_headers, test_workspace
    ):
        response = await client.post(
            "/api/projects/",
            json={
                "name": "Board",
                "workspaceId": str(test_workspace.id),
                "createDefaultSections": True,
            },
            headers=auth_headers,
        )

        assert response.status_code == status.HTTP_201_CREATED
        sections = response.json()["project"]["sections"]
        assert [s["name"] for s in sections] == ["To Do", "In Progress", "Review", "Done"]
        assert [s["order"] for s in sections] == [1, 2, 3, 4]

    @pytest.mark.asyncio
    async def test_create_project_duplicate_name(
        self, client: AsyncClient, auth_headers, test_project
    ):
        response = await client.post(
            "/api/projects/",
            json={"name": test_project.name, "workspaceId": str(test_project.workspace_id)},
            headers=auth_headers,
        )

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.json()["code"] == "DUPLICATE_PROJECT"

    @pytest.mark.asyncio
    async def test_create_project_missing_workspace(self, client: AsyncClient, auth_headers):
        response = await client.post(
            "/api/projects/", json={"name": "Orphan"}, headers=auth_headers
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["code"] == "VALIDATION_ERROR"

    @pytest.mark.asyncio
    async def test_create_project_as_non_member(
        self, client: AsyncClient, outsider_headers, test_workspace
    ):
        response = await client.post(
            "/api/projects/",
            json={"name": "Intrusion", "workspaceId": str(test_workspace.id)},
            headers=outsider_headers,
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.json()["code"] == "WORKSPACE_ACCESS_DENIED"

    @pytest.mark.asyncio
    async def test_create_project_as_viewer(self, client: AsyncClient, viewer, test_workspace):
        response = await client.post(
            "/api/projects/",
            json={"name": "Read only", "workspaceId": str(test_workspace.id)},
            headers=auth_headers_for(viewer),
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.json()["code"] == "INSUFFICIENT_ROLE"

    @pytest.mark.asyncio
    async def test_create_project_unauthenticated(self, client: AsyncClient, test_workspace):
        response = await client.post(
            "/api/projects/", json={"name": "x", "workspaceId": str(test_workspace.id)}
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED


class TestProjectRead:
    @pytest.mark.asyncio
    async def test_list_projects_with_counts(
        self, client: AsyncClient, auth_headers, test_project, test_section, test_task
    ):
        response = await client.get("/api/projects/", headers=auth_headers)

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["total"] == 1
        project = data["projects"][0]
        assert project["id"] == str(test_project.id)
        assert project["workspaceName"] == "Acme"
        assert project["memberRole"] == "ADMIN"
        assert project["taskCount"] == 1
        assert project["sectionCount"] == 1

    @pytest.mark.asyncio
    async def test_list_projects_filtered_by_workspace(
        self, client: AsyncClient, auth_headers, test_project
    ):
        response = await client.get(
            "/api/projects/", params={"workspaceId": str(uuid.uuid4())}, headers=auth_headers
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["projects"] == []

    @pytest.mark.asyncio
    async def test_outsider_sees_no_projects(
        self, client: AsyncClient, outsider_headers, test_project
    ):
        response = await client.get("/api/projects/", headers=outsider_headers)

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["total"] == 0

    @pytest.mark.asyncio
    async def test_get_project_detail(
        self, client: AsyncClient, auth_headers, test_project, test_section, test_task
    ):
        response = await client.get(f"/api/projects/{test_project.id}", headers=auth_headers)

        assert response.status_code == status.HTTP_200_OK
        project = response.json()["project"]
        assert project["workspace"]["slug"] == "acme"
        assert [s["name"] for s in project["sections"]] == ["To Do"]
        assert [t["title"] for t in project["tasks"]] == ["Test Task"]

    @pytest.mark.asyncio
    async def test_get_project_hidden_from_outsider(
        self, client: AsyncClient, outsider_headers, test_project
    ):
        response = await client.get(f"/api/projects/{test_project.id}", headers=outsider_headers)

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["code"] == "PROJECT_NOT_FOUND"

    @pytest.mark.asyncio
    async def test_get_project_invalid_id(self, client: AsyncClient, auth_headers):
        response = await client.get("/api/projects/not-a-uuid", headers=auth_headers)

        assert response.status_code == status.HTTP_400_BAD_REQUEST


class TestProjectUpdate:
    @pytest.mark.asyncio
    async def test_update_project(self, client: AsyncClient, auth_headers, test_project):
        response = await client.put(
            f"/api/projects/{test_project.id}",
            json={"name": "Renamed", "icon": "rocket"},
            headers=auth_headers,
        )

        assert response.status_code == status.HTTP_200_OK
        project = response.json()["project"]
        assert project["name"] == "Renamed"
        assert project["icon"] == "rocket"

    @pytest.mark.asyncio
    async def test_null_name_is_ignored(self, client: AsyncClient, auth_headers, test_project):
        response = await client.put(
            f"/api/projects/{test_project.id}",
            json={"name": None, "description": "Now described"},
            headers=auth_headers,
        )

        assert response.status_code == status.HTTP_200_OK
        project = response.json()["project"]
        assert project["name"] == "Test Project"
        assert project["description"] == "Now described"

    @pytest.mark.asyncio
    async def test_rename_onto_existing_name(
        self, client: AsyncClient, auth_headers, test_db, test_project
    ):
        other = await persist(
            test_db, ProjectFactory.build(workspace_id=test_project.workspace_id, name="Other")
        )

        response = await client.put(
            f"/api/projects/{other.id}", json={"name": "Test Project"}, headers=auth_headers
        )

        assert response.status_code == status.HTTP_409_CONFLICT

    @pytest.mark.asyncio
    async def test_member_can_update(self, client: AsyncClient, member_headers, test_project):
        response = await client.put(
            f"/api/projects/{test_project.id}",
            json={"color": "#FF0000"},
            headers=member_headers,
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["project"]["color"] == "#FF0000"


class TestProjectDelete:
    @pytest.mark.asyncio
    async def test_delete_empty_project(self, client: AsyncClient, auth_headers, test_project):
        response = await client.delete(f"/api/projects/{test_project.id}", headers=auth_headers)

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["success"] is True

        response = await client.get(f"/api/projects/{test_project.id}", headers=auth_headers)
        assert response.status_code == status.HTTP_404_NOT_FOUND

    @pytest.mark.asyncio
    async def test_delete_project_with_tasks(
        self, client: AsyncClient, auth_headers, test_db, test_project, test_user
    ):
        await persist(
            test_db,
            TaskFactory.build(project_id=test_project.id, owner_id=test_user.id),
            TaskFactory.build(project_id=test_project.id, owner_id=test_user.id),
        )

        response = await client.delete(f"/api/projects/{test_project.id}", headers=auth_headers)

        assert response.status_code == status.HTTP_409_CONFLICT
        data = response.json()
        assert data["code"] == "PROJECT_HAS_TASKS"
        assert data["details"]["taskCount"] == 2

    @pytest.mark.asyncio
    async def test_member_cannot_delete(self, client: AsyncClient, member_headers, test_project):
        response = await client.delete(
            f"/api/projects/{test_project.id}", headers=member_headers
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND
