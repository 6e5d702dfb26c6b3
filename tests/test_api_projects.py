# Tests for the projects router.
# Created: 2026-10-16

from unittest.mock import AsyncMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from jiraproxy.api.deps import get_jira_client
from jiraproxy.api.routes.projects import router
from jiraproxy.integrations.jira import JiraAPIError, JiraClient


@pytest.fixture
def jira():
    return AsyncMock(spec=JiraClient)


@pytest.fixture
def test_app(jira):
    app = FastAPI()
    app.include_router(router, prefix="/api")
    app.dependency_overrides[get_jira_client] = lambda: jira
    return app


@pytest.fixture
def client(test_app):
    return TestClient(test_app)


# (path suffix, client method, fixed 500 message)
PROJECT_RESOURCES = [
    ("sprints", "get_project_sprints", "Failed to fetch project sprints"),
    ("users", "get_project_users", "Failed to fetch project users"),
    ("versions", "get_project_versions", "Failed to fetch project versions"),
    ("components", "get_project_components", "Failed to fetch project components"),
    ("boards", "get_project_boards", "Failed to fetch project boards"),
]


class TestProjectSprints:
    """Tests for GET /api/projects/{projectKey}/sprints."""

    def test_sprints_passthrough(self, client, jira):
        jira.get_project_sprints.return_value = [{"id": 1, "name": "Sprint 1"}]

        resp = client.get("/api/projects/ENG/sprints")

        assert resp.status_code == 200
        assert resp.json() == [{"id": 1, "name": "Sprint 1"}]
        assert resp.content == b'[{"id":1,"name":"Sprint 1"}]'
        jira.get_project_sprints.assert_awaited_once_with("ENG")

    def test_empty_list_is_not_404(self, client, jira):
        jira.get_project_sprints.return_value = []

        resp = client.get("/api/projects/NOPE/sprints")

        assert resp.status_code == 200
        assert resp.json() == []


class TestProjectResources:
    """Shared contract for the per-project list endpoints."""

    @pytest.mark.parametrize("suffix,method,_message", PROJECT_RESOURCES)
    def test_success(self, client, jira, suffix, method, _message):
        payload = [{"id": "1", "name": f"{suffix}-1"}]
        getattr(jira, method).return_value = payload

        resp = client.get(f"/api/projects/ENG/{suffix}")

        assert resp.status_code == 200
        assert resp.json() == payload
        getattr(jira, method).assert_awaited_once_with("ENG")

    @pytest.mark.parametrize("suffix,method,message", PROJECT_RESOURCES)
    def test_failure(self, client, jira, suffix, method, message):
        getattr(jira, method).side_effect = JiraAPIError("Jira API error: 503", 503)

        resp = client.get(f"/api/projects/ENG/{suffix}")

        assert resp.status_code == 500
        assert resp.json() == {"error": message}


class TestListProjects:
    """Tests for GET /api/projects."""

    def test_list(self, client, jira):
        jira.get_projects.return_value = [{"id": "1", "key": "ENG", "name": "Engineering"}]

        resp = client.get("/api/projects")

        assert resp.status_code == 200
        assert resp.json()[0]["key"] == "ENG"

    def test_failure(self, client, jira):
        jira.get_projects.side_effect = RuntimeError("boom")

        resp = client.get("/api/projects")

        assert resp.status_code == 500
        assert resp.json() == {"error": "Failed to fetch projects"}
