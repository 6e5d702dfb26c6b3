# Tests for the auth router.
# Created: 2026-10-16

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from jiraproxy.api.routes.auth import router

SESSION_COOKIES = ("JIRA_ACCESS_TOKEN", "JIRA_REFRESH_TOKEN", "JIRA_CLOUD_ID")


@pytest.fixture
def client():
    app = FastAPI()
    app.include_router(router, prefix="/api")
    return TestClient(app)


def _set_cookie_headers(resp) -> dict[str, str]:
    headers = resp.headers.get_list("set-cookie")
    return {h.split("=", 1)[0]: h for h in headers}


class TestJiraLogout:
    """Tests for POST /api/auth/jira/logout."""

    def test_logout_without_session(self, client):
        resp = client.post("/api/auth/jira/logout")

        assert resp.status_code == 200
        assert resp.json() == {"ok": True}
        cookies = _set_cookie_headers(resp)
        assert set(cookies) == set(SESSION_COOKIES)

    @pytest.mark.parametrize("name", SESSION_COOKIES)
    def test_cookie_is_expired(self, client, name):
        resp = client.post("/api/auth/jira/logout")

        header = _set_cookie_headers(resp)[name]
        value = header.split(";", 1)[0].split("=", 1)[1]
        assert value in ("", '""')
        assert "Max-Age=0" in header
        assert "Path=/" in header
        assert "samesite" not in header.lower()

    def test_logout_with_session(self, client):
        client.cookies.set("JIRA_ACCESS_TOKEN", "token")
        client.cookies.set("JIRA_CLOUD_ID", "cloud")

        resp = client.post("/api/auth/jira/logout")

        assert resp.status_code == 200
        assert len(resp.headers.get_list("set-cookie")) == 3
