# Tests for the proxy response wrapper and the client dependency.
# Created: 2026-10-16

import json
import logging
from unittest.mock import AsyncMock, MagicMock

import pytest

from jiraproxy.api.deps import get_jira_client
from jiraproxy.api.proxy import error_response, proxy, read_body
from jiraproxy.api.schemas.issues import StatusUpdateRequest
from jiraproxy.config import Settings


class TestProxy:
    async def test_success_passthrough(self):
        resp = await proxy(AsyncMock(return_value={"a": [1, 2]}), "Failed")
        assert resp.status_code == 200
        assert json.loads(resp.body) == {"a": [1, 2]}

    async def test_none_without_not_found_is_null_body(self):
        resp = await proxy(AsyncMock(return_value=None), "Failed")
        assert resp.status_code == 200
        assert resp.body == b"null"

    async def test_not_found(self):
        resp = await proxy(AsyncMock(return_value=None), "Failed", not_found_message="Gone")
        assert resp.status_code == 404
        assert json.loads(resp.body) == {"error": "Gone"}

    async def test_failure_is_logged_not_returned(self, caplog):
        fetch = AsyncMock(side_effect=RuntimeError("token=abc123"))

        with caplog.at_level(logging.ERROR, logger="jiraproxy.api.proxy"):
            resp = await proxy(fetch, "Failed to fetch widgets")

        assert resp.status_code == 500
        assert json.loads(resp.body) == {"error": "Failed to fetch widgets"}
        assert b"abc123" not in resp.body
        assert "Failed to fetch widgets" in caplog.text
        assert "token=abc123" in caplog.text

    async def test_failure_wins_over_not_found(self):
        fetch = AsyncMock(side_effect=RuntimeError("boom"))
        resp = await proxy(fetch, "Failed", not_found_message="Gone")
        assert resp.status_code == 500

    async def test_calls_fetch_once(self):
        fetch = AsyncMock(return_value=[])
        await proxy(fetch, "Failed")
        fetch.assert_awaited_once_with()


class TestErrorResponse:
    def test_shape(self):
        resp = error_response("Nope", 400)
        assert resp.status_code == 400
        assert json.loads(resp.body) == {"error": "Nope"}


class TestReadBody:
    def _request(self, raw: bytes):
        request = MagicMock()
        request.body = AsyncMock(return_value=raw)
        request.url.path = "/api/issues/ENG-1/status"
        return request

    async def test_parses_object(self):
        body = await read_body(self._request(b'{"transitionId": "31"}'), StatusUpdateRequest)
        assert body.transitionId == "31"

    async def test_empty_body_is_empty_object(self):
        body = await read_body(self._request(b""), StatusUpdateRequest)
        assert body is not None
        assert body.transitionId is None

    @pytest.mark.parametrize(
        "raw", [b"not json", b"[1]", b'"31"', b'{"transitionId": [1]}']
    )
    async def test_unusable_body_is_none(self, raw):
        assert await read_body(self._request(raw), StatusUpdateRequest) is None


class TestGetJiraClient:
    def _request(self, cookies):
        request = MagicMock()
        request.cookies = cookies
        return request

    def test_oauth_cookies(self, monkeypatch):
        settings = Settings(jira_base_url="https://acme.atlassian.net")
        monkeypatch.setattr("jiraproxy.api.deps.get_settings", lambda: settings)

        client = get_jira_client(
            self._request({"JIRA_ACCESS_TOKEN": "tok", "JIRA_CLOUD_ID": "cloud-1"})
        )

        assert client.auth.oauth is True
        assert client.auth.base_url == "https://api.atlassian.com/ex/jira/cloud-1"

    def test_falls_back_to_service_credentials(self, monkeypatch):
        settings = Settings(
            jira_base_url="https://acme.atlassian.net",
            jira_email="bot@acme.test",
            jira_api_token="secret",
        )
        monkeypatch.setattr("jiraproxy.api.deps.get_settings", lambda: settings)

        client = get_jira_client(self._request({"JIRA_ACCESS_TOKEN": "tok"}))

        assert client.auth.oauth is False
        assert client.auth.base_url == "https://acme.atlassian.net"
        assert client.auth.headers["Authorization"].startswith("Basic ")
