# Shared FastAPI dependencies for the API layer.
# Created: 2026-10-15

from __future__ import annotations

from fastapi import Request

from jiraproxy.config import get_settings
from jiraproxy.integrations.jira import JiraClient


def get_jira_client(request: Request) -> JiraClient:
    """Build a Jira client authenticated as the caller.

    Usage::

        @router.get("/user")
        async def get_user(client: JiraClient = Depends(get_jira_client)): ...

    OAuth cookies on the request take precedence; without them the client
    falls back to the service credentials from settings. Tests replace this
    dependency through ``app.dependency_overrides``.
    """
    return JiraClient.from_cookies(request.cookies, get_settings())
