# User router: the Jira account behind the current session.
# Created: 2026-10-15

from __future__ import annotations

from fastapi import APIRouter, Depends

from jiraproxy.api.deps import get_jira_client
from jiraproxy.api.proxy import proxy
from jiraproxy.integrations.jira import JiraClient

router = APIRouter(tags=["User"])


@router.get("/user")
async def get_current_user(client: JiraClient = Depends(get_jira_client)):
    """Get the current Jira user."""
    return await proxy(client.get_current_user, "Failed to fetch current user")
