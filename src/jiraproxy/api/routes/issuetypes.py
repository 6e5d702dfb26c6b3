# Issue types router.
# Created: 2026-10-15

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from jiraproxy.api.deps import get_jira_client
from jiraproxy.api.proxy import proxy
from jiraproxy.integrations.jira import JiraClient

router = APIRouter(tags=["Issue Types"])


@router.get("/issuetypes")
async def get_issue_types(
    project: str | None = Query(None, description="Limit to one project's issue types"),
    client: JiraClient = Depends(get_jira_client),
):
    """List issue types, optionally scoped to a project."""
    return await proxy(lambda: client.get_issue_types(project), "Failed to fetch issue types")
