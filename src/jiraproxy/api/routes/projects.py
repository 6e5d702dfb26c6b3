# Projects router: project list and per-project sprints, users, versions,
# components and boards.
# Created: 2026-10-15

from __future__ import annotations

from fastapi import APIRouter, Depends

from jiraproxy.api.deps import get_jira_client
from jiraproxy.api.proxy import proxy
from jiraproxy.integrations.jira import JiraClient

router = APIRouter(tags=["Projects"])


@router.get("/projects")
async def list_projects(client: JiraClient = Depends(get_jira_client)):
    """List projects visible to the caller."""
    return await proxy(client.get_projects, "Failed to fetch projects")


@router.get("/projects/{project_key}/sprints")
async def get_project_sprints(
    project_key: str, client: JiraClient = Depends(get_jira_client)
):
    """List every sprint of the project's board."""
    return await proxy(
        lambda: client.get_project_sprints(project_key), "Failed to fetch project sprints"
    )


@router.get("/projects/{project_key}/users")
async def get_project_users(
    project_key: str, client: JiraClient = Depends(get_jira_client)
):
    """List users assignable in the project."""
    return await proxy(
        lambda: client.get_project_users(project_key), "Failed to fetch project users"
    )


@router.get("/projects/{project_key}/versions")
async def get_project_versions(
    project_key: str, client: JiraClient = Depends(get_jira_client)
):
    return await proxy(
        lambda: client.get_project_versions(project_key), "Failed to fetch project versions"
    )


@router.get("/projects/{project_key}/components")
async def get_project_components(
    project_key: str, client: JiraClient = Depends(get_jira_client)
):
    return await proxy(
        lambda: client.get_project_components(project_key),
        "Failed to fetch project components",
    )


@router.get("/projects/{project_key}/boards")
async def get_project_boards(
    project_key: str, client: JiraClient = Depends(get_jira_client)
):
    """List the project's Agile boards."""
    return await proxy(
        lambda: client.get_project_boards(project_key), "Failed to fetch project boards"
    )
