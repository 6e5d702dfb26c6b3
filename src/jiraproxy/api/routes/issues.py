# Issues router: search, single issue, details, transitions, comments, and edits.
# Created: 2026-10-15
#
# Request bodies are parsed with read_body() rather than as typed parameters,
# so a malformed body gets the same flat {"error": ...} shape as everything else.

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import Any

from fastapi import APIRouter, Depends, Query, Request

from jiraproxy.api.deps import get_jira_client
from jiraproxy.api.proxy import INVALID_BODY, error_response, proxy, read_body
from jiraproxy.api.schemas.common import CommentResponse, SuccessResponse
from jiraproxy.api.schemas.issues import (
    AssigneeUpdateRequest,
    CommentRequest,
    ComponentUpdateRequest,
    DescriptionUpdateRequest,
    FixVersionsUpdateRequest,
    LinkRequest,
    PriorityUpdateRequest,
    SprintUpdateRequest,
    StatusUpdateRequest,
)
from jiraproxy.integrations.jira import JiraClient
from jiraproxy.integrations.jql import IssueFilters

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Issues"])

PICKER_MIN_QUERY = 6


async def _acknowledge(call: Callable[[], Awaitable[Any]], error_message: str):
    """Run a write and answer ``{"success": true}``."""

    async def _write():
        await call()
        return SuccessResponse().model_dump()

    return await proxy(_write, error_message)


@router.get("/issues")
async def search_issues(
    request: Request,
    project: str | None = Query(None, description="Project key (required)"),
    client: JiraClient = Depends(get_jira_client),
):
    """Search a project's issues using the board filters.

    List filters (``status``, ``priority``, ``assignee``, ``issueType``,
    ``labels``, ``components``, ``sprint``, ``release``) are comma-separated;
    ``dueDateFrom``/``dueDateTo`` are single dates. At least one sprint must
    be selected or the result is empty.
    """
    if not project:
        return error_response("Project key is required", 400)

    filters = IssueFilters.from_query(request.query_params)
    return await proxy(lambda: client.search_issues(project, filters), "Failed to fetch issues")


@router.get("/issues/search")
async def search_issues_by_text(
    project: str | None = Query(None),
    query: str | None = Query(None),
    client: JiraClient = Depends(get_jira_client),
):
    """Free-text search across issues, optionally within one project."""
    text = (query or "").strip()
    if not text:
        return []

    return await proxy(
        lambda: client.search_issues_by_text(project or None, text), "Failed to search issues"
    )


@router.get("/issues/picker")
async def issue_picker(
    project: str | None = Query(None),
    query: str | None = Query(None),
    client: JiraClient = Depends(get_jira_client),
):
    """Issue suggestions for the link picker."""
    if not project:
        return error_response("Project key is required", 400)
    if len((query or "").strip()) < PICKER_MIN_QUERY:
        return []

    return await proxy(
        lambda: client.get_issue_suggestions(project, query), "Failed to fetch suggestions"
    )


@router.get("/issues/{issue_key}")
async def get_issue(issue_key: str, client: JiraClient = Depends(get_jira_client)):
    """Get a single issue."""
    return await proxy(
        lambda: client.get_issue(issue_key),
        "Failed to fetch issue",
        not_found_message="Issue not found",
    )


@router.get("/issues/{issue_key}/details")
async def get_issue_details(
    issue_key: str, client: JiraClient = Depends(get_jira_client)
):
    """Get attachments, comments and changelog for an issue."""
    return await proxy(
        lambda: client.get_issue_details(issue_key), "Failed to fetch issue details"
    )


@router.get("/issues/{issue_key}/transitions")
async def get_issue_transitions(
    issue_key: str, client: JiraClient = Depends(get_jira_client)
):
    """List the workflow transitions available from the issue's status."""
    return await proxy(
        lambda: client.get_issue_transitions(issue_key), "Failed to fetch transitions"
    )


# -- edits -------------------------------------------------------------------


@router.put("/issues/{issue_key}/status", response_model=SuccessResponse)
async def update_issue_status(
    issue_key: str, request: Request, client: JiraClient = Depends(get_jira_client)
):
    """Transition an issue to a new status."""
    body = await read_body(request, StatusUpdateRequest)
    if body is None or body.transitionId is None or body.transitionId == "":
        return error_response("Transition ID is required", 400)

    transition_id = str(body.transitionId)
    logger.info("Updating issue %s to transition %s", issue_key, transition_id)
    return await _acknowledge(
        lambda: client.update_issue_status(issue_key, transition_id), "Failed to update status"
    )


@router.put("/issues/{issue_key}/assignee", response_model=SuccessResponse)
async def update_issue_assignee(
    issue_key: str, request: Request, client: JiraClient = Depends(get_jira_client)
):
    """Assign an issue, or unassign it with ``accountId: null``."""
    body = await read_body(request, AssigneeUpdateRequest)
    if body is None:
        return error_response(INVALID_BODY, 400)

    logger.info("Updating issue %s assignee to %s", issue_key, body.accountId or "unassigned")
    return await _acknowledge(
        lambda: client.update_issue_assignee(issue_key, body.accountId),
        "Failed to update assignee",
    )


@router.put("/issues/{issue_key}/priority", response_model=SuccessResponse)
async def update_issue_priority(
    issue_key: str, request: Request, client: JiraClient = Depends(get_jira_client)
):
    body = await read_body(request, PriorityUpdateRequest)
    if body is None or not body.priority:
        return error_response("priority is required", 400)

    return await _acknowledge(
        lambda: client.update_issue_priority(issue_key, body.priority),
        "Failed to update priority",
    )


@router.put("/issues/{issue_key}/description", response_model=SuccessResponse)
async def update_issue_description(
    issue_key: str, request: Request, client: JiraClient = Depends(get_jira_client)
):
    """Replace the description with plain text (stored as ADF)."""
    body = await read_body(request, DescriptionUpdateRequest)
    if body is None or body.description is None:
        return error_response("issueKey and description are required", 400)

    return await _acknowledge(
        lambda: client.update_issue_description(issue_key, body.description),
        "Failed to update description",
    )


@router.put("/issues/{issue_key}/sprint", response_model=SuccessResponse)
async def update_issue_sprint(
    issue_key: str, request: Request, client: JiraClient = Depends(get_jira_client)
):
    """Move an issue to a sprint, or to the backlog with ``sprintId: null``."""
    body = await read_body(request, SprintUpdateRequest)
    if body is None:
        return error_response(INVALID_BODY, 400)

    sprint_id = str(body.sprintId) if body.sprintId not in (None, "") else None
    return await _acknowledge(
        lambda: client.update_issue_sprint(issue_key, sprint_id), "Failed to update sprint"
    )


@router.put("/issues/{issue_key}/fix-versions", response_model=SuccessResponse)
async def update_issue_fix_versions(
    issue_key: str, request: Request, client: JiraClient = Depends(get_jira_client)
):
    """Replace the fix versions; an empty list clears them."""
    body = await read_body(request, FixVersionsUpdateRequest)
    if body is None:
        return error_response(INVALID_BODY, 400)

    version_ids = [str(v) for v in body.versionIds]
    return await _acknowledge(
        lambda: client.update_issue_fix_versions(issue_key, version_ids),
        "Failed to update fix versions",
    )


@router.put("/issues/{issue_key}/components", response_model=SuccessResponse)
async def update_issue_components(
    issue_key: str, request: Request, client: JiraClient = Depends(get_jira_client)
):
    body = await read_body(request, ComponentUpdateRequest)
    if body is None:
        return error_response(INVALID_BODY, 400)

    component_id = (body.componentId or "").strip() or None
    return await _acknowledge(
        lambda: client.update_issue_components(issue_key, component_id),
        "Failed to update components",
    )


@router.post("/issues/{issue_key}/link", response_model=SuccessResponse)
async def create_issue_link(
    issue_key: str, request: Request, client: JiraClient = Depends(get_jira_client)
):
    """Link this issue to ``toIssueKey`` (``linkType`` defaults to Relates)."""
    body = await read_body(request, LinkRequest)
    to_issue_key = (body.toIssueKey or "").strip() if body else ""
    if not to_issue_key:
        return error_response("issueKey and toIssueKey are required", 400)

    link_type = body.linkType or "Relates"
    return await _acknowledge(
        lambda: client.create_issue_link(issue_key, to_issue_key, link_type),
        "Failed to create link",
    )


# -- comments ----------------------------------------------------------------


async def _comment_text(request: Request) -> str:
    body = await read_body(request, CommentRequest)
    if body is None or body.text is None:
        return ""
    return body.text.strip()


@router.post("/issues/{issue_key}/comment", response_model=CommentResponse)
async def create_comment(
    issue_key: str, request: Request, client: JiraClient = Depends(get_jira_client)
):
    """Add a plain-text comment."""
    text = await _comment_text(request)
    if not text:
        return error_response("Comment text is required", 400)

    async def _create():
        comment = await client.create_comment(issue_key, text)
        return CommentResponse(comment=comment).model_dump()

    return await proxy(_create, "Failed to create comment")


@router.put("/issues/{issue_key}/comment/{comment_id}", response_model=CommentResponse)
async def update_comment(
    issue_key: str,
    comment_id: str,
    request: Request,
    client: JiraClient = Depends(get_jira_client),
):
    """Replace a comment's text."""
    text = await _comment_text(request)
    if not text:
        return error_response("Comment text is required", 400)

    async def _update():
        comment = await client.update_comment(issue_key, comment_id, text)
        return CommentResponse(comment=comment).model_dump()

    return await proxy(_update, "Failed to update comment")


@router.delete("/issues/{issue_key}/comment/{comment_id}", response_model=SuccessResponse)
async def delete_comment(
    issue_key: str, comment_id: str, client: JiraClient = Depends(get_jira_client)
):
    return await _acknowledge(
        lambda: client.delete_comment(issue_key, comment_id), "Failed to delete comment"
    )
