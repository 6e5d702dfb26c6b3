# Jira Client: async HTTP client for the Jira Cloud REST and Agile APIs.
# Created: 2026-10-14
#
# Auth is resolved per request: OAuth (3LO) cookies win when present,
# otherwise the service-mode Basic credentials from settings are used.

from __future__ import annotations

import base64
import logging
from collections import Counter
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import quote

import httpx

from jiraproxy.config import Settings, get_settings
from jiraproxy.integrations.adf import adf_to_text, text_to_adf
from jiraproxy.integrations.jql import (
    IssueFilters,
    build_issue_jql,
    build_text_search_jql,
    quote_value,
)

logger = logging.getLogger(__name__)

ACCESS_TOKEN_COOKIE = "JIRA_ACCESS_TOKEN"
REFRESH_TOKEN_COOKIE = "JIRA_REFRESH_TOKEN"
CLOUD_ID_COOKIE = "JIRA_CLOUD_ID"
SESSION_COOKIES = (ACCESS_TOKEN_COOKIE, REFRESH_TOKEN_COOKIE, CLOUD_ID_COOKIE)

_REST_PREFIX = "/rest/api/3"
_AGILE_PREFIX = "/rest/agile/1.0"

_PAGINATION_LIMIT = 10_000
_SPRINT_FIELD = "customfield_10020"

PageFetcher = Callable[[int, int], Awaitable[Any]]


class JiraAPIError(Exception):
    """Jira answered with an error status or an unreadable body."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


@dataclass(frozen=True)
class JiraAuth:
    """Base URL plus the headers needed to talk to one Jira site."""

    base_url: str
    headers: dict[str, str] = field(default_factory=dict)
    oauth: bool = False

    @classmethod
    def basic(cls, settings: Settings) -> JiraAuth:
        headers = {"Accept": "application/json"}
        if settings.has_basic_auth:
            raw = f"{settings.jira_email}:{settings.jira_api_token}".encode()
            headers["Authorization"] = f"Basic {base64.b64encode(raw).decode()}"
        return cls(base_url=settings.jira_base_url.rstrip("/"), headers=headers)

    @classmethod
    def from_cookies(cls, cookies: Mapping[str, str], settings: Settings) -> JiraAuth:
        """Prefer the user's OAuth session; fall back to Basic auth."""
        access_token = cookies.get(ACCESS_TOKEN_COOKIE)
        cloud_id = cookies.get(CLOUD_ID_COOKIE)
        if access_token and cloud_id:
            return cls(
                base_url=f"{settings.jira_cloud_api_url.rstrip('/')}/{cloud_id}",
                headers={
                    "Authorization": f"Bearer {access_token}",
                    "Accept": "application/json",
                },
                oauth=True,
            )
        return cls.basic(settings)


# ---------------------------------------------------------------------------
# Response mapping
# ---------------------------------------------------------------------------


def _map_user(user: dict[str, Any]) -> dict[str, Any]:
    return {
        "displayName": user.get("displayName"),
        "emailAddress": user.get("emailAddress"),
        "accountId": user.get("accountId"),
    }


def _map_issue(issue: dict[str, Any]) -> dict[str, Any]:
    fields = issue.get("fields") or {}
    mapped: dict[str, Any] = {
        "id": issue.get("id"),
        "key": issue.get("key"),
        "summary": fields.get("summary"),
        "description": adf_to_text(fields.get("description")),
        "status": fields.get("status"),
        "priority": fields.get("priority"),
        "assignee": fields.get("assignee"),
        "reporter": fields.get("reporter"),
        "issuetype": fields.get("issuetype"),
        "created": fields.get("created"),
        "updated": fields.get("updated"),
        "duedate": fields.get("duedate"),
        "labels": fields.get("labels") or [],
        "components": fields.get("components") or [],
        "fixVersions": fields.get("fixVersions") or [],
    }
    sprints = fields.get(_SPRINT_FIELD)
    if sprints:
        first = sprints[0] or {}
        mapped["sprint"] = {
            "id": first.get("id"),
            "name": first.get("name"),
            "state": first.get("state"),
        }
    return mapped


def _map_attachment(attachment: dict[str, Any]) -> dict[str, Any]:
    mime_type = attachment.get("mimeType") or ""
    return {
        "id": attachment.get("id"),
        "filename": attachment.get("filename"),
        "size": attachment.get("size", 0),
        "mimeType": mime_type or None,
        "isImage": mime_type.startswith("image/"),
    }


def _map_comment(comment: dict[str, Any]) -> dict[str, Any]:
    author = comment.get("author") or {}
    avatars = author.get("avatarUrls") or {}
    return {
        "id": comment.get("id"),
        "author": {
            "displayName": author.get("displayName"),
            "avatarUrls": {"24x24": avatars.get("24x24")},
        },
        "created": comment.get("created"),
        "body": adf_to_text(comment.get("body")),
    }


def _map_history(history: dict[str, Any]) -> dict[str, Any]:
    author = history.get("author") or {}
    return {
        "id": history.get("id"),
        "author": {"displayName": author.get("displayName")},
        "created": history.get("created"),
        "items": [
            {
                "field": item.get("field"),
                "fromString": item.get("fromString"),
                "toString": item.get("toString"),
            }
            for item in history.get("items") or []
        ],
    }


def _map_issue_type(issue_type: dict[str, Any]) -> dict[str, Any]:
    return {
        "id": issue_type.get("id"),
        "name": issue_type.get("name"),
        "iconUrl": issue_type.get("iconUrl"),
        "subtask": bool(issue_type.get("subtask", False)),
    }


def _map_sprint(sprint: dict[str, Any]) -> dict[str, Any]:
    return {
        "id": str(sprint["id"]),
        "name": sprint.get("name"),
        "state": sprint.get("state") or "unknown",
    }


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------


class JiraClient:
    """HTTP client for the Jira Cloud REST (v3) and Agile (1.0) APIs.

    Every public method raises :class:`JiraAPIError` or ``httpx.HTTPError`` on
    failure. Only :meth:`get_issue` reports absence, by returning ``None``.
    """

    def __init__(
        self,
        auth: JiraAuth,
        settings: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._auth = auth
        self._settings = settings or get_settings()
        self._transport = transport

    @classmethod
    def from_cookies(
        cls, cookies: Mapping[str, str], settings: Settings | None = None
    ) -> JiraClient:
        settings = settings or get_settings()
        return cls(JiraAuth.from_cookies(cookies, settings), settings)

    @property
    def auth(self) -> JiraAuth:
        return self._auth

    # -- transport ----------------------------------------------------------

    async def _send(
        self,
        auth: JiraAuth,
        method: str,
        url: str,
        params: dict[str, Any] | None = None,
        json: Any = None,
    ) -> httpx.Response:
        async with httpx.AsyncClient(
            timeout=self._settings.http_timeout_seconds, transport=self._transport
        ) as client:
            return await client.request(
                method, url, params=params, json=json, headers=auth.headers
            )

    @staticmethod
    def _decode(resp: httpx.Response, api_name: str) -> Any:
        """Turn a response into decoded JSON, ``None`` for empty bodies."""
        if resp.is_error:
            raise JiraAPIError(
                f"{api_name} error: {resp.status_code} {resp.reason_phrase}",
                status_code=resp.status_code,
            )

        content_type = resp.headers.get("content-type", "")
        if (
            resp.status_code == 204
            or resp.headers.get("content-length") == "0"
            or "application/json" not in content_type
        ):
            return None

        if not resp.text.strip():
            return None

        try:
            return resp.json()
        except ValueError as e:
            logger.error("Failed to parse JSON response from %s: %.200s", api_name, resp.text)
            raise JiraAPIError(
                f"Invalid JSON response from {api_name}", status_code=resp.status_code
            ) from e

    async def _rest(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        json: Any = None,
    ) -> Any:
        url = f"{self._auth.base_url}{_REST_PREFIX}{path}"
        resp = await self._send(self._auth, method, url, params=params, json=json)
        return self._decode(resp, "Jira API")

    async def _agile(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        json: Any = None,
    ) -> Any:
        url = f"{self._auth.base_url}{_AGILE_PREFIX}{path}"
        resp = await self._send(self._auth, method, url, params=params, json=json)

        # OAuth tokens without Agile scopes get 401; retry once with service credentials
        if resp.status_code == 401 and self._auth.oauth and self._settings.has_basic_auth:
            logger.info("Agile API rejected OAuth token for %s; retrying with Basic auth", path)
            basic = JiraAuth.basic(self._settings)
            resp = await self._send(
                basic, method, f"{basic.base_url}{_AGILE_PREFIX}{path}", params=params, json=json
            )

        return self._decode(resp, "Jira Agile API")

    @staticmethod
    async def _paginate(
        fetch_page: PageFetcher, page_size: int, items_key: str = "values"
    ) -> list[Any]:
        """Collect every item from a ``startAt``/``maxResults`` paged endpoint.

        Pages may be bare lists or objects holding ``items_key`` and
        ``total``. Stops on an empty or short page, when ``total`` is reached,
        or at a hard safety limit.
        """
        results: list[Any] = []
        start_at = 0

        while True:
            page = await fetch_page(start_at, page_size)
            if isinstance(page, list):
                items, total = page, None
            elif page:
                items, total = page.get(items_key) or [], page.get("total")
            else:
                items, total = [], None

            if not items:
                break

            results.extend(items)
            start_at += len(items)
            logger.debug(
                "Fetched %d items (total so far: %d%s)",
                len(items),
                len(results),
                f"/{total}" if total else "",
            )

            if len(results) >= _PAGINATION_LIMIT:
                logger.warning(
                    "Reached safety limit of %d items; stopping pagination", _PAGINATION_LIMIT
                )
                break
            if len(items) < page_size:
                break
            if total is not None and start_at >= total:
                break

        return results

    # -- users & projects ---------------------------------------------------

    async def get_current_user(self) -> dict[str, Any] | None:
        data = await self._rest("GET", "/myself")
        if not data:
            return None
        return _map_user(data)

    async def get_projects(self) -> list[dict[str, Any]]:
        data = await self._rest("GET", "/project") or []
        return [{"id": p.get("id"), "key": p.get("key"), "name": p.get("name")} for p in data]

    async def get_project_users(self, project_key: str) -> list[dict[str, Any]]:
        """Every user assignable to issues in the project."""

        async def fetch(start_at: int, max_results: int) -> Any:
            return await self._rest(
                "GET",
                "/user/assignable/search",
                params={"project": project_key, "startAt": start_at, "maxResults": max_results},
            )

        users = await self._paginate(fetch, page_size=100)
        return [_map_user(u) for u in users]

    async def get_project_versions(self, project_key: str) -> list[dict[str, Any]]:
        data = await self._rest("GET", f"/project/{quote(project_key, safe='')}/versions") or []
        return [
            {
                "id": v.get("id"),
                "name": v.get("name"),
                "released": bool(v.get("released", False)),
                "archived": bool(v.get("archived", False)),
                "releaseDate": v.get("releaseDate"),
            }
            for v in data
        ]

    async def get_project_components(self, project_key: str) -> list[dict[str, Any]]:
        data = await self._rest("GET", f"/project/{quote(project_key, safe='')}/components") or []
        return [{"id": c.get("id"), "name": c.get("name")} for c in data]

    async def get_issue_types(self, project_key: str | None = None) -> list[dict[str, Any]]:
        """Issue types, scoped to one project when ``project_key`` is given.

        The unscoped endpoint lists one entry per project for team-managed
        projects, so those are collapsed by name.
        """
        if project_key:
            project = await self._rest("GET", f"/project/{quote(project_key, safe='')}") or {}
            return [_map_issue_type(t) for t in project.get("issueTypes") or []]

        types: list[dict[str, Any]] = []
        seen: set[str] = set()
        for issue_type in await self._rest("GET", "/issuetype") or []:
            name = issue_type.get("name")
            if name in seen:
                continue
            seen.add(name)
            types.append(_map_issue_type(issue_type))
        return types

    # -- boards & sprints ---------------------------------------------------

    async def _list_boards(self, project_key: str) -> list[dict[str, Any]]:
        async def fetch(start_at: int, max_results: int) -> Any:
            return await self._agile(
                "GET",
                "/board",
                params={
                    "projectKeyOrId": project_key,
                    "startAt": start_at,
                    "maxResults": max_results,
                },
            )

        return await self._paginate(fetch, page_size=50)

    async def get_project_boards(self, project_key: str) -> list[dict[str, Any]]:
        boards = await self._list_boards(project_key)
        logger.debug("Found %d boards for project %s", len(boards), project_key)
        return [
            {
                "id": b.get("id"),
                "name": b.get("name"),
                "type": b.get("type"),
                "location": b.get("location"),
            }
            for b in boards
        ]

    async def _board_sprints(self, project_key: str) -> list[dict[str, Any]]:
        boards = await self._list_boards(project_key)
        if not boards:
            logger.info("No boards found for project %s", project_key)
            return []

        scrum = [b for b in boards if b.get("type") == "scrum"]
        board = scrum[0] if scrum else boards[0]
        logger.debug(
            "Using board %s (id=%s, type=%s) for project %s",
            board.get("name"),
            board.get("id"),
            board.get("type"),
            project_key,
        )

        async def fetch(start_at: int, max_results: int) -> Any:
            return await self._agile(
                "GET",
                f"/board/{board['id']}/sprint",
                params={"startAt": start_at, "maxResults": max_results},
            )

        sprints = [_map_sprint(s) for s in await self._paginate(fetch, page_size=50)]
        logger.debug(
            "Fetched %d sprints for project %s: %s",
            len(sprints),
            project_key,
            dict(Counter(s["state"] for s in sprints)),
        )
        return sprints

    async def _sprints_from_issues(self, project_key: str) -> list[dict[str, Any]]:
        """Recover sprints from the sprint field of the project's issues."""
        jql = f"project = {quote_value(project_key)} AND sprint is not EMPTY"

        async def fetch(start_at: int, max_results: int) -> Any:
            return await self._rest(
                "GET",
                "/search",
                params={
                    "jql": jql,
                    "startAt": start_at,
                    "maxResults": max_results,
                    "fields": _SPRINT_FIELD,
                },
            )

        issues = await self._paginate(fetch, page_size=100, items_key="issues")

        sprints: dict[tuple[str, str], dict[str, Any]] = {}
        for issue in issues:
            for sprint in (issue.get("fields") or {}).get(_SPRINT_FIELD) or []:
                if not sprint or not sprint.get("id") or not sprint.get("name"):
                    continue
                key = (str(sprint["id"]), sprint["name"])
                if key not in sprints:
                    sprints[key] = _map_sprint(sprint)
        return list(sprints.values())

    async def get_project_sprints(self, project_key: str) -> list[dict[str, Any]]:
        """All sprints of the project's scrum board (or first board).

        When the Agile API is unavailable, sprints are recovered from issues
        through a JQL search instead.
        """
        try:
            return await self._board_sprints(project_key)
        except (JiraAPIError, httpx.HTTPError) as board_error:
            logger.warning(
                "Board sprint lookup failed for %s (%s); falling back to JQL search",
                project_key,
                board_error,
            )
            try:
                return await self._sprints_from_issues(project_key)
            except (JiraAPIError, httpx.HTTPError):
                logger.warning("JQL sprint fallback failed for %s", project_key, exc_info=True)
                raise board_error

    # -- issues -------------------------------------------------------------

    async def get_issue(self, issue_key: str) -> dict[str, Any] | None:
        """Fetch one issue; ``None`` when Jira does not know the key."""
        try:
            data = await self._rest("GET", f"/issue/{quote(issue_key, safe='')}")
        except JiraAPIError as e:
            if e.status_code == 404:
                return None
            raise
        if not data:
            return None
        return _map_issue(data)

    async def get_issue_details(self, issue_key: str) -> dict[str, Any]:
        """Attachments, comments and change history of an issue."""
        data = (
            await self._rest(
                "GET",
                f"/issue/{quote(issue_key, safe='')}",
                params={"fields": "attachment,comment", "expand": "changelog"},
            )
            or {}
        )
        fields = data.get("fields") or {}
        comments = (fields.get("comment") or {}).get("comments") or []
        histories = (data.get("changelog") or {}).get("histories") or []
        return {
            "attachments": [_map_attachment(a) for a in fields.get("attachment") or []],
            "comments": [_map_comment(c) for c in comments],
            "changelog": [_map_history(h) for h in histories],
        }

    async def get_issue_transitions(self, issue_key: str) -> list[dict[str, Any]]:
        data = await self._rest("GET", f"/issue/{quote(issue_key, safe='')}/transitions") or {}
        return [
            {"id": t.get("id"), "name": (t.get("to") or {}).get("name")}
            for t in data.get("transitions") or []
        ]

    async def search_issues(
        self, project_key: str, filters: IssueFilters | None = None
    ) -> list[dict[str, Any]]:
        """Every issue matching the board filters (sprint selection required)."""
        jql = build_issue_jql(project_key, filters or IssueFilters())
        if jql is None:
            logger.debug("No sprints selected for %s; returning no issues", project_key)
            return []

        logger.debug("Searching issues: %s", jql)

        async def fetch(start_at: int, max_results: int) -> Any:
            return await self._rest(
                "GET",
                "/search",
                params={
                    "jql": jql,
                    "startAt": start_at,
                    "maxResults": max_results,
                    "fields": "*all",
                },
            )

        issues = await self._paginate(fetch, page_size=100, items_key="issues")
        return [_map_issue(i) for i in issues]

    async def update_issue_status(self, issue_key: str, transition_id: str) -> None:
        await self._rest(
            "POST",
            f"/issue/{quote(issue_key, safe='')}/transitions",
            json={"transition": {"id": transition_id}},
        )

    async def update_issue_assignee(self, issue_key: str, account_id: str | None) -> None:
        await self._rest(
            "PUT",
            f"/issue/{quote(issue_key, safe='')}/assignee",
            json={"accountId": account_id},
        )

    async def search_issues_by_text(
        self, project_key: str | None, text: str, limit: int = 25
    ) -> list[dict[str, Any]]:
        """Free-text issue search, optionally scoped to one project."""
        data = (
            await self._rest(
                "GET",
                "/search",
                params={
                    "jql": build_text_search_jql(project_key, text),
                    "maxResults": limit,
                    "fields": "summary,status,issuetype,priority,assignee,updated",
                },
            )
            or {}
        )
        return [_map_issue(i) for i in data.get("issues") or []]

    async def get_issue_suggestions(
        self, project_key: str, query: str, limit: int = 20
    ) -> list[dict[str, Any]]:
        """Issue picker matches as ``{key, summary}``, de-duplicated by key."""
        data = (
            await self._rest(
                "GET",
                "/issue/picker",
                params={
                    "query": query,
                    "currentJQL": f"project = {quote_value(project_key)}",
                    "showSubTasks": "true",
                },
            )
            or {}
        )
        suggestions: dict[str, dict[str, Any]] = {}
        for section in data.get("sections") or []:
            for issue in section.get("issues") or []:
                key = issue.get("key")
                if key and key not in suggestions:
                    suggestions[key] = {
                        "key": key,
                        "summary": issue.get("summaryText") or issue.get("summary") or "",
                    }
        return list(suggestions.values())[:limit]

    # -- issue edits --------------------------------------------------------

    async def _update_fields(self, issue_key: str, fields: dict[str, Any]) -> None:
        await self._rest(
            "PUT", f"/issue/{quote(issue_key, safe='')}", json={"fields": fields}
        )

    async def update_issue_priority(self, issue_key: str, priority: str) -> None:
        await self._update_fields(issue_key, {"priority": {"name": priority}})

    async def update_issue_description(self, issue_key: str, description: str) -> None:
        await self._update_fields(issue_key, {"description": text_to_adf(description)})

    async def update_issue_fix_versions(self, issue_key: str, version_ids: list[str]) -> None:
        await self._update_fields(
            issue_key, {"fixVersions": [{"id": str(v)} for v in version_ids]}
        )

    async def update_issue_components(self, issue_key: str, component_id: str | None) -> None:
        """Set the issue's single component, or clear it with ``None``."""
        components = [{"id": component_id}] if component_id else []
        await self._update_fields(issue_key, {"components": components})

    async def update_issue_sprint(self, issue_key: str, sprint_id: str | None) -> None:
        """Move an issue into a sprint, or back to the backlog with ``None``."""
        payload = {"issues": [issue_key]}
        if sprint_id:
            path = f"/sprint/{quote(str(sprint_id), safe='')}/issue"
            await self._agile("POST", path, json=payload)
        else:
            await self._agile("POST", "/backlog/issue", json=payload)

    async def create_issue_link(
        self, from_issue_key: str, to_issue_key: str, link_type: str = "Relates"
    ) -> None:
        await self._rest(
            "POST",
            "/issueLink",
            json={
                "type": {"name": link_type},
                "outwardIssue": {"key": from_issue_key},
                "inwardIssue": {"key": to_issue_key},
            },
        )

    # -- comments -----------------------------------------------------------

    async def create_comment(self, issue_key: str, text: str) -> dict[str, Any]:
        data = await self._rest(
            "POST",
            f"/issue/{quote(issue_key, safe='')}/comment",
            json={"body": text_to_adf(text)},
        )
        return _map_comment(data or {})

    async def update_comment(self, issue_key: str, comment_id: str, text: str) -> dict[str, Any]:
        data = await self._rest(
            "PUT",
            f"/issue/{quote(issue_key, safe='')}/comment/{quote(comment_id, safe='')}",
            json={"body": text_to_adf(text)},
        )
        return _map_comment(data or {})

    async def delete_comment(self, issue_key: str, comment_id: str) -> None:
        await self._rest(
            "DELETE",
            f"/issue/{quote(issue_key, safe='')}/comment/{quote(comment_id, safe='')}",
        )
