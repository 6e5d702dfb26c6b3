# JQL: issue filter model and query builder for board searches.
# Created: 2026-10-15

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field

UNASSIGNED = "UNASSIGNED"
NO_RELEASE = "NO_RELEASE"

_ISSUE_KEY = re.compile(r"[A-Za-z][A-Za-z0-9_]*-\d+")

# query parameter name -> IssueFilters attribute
_LIST_PARAMS = {
    "status": "status",
    "priority": "priority",
    "assignee": "assignee",
    "issueType": "issue_type",
    "labels": "labels",
    "components": "components",
    "sprint": "sprint",
    "release": "release",
}


@dataclass
class IssueFilters:
    """Board filter selections.

    Every list field holds raw values as the front-end sends them; an empty
    list means "no constraint".
    """

    status: list[str] = field(default_factory=list)
    priority: list[str] = field(default_factory=list)
    assignee: list[str] = field(default_factory=list)
    issue_type: list[str] = field(default_factory=list)
    labels: list[str] = field(default_factory=list)
    components: list[str] = field(default_factory=list)
    sprint: list[str] = field(default_factory=list)
    release: list[str] = field(default_factory=list)
    due_date_from: str | None = None
    due_date_to: str | None = None

    @classmethod
    def from_query(cls, params: Mapping[str, str]) -> IssueFilters:
        """Parse comma-separated query parameters into filters."""
        filters = cls()
        for param, attr in _LIST_PARAMS.items():
            raw = params.get(param)
            if raw:
                setattr(filters, attr, [v for v in raw.split(",") if v])
        filters.due_date_from = params.get("dueDateFrom") or None
        filters.due_date_to = params.get("dueDateTo") or None
        return filters


def quote_value(value: str) -> str:
    """Render ``value`` as a JQL string literal."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def _quoted(values: list[str]) -> str:
    return ",".join(quote_value(v) for v in values)


def _either(values: list[str], empty_marker: str, empty_clause: str, field_name: str) -> str:
    conditions = [
        empty_clause if v == empty_marker else f"{field_name} = {quote_value(v)}"
        for v in values
    ]
    return "(" + " OR ".join(conditions) + ")"


def build_issue_jql(project_key: str, filters: IssueFilters) -> str | None:
    """Build the JQL for a board search.

    Returns ``None`` when no sprint is selected: the board never loads a
    whole project at once.
    """
    if not filters.sprint:
        return None

    clauses = [
        f"project = {quote_value(project_key)}",
        f"sprint IN ({_quoted(filters.sprint)})",
    ]

    if filters.status:
        clauses.append(f"status IN ({_quoted(filters.status)})")
    if filters.priority:
        clauses.append(f"priority IN ({_quoted(filters.priority)})")
    if filters.assignee:
        clauses.append(
            _either(filters.assignee, UNASSIGNED, "assignee is EMPTY", "assignee")
        )
    if filters.issue_type:
        clauses.append(f"issuetype IN ({_quoted(filters.issue_type)})")
    if filters.due_date_from:
        clauses.append(f"duedate >= {quote_value(filters.due_date_from)}")
    if filters.due_date_to:
        clauses.append(f"duedate <= {quote_value(filters.due_date_to)}")
    if filters.labels:
        clauses.append(f"labels IN ({_quoted(filters.labels)})")
    if filters.components:
        clauses.append(f"component IN ({_quoted(filters.components)})")
    if filters.release:
        clauses.append(
            _either(filters.release, NO_RELEASE, "fixVersion is EMPTY", "fixVersion")
        )

    return " AND ".join(clauses)


def build_text_search_jql(project_key: str | None, text: str) -> str:
    """JQL for a free-text search, newest first.

    Text that looks like an issue key also matches that key directly.
    """
    match = f"text ~ {quote_value(text)}"
    if _ISSUE_KEY.fullmatch(text):
        match = f"({match} OR key = {quote_value(text.upper())})"

    clauses = [match]
    if project_key:
        clauses.insert(0, f"project = {quote_value(project_key)}")
    return " AND ".join(clauses) + " ORDER BY updated DESC"
