# Issue request schemas.
# Created: 2026-10-16

from __future__ import annotations

from pydantic import BaseModel, Field


class StatusUpdateRequest(BaseModel):
    """Move an issue through a workflow transition."""

    transitionId: str | int | None = Field(None, description="Jira transition id")


class AssigneeUpdateRequest(BaseModel):
    """Assign an issue; ``null`` unassigns it."""

    accountId: str | None = Field(None, description="Atlassian account id")


class CommentRequest(BaseModel):
    """Plain-text body for a new or edited comment."""

    text: str | None = Field(None, description="Comment text; blank is rejected")


class PriorityUpdateRequest(BaseModel):
    priority: str | None = Field(None, description="Priority name, e.g. High")


class DescriptionUpdateRequest(BaseModel):
    """Replace the issue description; an empty string clears it."""

    description: str | None = Field(None, description="Plain-text description")


class SprintUpdateRequest(BaseModel):
    """Move an issue to a sprint; ``null`` sends it to the backlog."""

    sprintId: str | int | None = Field(None, description="Agile sprint id")


class FixVersionsUpdateRequest(BaseModel):
    versionIds: list[str | int] = Field(default_factory=list, description="Version ids")


class ComponentUpdateRequest(BaseModel):
    """Set the issue's component; ``null`` or blank clears it."""

    componentId: str | None = Field(None, description="Component id")


class LinkRequest(BaseModel):
    """Link the path issue to another issue."""

    toIssueKey: str | None = Field(None, description="Key of the issue to link to")
    linkType: str | None = Field(None, description="Link type name (default Relates)")
