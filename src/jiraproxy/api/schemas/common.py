# Common API response schemas.
# Created: 2026-10-15

from __future__ import annotations

from typing import Any

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Flat error body returned for every 4xx/5xx from the proxy."""

    error: str


class OkResponse(BaseModel):
    """Simple success response."""

    ok: bool = True


class SuccessResponse(BaseModel):
    """Acknowledgement for write operations."""

    success: bool = True


class CommentResponse(SuccessResponse):
    """Acknowledgement carrying the created or edited comment."""

    comment: dict[str, Any]
