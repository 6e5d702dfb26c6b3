# Proxy wrapper: maps one upstream client call onto a JSON response.
# Created: 2026-10-15
#
# Response contract for every route: 200 with the payload as-is, 404 for a
# missing single resource, 500 with a fixed message for any upstream failure.

from __future__ import annotations

import json
import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from fastapi import Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ValidationError

from jiraproxy.api.schemas.common import ErrorResponse

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

INVALID_BODY = "Invalid request body"


def error_response(message: str, status_code: int) -> JSONResponse:
    """Flat ``{"error": message}`` body with the given status."""
    return JSONResponse(
        content=ErrorResponse(error=message).model_dump(), status_code=status_code
    )


async def proxy(
    fetch: Callable[[], Awaitable[Any]],
    error_message: str,
    *,
    not_found_message: str | None = None,
) -> JSONResponse:
    """Await ``fetch()`` and translate its outcome into a response.

    Args:
        fetch: Zero-argument coroutine function performing the upstream call.
        error_message: Fixed body text for the 500 response. The raw error is
            only logged, never returned to the caller.
        not_found_message: When set, an empty result becomes a 404 with this
            text instead of a 200.
    """
    try:
        payload = await fetch()
    except Exception as e:
        logger.error("%s: %s", error_message, e, exc_info=True)
        return error_response(error_message, 500)

    if not_found_message is not None and not payload:
        return error_response(not_found_message, 404)

    return JSONResponse(content=payload)


async def read_body(request: Request, model: type[ModelT]) -> ModelT | None:
    """Parse the JSON request body into ``model``.

    A missing or empty body is read as ``{}``. Returns ``None`` when the body
    is not a JSON object or does not fit the model.
    """
    raw = await request.body()
    if not raw.strip():
        data: Any = {}
    else:
        try:
            data = json.loads(raw)
        except ValueError:
            logger.debug("Unparseable JSON body on %s", request.url.path)
            return None

    if not isinstance(data, dict):
        return None
    try:
        return model.model_validate(data)
    except ValidationError as e:
        logger.debug("Rejected body on %s: %s", request.url.path, e)
        return None
