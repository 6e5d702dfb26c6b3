# Auth router: Jira session logout.
# Created: 2026-10-15
#
# The OAuth login/callback flow that sets these cookies lives outside this
# service; logout only clears what the browser holds.

from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from jiraproxy.api.schemas.common import OkResponse
from jiraproxy.integrations.jira import SESSION_COOKIES

router = APIRouter(tags=["Auth"])


@router.post("/auth/jira/logout", response_model=OkResponse)
async def jira_logout():
    """Expire the Jira session cookies."""
    response = JSONResponse(content=OkResponse().model_dump())
    for name in SESSION_COOKIES:
        response.set_cookie(key=name, value="", max_age=0, path="/", samesite=None)
    return response
