# Router aggregation.
# Created: 2026-10-15
#
# mount_routers(app) registers every resource router under /api/.

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from fastapi import FastAPI

logger = logging.getLogger(__name__)

API_PREFIX = "/api"

# (module_path, attr_name, tag)
_ROUTERS: list[tuple[str, str, str]] = [
    ("jiraproxy.api.routes.auth", "router", "Auth"),
    ("jiraproxy.api.routes.issues", "router", "Issues"),
    ("jiraproxy.api.routes.issuetypes", "router", "Issue Types"),
    ("jiraproxy.api.routes.projects", "router", "Projects"),
    ("jiraproxy.api.routes.user", "router", "User"),
]


def mount_routers(app: FastAPI) -> None:
    """Mount all resource routers on *app* at ``/api``."""
    import importlib

    from fastapi import APIRouter

    for module_path, attr_name, tag in _ROUTERS:
        mod = importlib.import_module(module_path)
        router: APIRouter = getattr(mod, attr_name)
        app.include_router(router, prefix=API_PREFIX)
        logger.debug("Mounted router: %s (%s)", module_path, tag)
