"""HTTP server for ``jiraproxy serve``.

Builds the FastAPI application with CORS and the ``/api/`` routers, and runs
it under uvicorn.
"""

from __future__ import annotations

import logging

from jiraproxy.config import Settings

logger = logging.getLogger(__name__)

# Board front-end dev servers
_BUILTIN_ORIGINS = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]


def create_api_app(settings: Settings | None = None):
    """Build the FastAPI application."""
    from fastapi import FastAPI
    from fastapi.middleware.cors import CORSMiddleware

    from jiraproxy import __version__
    from jiraproxy.api.routes import mount_routers
    from jiraproxy.config import get_settings

    settings = settings or get_settings()

    app = FastAPI(
        title="jiraproxy API",
        description="REST proxy between the board front-end and Jira Cloud.",
        version=__version__,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
    )

    # --- CORS -----------------------------------------------------------
    origins = sorted(set(_BUILTIN_ORIGINS + settings.api_cors_allowed_origins))
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_origin_regex=r"^https?://(localhost|127\.0\.0\.1)(:\d+)?$",
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type"],
    )

    # --- Routers ----------------------------------------------------------
    mount_routers(app)

    logger.debug("API app created (upstream: %s)", settings.jira_base_url)
    return app


def run_api_server(
    host: str = "127.0.0.1",
    port: int = 8888,
    dev: bool = False,
) -> None:
    """Start the API server."""
    import uvicorn

    logger.info("jiraproxy listening on http://%s:%d (docs at /api/docs)", host, port)

    if dev:
        import pathlib

        src_dir = str(pathlib.Path(__file__).resolve().parent.parent)
        uvicorn.run(
            "jiraproxy.api.serve:create_api_app",
            factory=True,
            host=host,
            port=port,
            reload=True,
            reload_dirs=[src_dir],
            reload_includes=["*.py"],
            log_level="debug",
        )
    else:
        app = create_api_app()
        uvicorn.run(app, host=host, port=port)
