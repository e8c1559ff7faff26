"""
Main entrypoint for the Volunteer Board API.

This module assembles the FastAPI application, sets up logging and
includes versioned routers.  The ``create_app`` function builds and
configures the app, which is then instantiated at module import time
as ``app``, e.g.::

    uvicorn volunteer_board_api.app.main:app --reload

The application title and version are provided via ``Settings`` from
``core.config``.
"""

from fastapi import FastAPI

from .api.v1.router import router as v1_router
from .core.config import settings
from .core.logging_config import setup_logging
from .core.store import init_store


def create_app() -> FastAPI:
    """Create and configure a FastAPI application.

    Configures logging, mounts the v1 routers under ``/api/v1`` and
    prepares the data directory on startup.
    """
    # Logging first so that startup messages are formatted.
    setup_logging(settings.log_level, settings.log_file or None)

    app = FastAPI(title=settings.project_name, version=settings.api_version, debug=settings.debug)

    app.include_router(v1_router, prefix="/api/v1")

    @app.on_event("startup")
    async def startup_event() -> None:
        init_store()

    return app


app = create_app()
