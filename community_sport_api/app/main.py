"""
Main entrypoint for the Community Sport API.

This module assembles the FastAPI application, sets up logging, opens
the catalog store and includes versioned routers.  The ``create_app``
function builds and configures the app, which is then instantiated at
module import time as ``app``, e.g.::

    uvicorn community_sport_api.app.main:app --reload

The application title and version are provided via ``Settings`` from
``core.config``.
"""

import logging
from typing import Optional

from fastapi import FastAPI

from .api.v1.router import router as v1_router
from .core.config import Settings, settings as default_settings
from .core.context import build_context
from .core.logging_config import setup_logging

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Create and configure a FastAPI application.

    Parameters
    ----------
    settings : Optional[Settings]
        Settings for this instance.  Defaults to the settings read from
        the environment at import time.

    Returns
    -------
    FastAPI
        A configured application whose ``state.context`` holds the
        store and catalog cache used by every request.
    """
    settings = settings or default_settings
    setup_logging(settings.log_level, settings.log_file)

    app = FastAPI(title=settings.project_name, version=settings.api_version, debug=settings.debug)

    app.state.context = build_context(settings)
    logger.info("Catalog store ready at %s", app.state.context.store.db_path)

    app.include_router(v1_router, prefix="/api/v1")
    return app


app = create_app()
