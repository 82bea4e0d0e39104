"""
Main entrypoint for the Edu-Learn API.

This module assembles the FastAPI application: logging, CORS for the
browser frontend (which sends the session cookie, so credentials are
allowed for the configured origins only), the versioned router and
the database lifecycle hooks.  Run it with uvicorn::

    uvicorn edu_learn_api.app.main:app --reload

or through ``run.py`` at the repository root.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pymongo.errors import DuplicateKeyError, PyMongoError

from .core.config import settings
from .core.logging_config import setup_logging
from .core.db import close_client, init_db
from .api.v1.router import router as v1_router


logger = logging.getLogger(__name__)


async def duplicate_key_handler(request: Request, exc: DuplicateKeyError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={"detail": "Document already exists"},
    )


async def database_error_handler(request: Request, exc: PyMongoError) -> JSONResponse:
    logger.error("Database error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "Database unavailable"},
    )


def create_app() -> FastAPI:
    """Create and configure a FastAPI application.

    Returns
    -------
    FastAPI
        A configured FastAPI application instance.
    """
    # Logging first so that everything below can log.
    setup_logging(settings.log_level, settings.log_file or None)

    app = FastAPI(title=settings.project_name, version=settings.api_version, debug=settings.debug)

    origins = [o.strip() for o in settings.cors_origins.split(",") if o.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(v1_router, prefix=settings.api_prefix)

    # DuplicateKeyError subclasses PyMongoError; the more specific
    # handler wins.
    app.add_exception_handler(DuplicateKeyError, duplicate_key_handler)
    app.add_exception_handler(PyMongoError, database_error_handler)

    @app.on_event("startup")
    async def startup_event() -> None:
        # Index creation also verifies the connection early.
        init_db()

    @app.on_event("shutdown")
    async def shutdown_event() -> None:
        close_client()

    return app


# Create the application instance at import time so that tools such as
# uvicorn can discover it without calling create_app manually.
app = create_app()
