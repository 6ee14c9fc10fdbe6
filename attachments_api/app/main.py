"""
Main entrypoint for the ratings and comments services.

``create_app`` assembles the FastAPI application of one service: it
sets up logging, creates the bucket store, mounts the service router
under ``/api/v1`` and the shared ``/status`` endpoint, and registers
the error handlers.  The store is opened and the configured resource
types are provisioned when the application starts; it is closed on
shutdown.

Both applications are instantiated at import time so they can be
served directly, e.g.::

    uvicorn attachments_api.app.main:ratings_app --port 8001
    uvicorn attachments_api.app.main:comments_app --port 8002

``run.py`` at the project root serves both from one process.
"""

import logging
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.concurrency import run_in_threadpool
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .api.v1.endpoints import status as status_endpoint
from .api.v1.router import ROUTERS
from .core.config import Settings, settings
from .core.db import get_database_path
from .core.errors import AttachmentsError
from .core.logging_config import setup_logging
from .core.store import BucketStore
from .services.namespace_service import ResourceNamespaceService


logger = logging.getLogger(__name__)


def create_app(service: str = "ratings", app_settings: Optional[Settings] = None) -> FastAPI:
    """Create and configure the FastAPI application of one service.

    Parameters
    ----------
    service : str
        ``"ratings"`` or ``"comments"``.
    app_settings : Optional[Settings]
        Settings to use instead of the module level ``settings``.

    Returns
    -------
    FastAPI
        A configured application whose ``state.store`` is the bucket
        store it serves.
    """
    if service not in ROUTERS:
        raise ValueError(f"unknown service {service!r}; expected one of {sorted(ROUTERS)}")
    app_settings = app_settings or settings
    router, invalid_body_message = ROUTERS[service]

    # Initialise logging before anything else so that startup can log.
    setup_logging(app_settings.log_level, app_settings.log_file or None)

    app = FastAPI(
        title=f"{app_settings.project_name} ({service})",
        version=app_settings.api_version,
        debug=app_settings.debug,
    )
    app.state.store = BucketStore(
        get_database_path(app_settings.database_url),
        timeout=app_settings.db_timeout,
    )

    app.include_router(status_endpoint.router, tags=["status"])
    app.include_router(router, prefix="/api/v1")

    @app.exception_handler(RequestValidationError)
    async def handle_invalid_body(request: Request, exc: RequestValidationError) -> JSONResponse:
        logger.error("%s: %s", invalid_body_message, exc.errors())
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": invalid_body_message},
        )

    @app.exception_handler(AttachmentsError)
    async def handle_attachments_error(request: Request, exc: AttachmentsError) -> JSONResponse:
        logger.error("Unhandled error on %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "internal error"},
        )

    @app.on_event("startup")
    async def startup_event() -> None:
        # A service that cannot provision its resource types must not
        # start serving requests, so errors propagate and abort startup.
        store: BucketStore = app.state.store
        await run_in_threadpool(store.open)
        await run_in_threadpool(
            ResourceNamespaceService(store).provision, app_settings.resource_type_names()
        )
        logger.info("Started %s service", service)

    @app.on_event("shutdown")
    async def shutdown_event() -> None:
        # close() waits for an in-flight writer, so keep it off the event loop.
        await run_in_threadpool(app.state.store.close)
        logger.info("Stopped %s service", service)

    return app


ratings_app = create_app("ratings")
comments_app = create_app("comments")
