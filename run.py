"""Unified entry point for the ratings and comments services.

This script serves both FastAPI applications concurrently from one
process, each on its own port.  Configuration is read from environment
variables (see ``attachments_api/app/core/config.py``); the most useful
ones are ``DATABASE_URL``, ``RESOURCE_TYPES``, ``RATINGS_PORT`` and
``COMMENTS_PORT``.

Usage:
    python run.py
"""
import asyncio
import logging

from uvicorn import Config, Server

from attachments_api.app.core.config import settings
from attachments_api.app.main import comments_app, ratings_app


logger = logging.getLogger("attachments_api.run")


def build_server(app, port: int) -> Server:
    """Create a uvicorn server for ``app`` on the configured host."""
    config = Config(
        app=app,
        host=settings.host,
        port=port,
        reload=False,
        log_level=settings.log_level.lower(),
        timeout_graceful_shutdown=settings.shutdown_timeout,
    )
    return Server(config)


async def main() -> None:
    """Run both services; when either one exits, stop the other.

    uvicorn installs SIGINT/SIGTERM handlers and drains in‑flight
    requests before the application shutdown event closes the store.
    """
    servers = [
        build_server(ratings_app, settings.ratings_port),
        build_server(comments_app, settings.comments_port),
    ]
    logger.info(
        "Starting services (ratings port %s, comments port %s)",
        settings.ratings_port,
        settings.comments_port,
    )
    tasks = [asyncio.create_task(server.serve()) for server in servers]
    done, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
    for task in done:
        if exception := task.exception():
            logger.exception("Exception in service", exc_info=exception)
    for server in servers:
        server.should_exit = True
    await asyncio.gather(*pending, return_exceptions=True)
    logger.info("Service shutdown successful")


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except (KeyboardInterrupt, SystemExit):
        pass
