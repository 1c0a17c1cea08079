"""Entry point for the Resource Registry API.

This script starts the FastAPI application with Uvicorn.  It is
intended to be executed from the project root, for example under
Docker, where you only specify a single Python file to run.

Host, port, log level and the location of the data file are read from
the environment (``HOST``, ``PORT``, ``LOG_LEVEL``, ``DATA_FILE``); see
``resource_registry/app/core/config.py`` for the full list.

Usage:
    python run.py
"""
import asyncio
import logging

from uvicorn import Config, Server

from resource_registry.app.core.config import settings
from resource_registry.app.main import app


async def run_api() -> None:
    """Serve the registry until interrupted."""
    config = Config(
        app=app,
        host=settings.host,
        port=settings.port,
        reload=False,
        log_level=settings.log_level.lower(),
    )
    server = Server(config)
    await server.serve()


def main() -> None:
    try:
        asyncio.run(run_api())
    except KeyboardInterrupt:
        logging.getLogger(__name__).info("Shutting down")


if __name__ == "__main__":
    main()
