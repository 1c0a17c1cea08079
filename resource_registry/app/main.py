"""
Main entrypoint for the Resource Registry API.

This module assembles the FastAPI application: it sets up logging,
creates the resource store, installs the CORS and body size middleware
and the error handlers that keep every error response in the
``{"error": ...}`` envelope, and includes the versioned routers.
``create_app`` builds and configures the app, which is then
instantiated at module import time as ``app`` so it can be run with
uvicorn::

    uvicorn resource_registry.app.main:app --reload

Tests build their own application through ``create_app(store=...)``
pointing at a temporary data file.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .api.health import router as health_router
from .api.v1.router import router as v1_router
from .core.config import settings
from .core.logging_config import setup_logging
from .core.storage import get_data_path
from .services.resource_store import ResourceStore


logger = logging.getLogger(__name__)


async def _http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    message = "Route not found" if exc.status_code == 404 else str(exc.detail)
    return JSONResponse(status_code=exc.status_code, content={"error": message}, headers=exc.headers)


async def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    # Raised by FastAPI itself, e.g. for a body that is not valid JSON.
    errors = exc.errors()
    message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
    return JSONResponse(status_code=400, content={"error": message})


async def _unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    # Last resort for faults outside the gateway, e.g. in the health probe.
    logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"error": "Unexpected error"})


async def _limit_body_size(request: Request, call_next):
    """Reject requests whose declared body exceeds ``settings.max_body_bytes``."""
    declared = request.headers.get("content-length")
    if declared is not None:
        try:
            size = int(declared)
        except ValueError:
            return JSONResponse(status_code=400, content={"error": "Invalid Content-Length header"})
        if size > settings.max_body_bytes:
            return JSONResponse(status_code=413, content={"error": "Request body too large"})
    return await call_next(request)


def create_app(store: Optional[ResourceStore] = None) -> FastAPI:
    """Create and configure a FastAPI application.

    Parameters
    ----------
    store : Optional[ResourceStore]
        Store backing the API.  When omitted a store is created for the
        data file configured in ``settings``.

    Returns
    -------
    FastAPI
        A configured FastAPI application instance.
    """
    # Initialise logging before anything else so that the store and
    # the routers can log from the first request on.
    setup_logging(settings.log_level, settings.log_file or None)

    resource_store = store or ResourceStore(get_data_path())

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        # Load (or create) the data file up front so a corrupted file
        # stops the service at boot rather than on the first request.
        await resource_store.init()
        logger.info("Resource store ready at %s", resource_store.file_path)
        yield

    app = FastAPI(
        title=settings.project_name,
        version=settings.api_version,
        debug=settings.debug,
        lifespan=lifespan,
    )
    app.state.store = resource_store

    # Middleware added last runs first, so CORS headers also reach 413s.
    app.middleware("http")(_limit_body_size)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(StarletteHTTPException, _http_error_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.add_exception_handler(Exception, _unexpected_error_handler)

    app.include_router(health_router, tags=["observability"])
    app.include_router(v1_router, prefix="/api/v1")

    return app


# Create the application instance at import time so that tools such as
# uvicorn can discover it without calling create_app manually.
app = create_app()
