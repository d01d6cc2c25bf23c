"""FastAPI application factory.

Main entry point for the Hifz Web API. The record store is built once per
app from the configuration (or passed in) and shared through app.state.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from hifz import __version__
from hifz.config.app_config import AppConfig, load_app_config
from hifz.core.errors import Loo7Error
from hifz.core.loo7_service import Loo7Service
from hifz.db.factory import create_store
from hifz.db.store import RecordStore
from hifz.web.routes import health_router, loo7_router, students_router

logger = structlog.get_logger(__name__)

STATUS_BY_KIND = {
    "not_found": status.HTTP_404_NOT_FOUND,
    "validation_error": status.HTTP_400_BAD_REQUEST,
    "invalid_state": status.HTTP_400_BAD_REQUEST,
    "store_error": status.HTTP_500_INTERNAL_SERVER_ERROR,
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Lifespan context manager for startup/shutdown events."""
    config: AppConfig = app.state.config
    logger.info(
        "api_startup",
        storage_backend=config.storage.backend,
        store=type(app.state.service.store).__name__,
        default_owner_id=config.tenancy.default_owner_id,
    )
    yield


async def handle_loo7_error(request: Request, exc: Loo7Error) -> JSONResponse:
    """Map an error kind to its status code and a {error, detail} body."""
    status_code = STATUS_BY_KIND.get(exc.kind, status.HTTP_500_INTERNAL_SERVER_ERROR)
    if status_code >= 500:
        logger.error("api.error", path=request.url.path, kind=exc.kind, error=exc.message)
    else:
        logger.debug("api.rejected", path=request.url.path, kind=exc.kind, error=exc.message)
    return JSONResponse(status_code=status_code, content=exc.to_dict())


def create_app(
    store: RecordStore | None = None,
    config: AppConfig | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        store: Record store to use; built from config when omitted
        config: Application config; loaded from file when omitted

    Returns:
        Configured FastAPI app instance
    """
    config = config or load_app_config()
    store = store or create_store(config.storage)

    app = FastAPI(
        title="Hifz API",
        description="Loo7 assignment and evaluation tracker",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.service = Loo7Service(store)

    # CORS middleware for web clients
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure appropriately for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(Loo7Error, handle_loo7_error)

    # Include routers
    app.include_router(health_router)
    app.include_router(students_router)
    app.include_router(loo7_router)

    return app
