"""FastAPI application for nasbridge.

This module provides the main FastAPI application with:
- CORS middleware for frontend access
- Request logging
- API routes for health and NAS sync
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from nasbridge import __version__
from nasbridge.core.config import load_config
from nasbridge.utils.logging import setup_logging
from nasbridge.utils.settings_db import get_config_path

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Load configuration and logging on startup."""
    config = load_config(get_config_path())
    setup_logging(config)
    logger.info("nasbridge API starting up...")
    logger.info(f"Configuration loaded from {config.general.config_file or 'defaults'}")

    config.ensure_data_dir()
    logger.info(f"Data directory: {config.general.data_dir}")

    yield

    logger.info("nasbridge API shutting down...")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="nasbridge API",
        description="REST API for nasbridge - Sync photos to a NAS over WebDAV or SMB",
        version=__version__,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """Log all incoming requests."""
        logger.debug(f"{request.method} {request.url.path}")
        response = await call_next(request)
        logger.debug(
            f"{request.method} {request.url.path} - {response.status_code}"
        )
        return response

    from nasbridge.api.routes import health, nas
    app.include_router(health.router, prefix="/api", tags=["Health"])
    app.include_router(nas.router, prefix="/api/nas", tags=["NAS"])

    @app.get("/")
    async def root():
        """Root endpoint - returns API information."""
        return {
            "name": "nasbridge API",
            "version": __version__,
            "docs": "/api/docs",
            "health": "/api/health",
        }

    return app


# Create the application instance
app = create_app()
