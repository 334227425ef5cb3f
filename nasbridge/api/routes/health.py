"""Health check and version endpoints."""

import logging
import sys
from datetime import datetime

from fastapi import APIRouter

from nasbridge import __version__
from nasbridge.api.models import HealthResponse, VersionResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint.

    Returns basic health status of the API server.
    """
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now().isoformat(),
    )


@router.get("/version", response_model=VersionResponse)
async def get_version():
    """Get version information."""
    return VersionResponse(
        version=__version__,
        python_version=f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}",
    )
