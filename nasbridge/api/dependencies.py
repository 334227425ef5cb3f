"""Dependency injection for FastAPI endpoints."""

import logging
from functools import lru_cache
from typing import Annotated

from fastapi import Depends, HTTPException, status

from nasbridge.core.config import AppConfig, NasConfig, load_config
from nasbridge.core.nas_sync import NasSyncEngine
from nasbridge.sources.nas import ConfigurationError, require_credentials

logger = logging.getLogger(__name__)


@lru_cache
def get_config() -> AppConfig:
    """Get the application configuration.

    Cached to avoid reloading the config file on every request.
    """
    from nasbridge.utils.settings_db import get_config_path

    config_path = get_config_path()
    return load_config(config_path)


def get_nas_engine(config: Annotated[AppConfig, Depends(get_config)]) -> NasSyncEngine:
    config.ensure_data_dir()
    return NasSyncEngine.from_config(config)


def get_nas_config(config: Annotated[AppConfig, Depends(get_config)]) -> NasConfig:
    """NAS settings with the password resolved; 400 when incomplete."""
    nas = config.nas.with_credentials()
    try:
        require_credentials(nas)
    except ConfigurationError as e:
        logger.warning(f"Rejecting NAS request: {e}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        ) from e
    return nas


# Type aliases for dependency injection
ConfigDep = Annotated[AppConfig, Depends(get_config)]
NasConfigDep = Annotated[NasConfig, Depends(get_nas_config)]
NasSyncEngineDep = Annotated[NasSyncEngine, Depends(get_nas_engine)]
