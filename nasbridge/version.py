"""Package version lookup.

A source checkout reads ``pyproject.toml`` directly; an installed package
falls back to its distribution metadata.
"""

from functools import lru_cache
from importlib.metadata import PackageNotFoundError, version as metadata_version
from pathlib import Path
from typing import Final

import tomllib

PYPROJECT_PATH: Final[Path] = Path(__file__).resolve().parents[1] / "pyproject.toml"
PACKAGE_NAME: Final[str] = "nasbridge"
UNKNOWN_VERSION: Final[str] = "0.0.0"


@lru_cache(maxsize=1)
def get_version() -> str:
    try:
        project = tomllib.loads(PYPROJECT_PATH.read_text(encoding="utf-8")).get("project", {})
    except (OSError, tomllib.TOMLDecodeError):
        project = {}

    if project.get("name") == PACKAGE_NAME and project.get("version"):
        return project["version"]

    try:
        return metadata_version(PACKAGE_NAME)
    except PackageNotFoundError:
        return UNKNOWN_VERSION
