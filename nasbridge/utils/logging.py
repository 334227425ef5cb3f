"""Logging setup for the CLI and the API server.

Console output goes through rich at the configured level; everything at DEBUG
and above is also kept in a rotating file under ``<data_dir>/logs``.
Per-category minimum levels (``general.log_overrides``) drop a noisy
transport's records from both outputs without touching the global level,
e.g. ``{"smb": "WARNING"}``.
"""
from __future__ import annotations

import logging
import logging.handlers
from pathlib import Path
from typing import Mapping

from rich.console import Console
from rich.logging import RichHandler

from nasbridge.core.config import AppConfig

VALID_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")

FILE_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
FILE_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Third-party loggers that are chatty below WARNING (smbprotocol logs every SMB2 packet)
THIRD_PARTY_LOGGERS = (
    "smbprotocol",
    "smbclient",
    "spnego",
    "httpx",
    "httpcore",
    "aiosqlite",
    "PIL",
    "keyring",
)
SERVER_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")


def level_number(value: str | int) -> int:
    """Numeric level for a name such as ``"warning"``; ValueError if unknown."""
    if isinstance(value, int):
        return value
    name = str(value).upper()
    if name not in VALID_LEVELS:
        raise ValueError(f"Unsupported log level: {value}")
    return logging.getLevelName(name)


def record_category(record: logging.LogRecord) -> str:
    """``log_category`` extra if given, else the last logger name component.

    ``nasbridge.sources.nas.webdav`` -> ``webdav``
    """
    return getattr(record, "log_category", None) or record.name.rsplit(".", 1)[-1]


class CategoryLevelFilter(logging.Filter):
    """Drop records below their category's minimum level."""

    def __init__(self, overrides: Mapping[str, str]):
        super().__init__()
        self.overrides = {category: level_number(level) for category, level in overrides.items()}

    def filter(self, record: logging.LogRecord) -> bool:
        minimum = self.overrides.get(record_category(record))
        return minimum is None or record.levelno >= minimum


def log_file_path(config: AppConfig) -> Path:
    return config.general.data_dir / "logs" / config.general.log_file_name


def _console_handler(levelno: int, console: Console | None) -> logging.Handler:
    handler = RichHandler(console=console, rich_tracebacks=True, show_time=False, show_path=False)
    handler.setLevel(levelno)
    handler.setFormatter(logging.Formatter("%(message)s"))
    return handler


def _file_handler(config: AppConfig) -> logging.Handler:
    path = log_file_path(config)
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.handlers.RotatingFileHandler(
        path,
        maxBytes=config.general.log_file_max_bytes,
        backupCount=config.general.log_file_backup_count,
        encoding="utf-8",
    )
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(fmt=FILE_FORMAT, datefmt=FILE_DATE_FORMAT))
    return handler


def setup_logging(
    config: AppConfig,
    *,
    level_name: str | None = None,
    console: Console | None = None,
) -> Path:
    """Replace the root handlers with a rich console handler and a rotating file.

    Args:
        config: Application config (log level, data dir, file rotation, overrides)
        level_name: Overrides ``general.log_level`` (the CLI ``--log-level``)
        console: rich Console to print through, shared with CLI output

    Returns:
        Path of the log file
    """
    levelno = level_number(level_name or config.general.log_level)

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
    # The file handler keeps DEBUG; the console handler applies levelno
    root.setLevel(logging.DEBUG)

    category_filter = CategoryLevelFilter(config.general.log_overrides)
    for handler in (_console_handler(levelno, console), _file_handler(config)):
        handler.addFilter(category_filter)
        root.addHandler(handler)

    logging.captureWarnings(True)

    for name in THIRD_PARTY_LOGGERS:
        logging.getLogger(name).setLevel(max(levelno, logging.WARNING))

    # uvicorn installs its own handlers; route its records through ours
    for name in SERVER_LOGGERS:
        server_logger = logging.getLogger(name)
        server_logger.handlers.clear()
        server_logger.propagate = True

    return log_file_path(config)
