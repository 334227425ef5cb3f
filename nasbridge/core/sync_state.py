"""Persistence of the last successful NAS sync time."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

import aiosqlite

from nasbridge.utils.db import SettingsDB

logger = logging.getLogger(__name__)

LAST_SYNC_KEY = "last_sync_time"


def parse_timestamp(value: str) -> datetime | None:
    """Parse a stored timestamp: epoch milliseconds or an ISO-8601 string."""
    value = value.strip()
    try:
        return datetime.fromtimestamp(int(value) / 1000, tz=timezone.utc)
    except ValueError:
        pass
    except (OverflowError, OSError):
        return None

    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class SyncStateStore:
    """Read and write the last-sync timestamp.

    Storage problems are logged and never raised: a failed read looks like
    "never synced", a failed write leaves the previous value in place.
    """

    def __init__(self, db: SettingsDB):
        self.db = db
        self._initialized = False

    async def _ensure_initialized(self) -> None:
        if not self._initialized:
            await self.db.initialize()
            self._initialized = True

    async def get_last_sync_time(self) -> datetime | None:
        try:
            await self._ensure_initialized()
            raw = await self.db.get_setting(LAST_SYNC_KEY)
        except (aiosqlite.Error, OSError) as e:
            logger.error("Error getting last sync time: %s", e)
            return None

        if raw is None:
            return None

        timestamp = parse_timestamp(raw)
        if timestamp is None:
            logger.warning("Ignoring malformed last sync time %r", raw)
        return timestamp

    async def set_last_sync_time(self, timestamp: datetime | int | float) -> None:
        """Overwrite the stored timestamp.

        Args:
            timestamp: aware/naive datetime (naive is taken as UTC) or epoch milliseconds
        """
        if isinstance(timestamp, datetime):
            moment = timestamp if timestamp.tzinfo else timestamp.replace(tzinfo=timezone.utc)
        else:
            moment = datetime.fromtimestamp(timestamp / 1000, tz=timezone.utc)

        try:
            await self._ensure_initialized()
            await self.db.set_setting(LAST_SYNC_KEY, moment.isoformat())
            logger.info("Last sync time updated to: %s", moment.isoformat())
        except (aiosqlite.Error, OSError) as e:
            logger.error("Error setting last sync time: %s", e)
