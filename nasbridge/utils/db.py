"""Database utilities for persisted sync state."""

import logging
from datetime import datetime
from pathlib import Path

import aiosqlite

logger = logging.getLogger(__name__)


class SettingsDB:
    """
    Key-value settings stored in SQLite.

    Holds small pieces of runtime state such as the last successful sync
    time. Each call opens its own connection.
    """

    def __init__(self, db_path: Path):
        """
        Initialize database handle.

        Args:
            db_path: Path to SQLite database file
        """
        self.db_path = db_path

    async def initialize(self) -> None:
        """Create the settings table if it doesn't exist."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        async with aiosqlite.connect(self.db_path) as db:
            await db.execute(
                """
                CREATE TABLE IF NOT EXISTS settings (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at REAL NOT NULL
                )
                """
            )
            await db.commit()
            logger.debug(f"Settings database initialized at {self.db_path}")

    async def get_setting(self, key: str) -> str | None:
        """
        Get a setting value.

        Args:
            key: Setting name

        Returns:
            Stored value, or None if not set
        """
        async with aiosqlite.connect(self.db_path) as db:
            async with db.execute(
                "SELECT value FROM settings WHERE key = ?",
                (key,),
            ) as cursor:
                row = await cursor.fetchone()
                return row[0] if row else None

    async def set_setting(self, key: str, value: str) -> None:
        """Insert or overwrite a setting value."""
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute(
                """
                INSERT INTO settings (key, value, updated_at)
                VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET
                    value = excluded.value,
                    updated_at = excluded.updated_at
                """,
                (key, value, datetime.now().timestamp()),
            )
            await db.commit()

    async def delete_setting(self, key: str) -> None:
        """Delete a setting."""
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute("DELETE FROM settings WHERE key = ?", (key,))
            await db.commit()
