"""Remember which config file the CLI used last.

The data directory is itself configured in the config file, so this small
store lives at a fixed path in the home directory instead.
"""

import sqlite3
from contextlib import closing
from pathlib import Path

DEFAULT_SETTINGS_PATH = Path.home() / ".nasbridge_settings.db"
CONFIG_PATH_KEY = "config_file_path"


class LocalSettings:
    """Synchronous SQLite key-value store, usable before any config is loaded."""

    def __init__(self, db_path: Path | None = None):
        self.db_path = Path(db_path or DEFAULT_SETTINGS_PATH)

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.execute("CREATE TABLE IF NOT EXISTS settings (key TEXT PRIMARY KEY, value TEXT NOT NULL)")
        return conn

    def get(self, key: str) -> str | None:
        with closing(self._connect()) as conn:
            row = conn.execute("SELECT value FROM settings WHERE key = ?", (key,)).fetchone()
        return row[0] if row else None

    def set(self, key: str, value: str) -> None:
        with closing(self._connect()) as conn, conn:
            conn.execute(
                "INSERT INTO settings (key, value) VALUES (?, ?) "
                "ON CONFLICT(key) DO UPDATE SET value = excluded.value",
                (key, value),
            )


def get_config_path() -> Path | None:
    """The remembered config file, or None if unset or since deleted."""
    stored = LocalSettings().get(CONFIG_PATH_KEY)
    if not stored:
        return None
    path = Path(stored)
    return path if path.exists() else None


def set_config_path(path: Path) -> None:
    LocalSettings().set(CONFIG_PATH_KEY, str(Path(path).expanduser().resolve()))
