"""NAS synchronization engine (local photos → NAS over WebDAV or SMB)."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Iterable
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from nasbridge.core.config import AppConfig, NasConfig
from nasbridge.core.models import NasProtocol, Photo, SyncResult
from nasbridge.core.sync_state import SyncStateStore
from nasbridge.utils.db import SettingsDB
from nasbridge.sources.nas import (
    ConfigurationError,
    NasTransport,
    SmbTransport,
    WebDavTransport,
    require_credentials,
    select_protocol,
)

logger = logging.getLogger(__name__)

# Called with (processed_count, total_count) after each item
ProgressCallback = Callable[[int, int], Awaitable[None]]


class NasSyncEngine:
    """High-level coordinator for photo → NAS batches.

    Items are transferred one at a time, in input order. A failing item is
    counted and logged; it never aborts the batch.
    """

    def __init__(
        self,
        state: SyncStateStore,
        *,
        download_dir: Path | None = None,
        webdav: NasTransport | None = None,
        smb: NasTransport | None = None,
    ):
        download_dir = download_dir or Path.home() / ".nasbridge" / "downloaded"
        self.state = state
        self.transports: dict[NasProtocol, NasTransport] = {
            NasProtocol.WEBDAV: webdav or WebDavTransport(download_dir),
            NasProtocol.SMB: smb or SmbTransport(download_dir),
        }

    @classmethod
    def from_config(cls, config: AppConfig) -> "NasSyncEngine":
        """Engine backed by the settings database under the data directory."""
        state = SyncStateStore(SettingsDB(config.settings_db_path))
        return cls(state, download_dir=config.download_dir)

    def transport_for(self, config: NasConfig) -> NasTransport:
        return self.transports[select_protocol(config)]

    def _checked(self, config: NasConfig, action: str) -> bool:
        try:
            require_credentials(config)
        except ConfigurationError as e:
            logger.error("Cannot %s: %s", action, e)
            return False
        return True

    async def test_connection(self, config: NasConfig) -> bool:
        if not self._checked(config, "test NAS connection"):
            return False
        transport = self.transport_for(config)
        logger.info("Testing %s connection to %s", transport.protocol.value, config.host)
        return await transport.test_connection(config)

    async def upload_photo(self, photo: Photo, config: NasConfig) -> bool:
        if not self._checked(config, f"upload {photo.filename}"):
            return False
        return await self.transport_for(config).upload_photo(photo, config)

    async def download_photo(self, remote_path: str, config: NasConfig) -> Any:
        """Download one item; a Photo over WebDAV, raw bytes over SMB, None on failure."""
        if not self._checked(config, f"download {remote_path}"):
            return None
        return await self.transport_for(config).download_photo(remote_path, config)

    async def create_remote_directory(self, config: NasConfig) -> bool:
        if not self._checked(config, "create remote directory"):
            return False
        return await self.transport_for(config).create_remote_directory(config)

    async def list_remote_files(self, config: NasConfig) -> list[str]:
        if not self._checked(config, "list remote files"):
            return []
        return await self.transport_for(config).list_remote_files(config)

    @staticmethod
    def select_photos(photos: Iterable[Photo], config: NasConfig) -> list[Photo]:
        """Apply the sync policy: everything, or favourites only."""
        if config.sync_favorites_only:
            return [photo for photo in photos if photo.is_favorite]
        return list(photos)

    async def sync_to_nas(
        self,
        photos: Iterable[Photo],
        config: NasConfig,
        progress_callback: ProgressCallback | None = None,
    ) -> SyncResult:
        """Upload the selected photos sequentially and tally the outcome.

        The last-sync time is stored only when at least one upload succeeded.
        """
        selected = self.select_photos(photos, config)
        total = len(selected)
        result = SyncResult()

        logger.info(
            "Syncing %d photo(s) to %s%s",
            total,
            config.host,
            " (favorites only)" if config.sync_favorites_only else "",
        )

        for processed, photo in enumerate(selected, start=1):
            try:
                if await self.upload_photo(photo, config):
                    result.record_success()
                else:
                    result.record_failure(photo, "upload failed")
            except Exception as e:
                logger.error("Failed to sync photo %s: %s", photo.filename, e)
                result.record_failure(photo, str(e) or type(e).__name__)

            if progress_callback:
                await progress_callback(processed, total)

        if result.successful > 0:
            await self.state.set_last_sync_time(datetime.now(timezone.utc))

        logger.info("NAS sync finished: %d successful, %d failed", result.successful, result.failed)
        return result

    async def get_last_sync_time(self) -> datetime | None:
        return await self.state.get_last_sync_time()

    async def set_last_sync_time(self, timestamp: datetime | int | float) -> None:
        await self.state.set_last_sync_time(timestamp)
