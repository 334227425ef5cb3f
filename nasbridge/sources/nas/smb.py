"""SMB transport for NAS photo uploads and downloads.

Each operation runs its own session: connect, operate, disconnect. The
blocking ``smbclient`` calls run on a worker thread so both transports can
be awaited the same way.
"""

from __future__ import annotations

import asyncio
import logging
import shutil
from collections.abc import Callable
from pathlib import Path
from typing import Any, TypeVar

import smbclient
from smbprotocol.exceptions import SMBException

from nasbridge.core.config import NasConfig
from nasbridge.core.models import NasProtocol, Photo
from nasbridge.sources.nas.addressing import SMB_PORT, resolve_smb_address, smb_credentials
from nasbridge.sources.nas.base import NasTransport
from nasbridge.sources.nas.errors import NasError

logger = logging.getLogger(__name__)

# smbprotocol reports socket level connect failures as ValueError
SMB_ERRORS = (SMBException, OSError, ValueError)

T = TypeVar("T")


class SmbClient:
    """Thin blocking client bound to one SMB share.

    Mirrors the connect/disconnect/list/upload/download surface of a mobile
    SMB2 client; every method raises on failure.
    """

    def __init__(self, host: str, username: str, password: str, share_name: str, port: int = SMB_PORT):
        self.host = host
        self.username = username
        self.password = password
        self.share_name = share_name
        self.port = port

    def unc_path(self, share_relative_path: str = "") -> str:
        """``\\\\host\\share\\rel\\path`` for a share relative path."""
        path = f"\\\\{self.host}\\{self.share_name}"
        rel = share_relative_path.strip("/").replace("/", "\\")
        return f"{path}\\{rel}" if rel else path

    def connect(self) -> None:
        smbclient.register_session(
            self.host,
            username=self.username,
            password=self.password,
            port=self.port,
        )
        logger.debug("SMB session opened: %s:%d", self.host, self.port)

    def disconnect(self) -> None:
        smbclient.delete_session(self.host, port=self.port)
        logger.debug("SMB session closed: %s:%d", self.host, self.port)

    def makedirs(self, share_relative_path: str) -> None:
        if share_relative_path.strip("/"):
            smbclient.makedirs(self.unc_path(share_relative_path), exist_ok=True, port=self.port)

    def upload(self, local_path: str, share_relative_path: str) -> None:
        parent = share_relative_path.strip("/").rpartition("/")[0]
        self.makedirs(parent)
        with open(local_path, "rb") as src_file:
            with smbclient.open_file(self.unc_path(share_relative_path), mode="wb", port=self.port) as dst_file:
                shutil.copyfileobj(src_file, dst_file)

    def download(self, share_relative_path: str, local_path: str) -> None:
        Path(local_path).parent.mkdir(parents=True, exist_ok=True)
        with smbclient.open_file(self.unc_path(share_relative_path), mode="rb", port=self.port) as src_file:
            with open(local_path, "wb") as dst_file:
                shutil.copyfileobj(src_file, dst_file)

    def list(self, share_relative_path: str = "") -> list[str]:
        """Share relative paths of the files (not directories) in a directory."""
        prefix = share_relative_path.strip("/")
        return [
            f"{prefix}/{entry.name}" if prefix else entry.name
            for entry in smbclient.scandir(self.unc_path(prefix), port=self.port)
            if not entry.is_dir()
        ]


ClientFactory = Callable[..., Any]


class SmbTransport(NasTransport):
    """Transfer photos to and from an SMB share."""

    protocol = NasProtocol.SMB

    def __init__(self, download_dir: Path, *, client_factory: ClientFactory = SmbClient):
        """Initialize the SMB transport.

        Args:
            download_dir: Local directory receiving downloaded files
            client_factory: Callable building a client from
                ``(host, username, password, share_name, port=...)``
        """
        self.download_dir = download_dir
        self.client_factory = client_factory

    def initialize_client(self, config: NasConfig) -> Any | None:
        """Build a client bound to the configured share.

        Returns:
            The client, or None if credentials or the share name are missing
        """
        try:
            username, password = smb_credentials(config)
            share_name, _ = resolve_smb_address(config)
        except NasError as e:
            logger.error("Cannot initialize SMB client: %s", e)
            return None

        return self.client_factory(
            config.host,
            username,
            password,
            share_name,
            port=config.port or SMB_PORT,
        )

    async def _run(self, config: NasConfig, action: str, operation: Callable[[Any], T]) -> tuple[bool, T | None]:
        """Connect, run ``operation(client)`` and always disconnect afterwards.

        A failed connect is not followed by a disconnect.
        """
        client = self.initialize_client(config)
        if client is None:
            return False, None

        try:
            await asyncio.to_thread(client.connect)
        except SMB_ERRORS as e:
            logger.error("SMB connect to %s failed: %s", config.host, e)
            return False, None

        try:
            result = await asyncio.to_thread(operation, client)
            return True, result
        except SMB_ERRORS as e:
            logger.error("SMB %s failed: %s", action, e)
            return False, None
        finally:
            try:
                await asyncio.to_thread(client.disconnect)
            except SMB_ERRORS as e:
                logger.warning("SMB disconnect from %s failed: %s", config.host, e)

    async def test_connection(self, config: NasConfig) -> bool:
        ok, _ = await self._run(config, "connection test", lambda client: None)
        return ok

    async def upload_photo(self, photo: Photo, config: NasConfig) -> bool:
        try:
            _, target = resolve_smb_address(config, photo.filename)
        except NasError as e:
            logger.error("Cannot upload %s: %s", photo.filename, e)
            return False

        local_path = str(photo.local_path)
        ok, _ = await self._run(
            config,
            f"upload of {photo.filename}",
            lambda client: client.upload(local_path, target),
        )
        if ok:
            logger.debug("Uploaded %s -> %s", photo.filename, target)
        return ok

    async def download_photo(self, remote_path: str, config: NasConfig) -> bytes | None:
        """Download ``remote_path`` (relative to the configured subpath).

        Returns:
            The file content, or None on failure
        """
        try:
            _, source = resolve_smb_address(config, remote_path)
        except NasError as e:
            logger.error("Cannot download %s: %s", remote_path, e)
            return None

        filename = source.rpartition("/")[2] or "downloaded.jpg"
        local_path = self.download_dir / filename

        def _download(client: Any) -> bytes:
            client.download(source, str(local_path))
            return local_path.read_bytes()

        _, content = await self._run(config, f"download of {remote_path}", _download)
        return content

    async def create_remote_directory(self, config: NasConfig) -> bool:
        try:
            _, subpath = resolve_smb_address(config)
        except NasError as e:
            logger.error("Cannot create remote directory: %s", e)
            return False

        ok, _ = await self._run(config, "mkdir", lambda client: client.makedirs(subpath))
        return ok

    async def list_remote_files(self, config: NasConfig) -> list[str]:
        try:
            _, subpath = resolve_smb_address(config)
        except NasError as e:
            logger.error("Cannot list remote files: %s", e)
            return []

        _, files = await self._run(config, "list", lambda client: client.list(subpath))
        return files or []
