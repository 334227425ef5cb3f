"""WebDAV transport for NAS photo uploads and downloads."""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from datetime import datetime
from pathlib import Path
from typing import AsyncIterator
from uuid import uuid4
from xml.etree import ElementTree as ET

import httpx
import truststore

from nasbridge.core.config import NasConfig
from nasbridge.core.models import NasProtocol, Photo
from nasbridge.sources.nas.addressing import basic_auth_header, build_webdav_url
from nasbridge.sources.nas.base import NasTransport
from nasbridge.sources.nas.errors import ProtocolError
from nasbridge.sources.photos.constants import IMAGE_EXTENSIONS, RAW_EXTENSIONS
from nasbridge.utils.exif import extract_capture_timestamp, extract_exif_metadata

logger = logging.getLogger(__name__)

PROPFIND_BODY = """<?xml version="1.0" encoding="UTF-8"?>
<d:propfind xmlns:d="DAV:">
    <d:prop>
        <d:resourcetype/>
        <d:getcontentlength/>
        <d:getlastmodified/>
    </d:prop>
</d:propfind>
"""

DEFAULT_DOWNLOAD_NAME = "downloaded.jpg"

# httpx.InvalidURL is not an HTTPError subclass
HTTP_ERRORS = (httpx.HTTPError, httpx.InvalidURL)


def guess_photo_type(filename: str) -> str:
    """MIME type for a downloaded file, by extension."""
    ext = Path(filename).suffix.lower()
    if ext == ".png":
        return "image/png"
    if ext in (".heic", ".heif"):
        return "image/heic"
    if ext in RAW_EXTENSIONS:
        return "image/x-raw"
    return "image/jpeg"


class WebDavTransport(NasTransport):
    """Transfer photos to and from a NAS over WebDAV.

    Every operation is an independent HTTP request on its own client; no
    connection or session is shared between items.
    """

    protocol = NasProtocol.WEBDAV

    _truststore_injected = False

    def __init__(
        self,
        download_dir: Path,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the WebDAV transport.

        Args:
            download_dir: Local directory receiving downloaded files
            transport: Optional httpx transport (e.g. httpx.MockTransport in tests)
        """
        self.download_dir = download_dir
        self._transport = transport

    @asynccontextmanager
    async def _open_client(self, config: NasConfig) -> AsyncIterator[httpx.AsyncClient]:
        if config.use_https:
            self._inject_truststore_if_available(config)

        client = httpx.AsyncClient(
            headers={"Authorization": basic_auth_header(config.username, config.password)},
            timeout=httpx.Timeout(config.timeout, connect=30.0),
            follow_redirects=True,
            verify=config.ssl_verify,
            transport=self._transport,
        )
        try:
            yield client
        finally:
            await client.aclose()

    async def test_connection(self, config: NasConfig) -> bool:
        """Test the connection with a ``PROPFIND`` (Depth 0) on the remote root.

        Returns:
            True if the NAS answered 200 or 207, False otherwise
        """
        url = build_webdav_url(config)
        try:
            async with self._open_client(config) as client:
                response = await client.request(
                    "PROPFIND",
                    url,
                    headers={"Depth": "0", "Content-Type": "application/xml"},
                    content=PROPFIND_BODY,
                )
            if response.status_code in (200, 207):
                return True
            logger.warning("WebDAV connection test to %s failed: HTTP %d", url, response.status_code)
            return False
        except HTTP_ERRORS as e:
            logger.error("Failed to connect to WebDAV server %s: %s", url, e)
            return False

    async def upload_photo(self, photo: Photo, config: NasConfig) -> bool:
        """Upload a photo with ``PUT`` to ``<remote root>/<filename>``.

        Returns:
            True on HTTP 200, 201 or 204
        """
        local_path = photo.local_path
        if not local_path.is_file():
            logger.error("File not found: %s", local_path)
            return False

        url = build_webdav_url(config, photo.filename)

        try:
            content = await asyncio.to_thread(local_path.read_bytes)
        except OSError as e:
            logger.error("Failed to read %s: %s", local_path, e)
            return False

        logger.debug("Uploading %s to %s", photo.filename, url)

        try:
            async with self._open_client(config) as client:
                response = await client.put(
                    url,
                    content=content,
                    headers={"Content-Type": photo.type or "application/octet-stream"},
                )

            if response.status_code in (200, 201, 204):
                logger.debug("Uploaded %s -> %s", photo.filename, url)
                return True

            logger.error(
                "Failed to upload %s: HTTP %d - %s",
                photo.filename,
                response.status_code,
                response.text[:200],
            )
            return False

        except HTTP_ERRORS as e:
            logger.error("Failed to upload %s: %s", photo.filename, e)
            return False

    async def download_photo(self, remote_path: str, config: NasConfig) -> Photo | None:
        """Download ``remote_path`` (relative to the remote root) with ``GET``.

        The body is stored in the download directory and described by a new
        :class:`Photo`. Image files get EXIF metadata and capture time when
        available.

        Returns:
            The downloaded Photo, or None on any non-200 answer or error
        """
        url = build_webdav_url(config, remote_path)
        filename = remote_path.rstrip("/").split("/")[-1]
        if filename in ("", ".", ".."):
            filename = DEFAULT_DOWNLOAD_NAME

        try:
            async with self._open_client(config) as client:
                response = await client.get(url)
            if response.status_code != 200:
                raise ProtocolError("GET", response.status_code)

            local_path = self.download_dir / filename
            await asyncio.to_thread(self._write_file, local_path, response.content)
        except (*HTTP_ERRORS, ProtocolError, OSError) as e:
            logger.error("Failed to download %s: %s", remote_path, e)
            return None

        exif: dict | None = None
        timestamp: datetime | None = None
        if local_path.suffix.lower() in IMAGE_EXTENSIONS:
            exif = await asyncio.to_thread(extract_exif_metadata, local_path) or None
            if exif:
                timestamp = extract_capture_timestamp(exif)

        logger.info("Downloaded %s (%d bytes)", filename, len(response.content))
        return Photo(
            id=uuid4().hex,
            uri=f"file://{local_path.resolve()}",
            filename=filename,
            type=guess_photo_type(filename),
            size=len(response.content),
            timestamp=timestamp or datetime.now(),
            exif=exif,
        )

    async def create_remote_directory(self, config: NasConfig) -> bool:
        """Create the remote root with ``MKCOL``.

        Returns:
            True if created (201) or already present (405)
        """
        url = build_webdav_url(config)
        try:
            async with self._open_client(config) as client:
                response = await client.request("MKCOL", url)
            if response.status_code in (201, 405):  # 405 = already exists
                logger.debug("Remote directory ready: %s", url)
                return True
            logger.warning("Failed to create folder %s: HTTP %d", url, response.status_code)
            return False
        except HTTP_ERRORS as e:
            logger.error("Failed to create folder %s: %s", url, e)
            return False

    async def list_remote_files(self, config: NasConfig) -> list[str]:
        """List the remote root with ``PROPFIND`` (Depth 1).

        Returns:
            The ``href`` of every non-directory entry, or [] on anything but 207
        """
        url = build_webdav_url(config)
        try:
            async with self._open_client(config) as client:
                response = await client.request(
                    "PROPFIND",
                    url,
                    headers={"Depth": "1", "Content-Type": "application/xml"},
                    content=PROPFIND_BODY,
                )
            if response.status_code != 207:
                logger.warning("Listing %s failed: HTTP %d", url, response.status_code)
                return []

            root = ET.fromstring(response.content)
        except HTTP_ERRORS as e:
            logger.error("Failed to list %s: %s", url, e)
            return []
        except ET.ParseError as e:
            logger.error("Malformed PROPFIND response from %s: %s", url, e)
            return []

        ns = {"d": "DAV:"}
        return [
            href.text.strip()
            for href in root.iterfind(".//d:response/d:href", ns)
            if href.text and not href.text.strip().endswith("/")
        ]

    @staticmethod
    def _write_file(path: Path, content: bytes) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)

    def _inject_truststore_if_available(self, config: NasConfig) -> None:
        """Make HTTPX use the system trust store via truststore."""
        if config.ssl_verify is False:
            logger.debug("SSL verification disabled; skipping truststore injection")
            return
        if WebDavTransport._truststore_injected:
            return
        try:
            truststore.inject_into_ssl()
            WebDavTransport._truststore_injected = True
            logger.info("Using system trust store for WebDAV via truststore")
        except Exception as exc:
            logger.warning("Failed to inject system trust store: %s", exc)
