"""Base class for NAS transport implementations."""

from abc import ABC, abstractmethod
from typing import Any

from nasbridge.core.config import NasConfig
from nasbridge.core.models import NasProtocol, Photo


class NasTransport(ABC):
    """
    Abstract base class for NAS transports.

    All transports (WebDAV, SMB) implement this interface. Every method is a
    single attempt: failures are logged and reported through the return
    value, never raised to the caller.
    """

    protocol: NasProtocol

    @abstractmethod
    async def test_connection(self, config: NasConfig) -> bool:
        """
        Check that the NAS is reachable with the configured credentials.

        Returns:
            True if the NAS accepted the connection
        """
        pass

    @abstractmethod
    async def upload_photo(self, photo: Photo, config: NasConfig) -> bool:
        """
        Upload one photo into the configured remote root.

        Args:
            photo: Photo whose local file is transferred
            config: NAS configuration

        Returns:
            True if the NAS stored the file
        """
        pass

    @abstractmethod
    async def download_photo(self, remote_path: str, config: NasConfig) -> Any:
        """
        Download one item, relative to the configured remote root.

        Returns:
            Transport specific payload, or None on failure
        """
        pass

    @abstractmethod
    async def create_remote_directory(self, config: NasConfig) -> bool:
        """
        Create the configured remote root directory.

        Returns:
            True if the directory exists afterwards
        """
        pass

    @abstractmethod
    async def list_remote_files(self, config: NasConfig) -> list[str]:
        """
        List files (not directories) in the configured remote root.

        Returns:
            Remote file paths, or an empty list on failure
        """
        pass
