"""nasbridge - sync photo libraries to a NAS over WebDAV or SMB."""

from nasbridge.version import get_version

__version__ = get_version()

__all__ = ["__version__"]
