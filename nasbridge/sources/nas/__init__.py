"""NAS transports (WebDAV and SMB) and their address helpers."""

from .addressing import (
    basic_auth_header,
    build_webdav_url,
    describe_address,
    normalize_remote_path,
    relative_remote_path,
    require_credentials,
    resolve_smb_address,
    select_protocol,
    smb_credentials,
)
from .base import NasTransport
from .errors import (
    AddressResolutionError,
    ConfigurationError,
    NasError,
    NoShareNameError,
    ProtocolError,
    TransportError,
)
from .smb import SmbClient, SmbTransport
from .webdav import WebDavTransport

__all__ = [
    "AddressResolutionError",
    "ConfigurationError",
    "NasError",
    "NasTransport",
    "NoShareNameError",
    "ProtocolError",
    "SmbClient",
    "SmbTransport",
    "TransportError",
    "WebDavTransport",
    "basic_auth_header",
    "build_webdav_url",
    "describe_address",
    "normalize_remote_path",
    "relative_remote_path",
    "require_credentials",
    "resolve_smb_address",
    "select_protocol",
    "smb_credentials",
]
