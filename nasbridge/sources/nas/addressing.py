"""Address, credential and protocol helpers for NAS transports.

Everything here is a pure function of a :class:`NasConfig`; no network I/O.
"""

from __future__ import annotations

import base64
from urllib.parse import quote, unquote, urlsplit

from nasbridge.core.config import NasConfig
from nasbridge.core.models import NasProtocol
from nasbridge.sources.nas.errors import ConfigurationError, NoShareNameError

SMB_PORT = 445
HTTP_PORT = 80
HTTPS_PORT = 443


def select_protocol(config: NasConfig) -> NasProtocol:
    """Pick the transport for a config.

    An explicit ``protocol`` wins; otherwise port 445 means SMB and
    anything else (including no port) means WebDAV.
    """
    if config.protocol == "smb":
        return NasProtocol.SMB
    if config.protocol == "webdav":
        return NasProtocol.WEBDAV
    return NasProtocol.SMB if config.port == SMB_PORT else NasProtocol.WEBDAV


def require_credentials(config: NasConfig) -> None:
    """Raise ConfigurationError unless host, username and password are all set."""
    missing = [
        name
        for name, value in (
            ("host", config.host),
            ("username", config.username),
            ("password", config.password),
        )
        if not value
    ]
    if missing:
        raise ConfigurationError(f"NAS configuration incomplete: missing {', '.join(missing)}")


def _segments(path: str | None) -> list[str]:
    if not path:
        return []
    return [part for part in path.replace("\\", "/").split("/") if part]


def normalize_remote_path(remote_path: str | None) -> str:
    """Return ``remote_path`` with exactly one leading slash and no trailing one.

    ``None`` and empty values map to ``"/"``.
    """
    return "/" + "/".join(_segments(remote_path))


def build_webdav_url(config: NasConfig, item_path: str = "") -> str:
    """Build the absolute WebDAV URL for ``item_path`` under the configured root.

    Each path segment is percent-encoded, so ``#`` and ``?`` stay part of
    the item name.

    >>> build_webdav_url(NasConfig(host="nas", port=8080, remote_path="/photos"), "a.jpg")
    'http://nas:8080/photos/a.jpg'
    >>> build_webdav_url(NasConfig(host="nas", remote_path="/photos"), "IMG#1.jpg")
    'http://nas:80/photos/IMG%231.jpg'
    """
    scheme = "https" if config.use_https else "http"
    port = config.port or (HTTPS_PORT if config.use_https else HTTP_PORT)

    segments = _segments(config.remote_path) + _segments(item_path)
    path = "/" + "/".join(quote(segment, safe="") for segment in segments)

    return f"{scheme}://{config.host}:{port}{path}"


def resolve_smb_address(config: NasConfig, item_path: str = "") -> tuple[str, str]:
    """Split the configured remote path into ``(share_name, share_relative_path)``.

    The first segment of ``remote_path`` is the share; the rest, joined with
    ``item_path``, is the path inside it (possibly empty).

    Raises:
        NoShareNameError: remote_path has no non-empty first segment
    """
    segments = _segments(config.remote_path)
    if not segments:
        raise NoShareNameError(config.remote_path)

    share_name, *subpath = segments
    return share_name, "/".join(subpath + _segments(item_path))


def describe_address(config: NasConfig) -> str | None:
    """Human readable address of the configured root, or None without a host."""
    if not config.host:
        return None
    if select_protocol(config) is NasProtocol.WEBDAV:
        return build_webdav_url(config)
    try:
        share_name, subpath = resolve_smb_address(config)
    except NoShareNameError:
        return f"smb://{config.host} (no share name)"
    return f"smb://{config.host}/{share_name}/{subpath}".rstrip("/")


def relative_remote_path(config: NasConfig, entry: str) -> str:
    """Turn a listed entry into a path relative to the remote root.

    WebDAV listings hold absolute, percent-encoded hrefs and SMB listings hold
    share relative paths; :meth:`NasTransport.download_photo` takes neither.

    >>> relative_remote_path(NasConfig(host="nas", remote_path="/photos"), "/photos/IMG%231.jpg")
    'IMG#1.jpg'
    """
    root = _segments(config.remote_path)
    if select_protocol(config) is NasProtocol.WEBDAV:
        parts = _segments(unquote(urlsplit(entry).path))
    else:
        root = root[1:]
        parts = _segments(entry)

    if parts[: len(root)] == root:
        parts = parts[len(root) :]
    return "/".join(parts)


def basic_auth_header(username: str, password: str) -> str:
    """HTTP Basic ``Authorization`` header value."""
    token = base64.b64encode(f"{username}:{password}".encode("utf-8")).decode("ascii")
    return f"Basic {token}"


def smb_credentials(config: NasConfig) -> tuple[str, str]:
    """Username/password pair for an SMB session."""
    require_credentials(config)
    return config.username, config.password
