"""Exceptions raised inside the NAS transports.

Transports catch these at their boundary and turn them into ``False`` /
``None`` results, so they never reach the batch orchestrator.
"""


class NasError(Exception):
    """Base class for NAS sync errors."""


class ConfigurationError(NasError):
    """Host, username or password is missing."""


class AddressResolutionError(NasError):
    """The configuration does not yield a usable remote address."""


class NoShareNameError(AddressResolutionError):
    """The remote path has no first segment to use as the SMB share name."""

    def __init__(self, remote_path: str | None):
        super().__init__(f"No SMB share name in remote path {remote_path!r}")
        self.remote_path = remote_path


class TransportError(NasError):
    """Network level failure (DNS, refused connection, timeout, TLS, SMB session)."""


class ProtocolError(TransportError):
    """The NAS answered with an unexpected status code."""

    def __init__(self, operation: str, status_code: int):
        super().__init__(f"{operation} failed: HTTP {status_code}")
        self.operation = operation
        self.status_code = status_code
