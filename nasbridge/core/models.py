"""Data models shared by the NAS sync engine and its transports."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any


class NasProtocol(str, Enum):
    """Wire protocol used to reach the NAS."""

    WEBDAV = "webdav"
    SMB = "smb"


@dataclass(slots=True)
class Photo:
    """A photo record supplied by the local catalog.

    The sync engine only reads these; downloads create new instances.
    """

    id: str
    uri: str
    filename: str
    type: str
    size: int
    is_favorite: bool = False
    width: int = 0
    height: int = 0
    timestamp: datetime | None = None
    exif: dict[str, Any] | None = None

    @property
    def local_path(self) -> Path:
        """Filesystem path of the photo, without a ``file://`` scheme."""
        uri = self.uri
        if uri.startswith("file://"):
            uri = uri[len("file://"):]
        return Path(uri)


@dataclass(slots=True)
class SyncFailure:
    photo_id: str
    filename: str
    reason: str


@dataclass
class SyncResult:
    """Aggregate outcome of one batch.

    ``successful + failed`` always equals the number of photos the batch
    selected for transfer.
    """

    successful: int = 0
    failed: int = 0
    failures: list[SyncFailure] = field(default_factory=list)

    @property
    def total(self) -> int:
        return self.successful + self.failed

    def record_success(self) -> None:
        self.successful += 1

    def record_failure(self, photo: Photo, reason: str) -> None:
        self.failed += 1
        self.failures.append(SyncFailure(photo_id=photo.id, filename=photo.filename, reason=reason))

    def as_dict(self) -> dict[str, Any]:
        return {
            "successful": self.successful,
            "failed": self.failed,
            "failures": [
                {"photo_id": f.photo_id, "filename": f.filename, "reason": f.reason}
                for f in self.failures
            ],
        }
