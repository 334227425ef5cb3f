"""Pydantic models for API request/response validation."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from nasbridge.core.models import NasProtocol, Photo


class PhotoModel(BaseModel):
    """A local photo to upload, as described by the caller."""

    id: str
    uri: str = Field(description="file:// URI or absolute path of the photo")
    filename: str
    type: str = "image/jpeg"
    size: int = 0
    is_favorite: bool = False
    width: int = 0
    height: int = 0
    timestamp: datetime | None = None
    exif: dict[str, Any] | None = None

    def to_photo(self) -> Photo:
        return Photo(**self.model_dump())


class SyncRequest(BaseModel):
    """Request model for a NAS sync batch."""

    photos: list[PhotoModel] = Field(default_factory=list)
    favorites_only: bool | None = Field(
        default=None,
        description="Override the configured favorites-only policy",
    )


class SyncFailureModel(BaseModel):
    photo_id: str
    filename: str
    reason: str


class SyncResponse(BaseModel):
    """Response model for a NAS sync batch."""

    successful: int = 0
    failed: int = 0
    failures: list[SyncFailureModel] = Field(default_factory=list)
    timestamp: datetime = Field(default_factory=datetime.now)


class ConnectionTestResponse(BaseModel):
    success: bool
    protocol: NasProtocol


class DirectoryResponse(BaseModel):
    success: bool


class RemoteFilesResponse(BaseModel):
    protocol: NasProtocol
    files: list[str] = Field(default_factory=list)


class NasStatusResponse(BaseModel):
    """Response model for NAS sync status."""

    configured: bool
    protocol: NasProtocol
    address: str | None = None
    favorites_only: bool = False
    last_sync: datetime | None = None


class HealthResponse(BaseModel):
    """Response model for health check."""

    status: str = "healthy"
    timestamp: str


class VersionResponse(BaseModel):
    """Response model for version information."""

    version: str
    python_version: str
