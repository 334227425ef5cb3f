"""Build Photo records from a local folder for NAS sync."""

from __future__ import annotations

import hashlib
import mimetypes
from collections.abc import Iterable, Iterator
from datetime import datetime
from pathlib import Path

from nasbridge.core.models import Photo
from nasbridge.sources.photos.constants import IMAGE_EXTENSIONS, RAW_EXTENSIONS, VIDEO_EXTENSIONS


def guess_mime_type(path: Path) -> str:
    ext = path.suffix.lower()
    if ext in RAW_EXTENSIONS:
        return "image/x-raw"
    if ext in (".heic", ".heif"):
        return "image/heic"
    mime, _ = mimetypes.guess_type(path.name)
    return mime or "application/octet-stream"


def photo_id_for(path: Path) -> str:
    """Stable id derived from the absolute path."""
    return hashlib.sha1(str(path.resolve()).encode("utf-8")).hexdigest()[:16]


class LocalPhotoScanner:
    """Walk a folder and yield `Photo` objects for image (and optionally video) files."""

    def __init__(
        self,
        folder: Path,
        *,
        recursive: bool = True,
        include_videos: bool = False,
        favorites: Iterable[str] = (),
    ):
        self.folder = folder.expanduser()
        self.recursive = recursive
        self.include_videos = include_videos
        # Favorites are matched by file name, case-insensitively
        self.favorites = {name.lower() for name in favorites}

    def iter_photos(self) -> Iterator[Photo]:
        base = self.folder
        if not base.exists() or not base.is_dir():
            return

        pattern = base.rglob("*") if self.recursive else base.iterdir()
        for path in sorted(p for p in pattern if p.is_file()):
            ext = path.suffix.lower()
            if ext not in IMAGE_EXTENSIONS and not (self.include_videos and ext in VIDEO_EXTENSIONS):
                continue

            stat = path.stat()
            yield Photo(
                id=photo_id_for(path),
                uri=f"file://{path.resolve()}",
                filename=path.name,
                type=guess_mime_type(path),
                size=stat.st_size,
                is_favorite=path.name.lower() in self.favorites,
                timestamp=datetime.fromtimestamp(stat.st_mtime),
            )

    def scan(self) -> list[Photo]:
        return list(self.iter_photos())
