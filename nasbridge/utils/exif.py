"""EXIF metadata extraction utilities for photo files."""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Any

import pillow_heif
from PIL import Image
from PIL.ExifTags import IFD, TAGS

logger = logging.getLogger(__name__)

# Register HEIF/HEIC support for Pillow
pillow_heif.register_heif_opener()

EXIF_TIMESTAMP_FORMAT = "%Y:%m:%d %H:%M:%S"


def parse_exif_timestamp(value: Any) -> datetime | None:
    """Parse an EXIF timestamp such as ``"2023:10:15 14:30:45"``."""
    if not isinstance(value, str):
        return None
    try:
        return datetime.strptime(value.strip().rstrip("\x00"), EXIF_TIMESTAMP_FORMAT)
    except ValueError:
        logger.debug("Unparseable EXIF timestamp %r", value)
        return None


def extract_exif_metadata(path: Path) -> dict[str, Any]:
    """
    Extract all available EXIF metadata from an image.

    Tags from the main IFD and the Exif sub-IFD (where DateTimeOriginal,
    Make/Model details and exposure data live) are merged.

    Args:
        path: Path to the image file

    Returns:
        Dictionary of EXIF metadata keyed by tag name
    """
    try:
        with Image.open(path) as img:
            exif_data = img.getexif()

            if not exif_data:
                return {}

            items = dict(exif_data.items())
            items.update(exif_data.get_ifd(IFD.Exif))

            # Convert numeric tags to readable names
            metadata: dict[str, Any] = {}
            for tag_id, value in items.items():
                tag_name = TAGS.get(tag_id, tag_id)

                if isinstance(value, bytes):
                    value = value.decode("utf-8", errors="ignore")

                metadata[str(tag_name)] = value

            return metadata

    except Exception as e:
        logger.warning(f"Failed to extract EXIF metadata from {path.name}: {e}")
        return {}


def extract_capture_timestamp(metadata: dict[str, Any]) -> datetime | None:
    """
    Pick the capture time out of extracted EXIF metadata.

    Tries DateTimeOriginal, then DateTimeDigitized, then DateTime.
    """
    for tag in ("DateTimeOriginal", "DateTimeDigitized", "DateTime"):
        timestamp = parse_exif_timestamp(metadata.get(tag))
        if timestamp:
            return timestamp
    return None
