"""Local photo sources feeding the NAS sync."""

from .constants import IMAGE_EXTENSIONS, RAW_EXTENSIONS, VIDEO_EXTENSIONS
from .scanner import LocalPhotoScanner

__all__ = [
    "IMAGE_EXTENSIONS",
    "RAW_EXTENSIONS",
    "VIDEO_EXTENSIONS",
    "LocalPhotoScanner",
]
