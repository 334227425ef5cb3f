"""File extension sets for photo/video detection."""

RAW_EXTENSIONS = frozenset({".raw", ".arw", ".cr2", ".cr3", ".nef", ".dng", ".orf", ".rw2", ".raf"})

IMAGE_EXTENSIONS = frozenset(
    {".jpg", ".jpeg", ".png", ".heic", ".heif", ".gif", ".tif", ".tiff", ".webp"}
) | RAW_EXTENSIONS

VIDEO_EXTENSIONS = frozenset({".mov", ".mp4", ".m4v", ".avi", ".3gp"})
