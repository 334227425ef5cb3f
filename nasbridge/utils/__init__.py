"""Shared utilities (logging, persistence, credentials, EXIF)."""
