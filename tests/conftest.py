"""Shared fixtures for the nasbridge test suite."""

from __future__ import annotations

from pathlib import Path

import pytest

from nasbridge.core.config import AppConfig, GeneralConfig, NasConfig
from nasbridge.core.models import Photo
from nasbridge.utils import settings_db


@pytest.fixture(autouse=True)
def fake_keyring(monkeypatch):
    """Keep tests away from the real system keyring."""
    store: dict[tuple[str, str], str] = {}

    def set_password(service, key, password):
        store[(service, key)] = password

    def get_password(service, key):
        return store.get((service, key))

    def delete_password(service, key):
        import keyring.errors

        if (service, key) not in store:
            raise keyring.errors.PasswordDeleteError("not found")
        del store[(service, key)]

    monkeypatch.setattr("nasbridge.utils.credentials.keyring.set_password", set_password)
    monkeypatch.setattr("nasbridge.utils.credentials.keyring.get_password", get_password)
    monkeypatch.setattr("nasbridge.utils.credentials.keyring.delete_password", delete_password)
    return store


@pytest.fixture(autouse=True)
def isolated_local_settings(tmp_path, monkeypatch):
    """Point the remembered-config-path database at a temp file."""
    monkeypatch.setattr(settings_db, "DEFAULT_SETTINGS_PATH", tmp_path / "local_settings.db")


@pytest.fixture(autouse=True)
def clean_env(tmp_path, monkeypatch):
    for name in ("NASBRIDGE_NAS_HOST", "NASBRIDGE_NAS_USERNAME", "NASBRIDGE_NAS_PASSWORD", "NASBRIDGE_NAS_PORT"):
        monkeypatch.delenv(name, raising=False)
    # Default data directory for configs built without an explicit one
    monkeypatch.setenv("NASBRIDGE_GENERAL_DATA_DIR", str(tmp_path / "default-data"))


@pytest.fixture
def webdav_config() -> NasConfig:
    return NasConfig(
        host="nas.local",
        port=5005,
        username="alice",
        password="secret",
        remote_path="/photos",
    )


@pytest.fixture
def smb_config() -> NasConfig:
    return NasConfig(
        host="nas.local",
        port=445,
        username="alice",
        password="secret",
        remote_path="photos/vacation",
    )


@pytest.fixture
def app_config(tmp_path) -> AppConfig:
    return AppConfig(
        general=GeneralConfig(data_dir=tmp_path / "data"),
        nas=NasConfig(
            host="nas.local",
            port=5005,
            username="alice",
            password="secret",
            remote_path="/photos",
        ),
    )


@pytest.fixture
def make_photo(tmp_path):
    """Create a photo file on disk and return its Photo record."""

    def _make(filename: str = "IMG_0001.jpg", *, content: bytes = b"jpeg-bytes", favorite: bool = False) -> Photo:
        path: Path = tmp_path / "library" / filename
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
        return Photo(
            id=f"id-{filename}",
            uri=f"file://{path}",
            filename=filename,
            type="image/jpeg",
            size=len(content),
            is_favorite=favorite,
        )

    return _make
