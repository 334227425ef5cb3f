"""Tests for the NAS sync engine."""

import asyncio
from datetime import datetime, timezone
from unittest.mock import AsyncMock, call, patch

import pytest

from nasbridge.core.config import NasConfig
from nasbridge.core.models import NasProtocol, Photo
from nasbridge.core.nas_sync import NasSyncEngine
from nasbridge.core.sync_state import SyncStateStore
from nasbridge.sources.nas import NasTransport
from nasbridge.utils.db import SettingsDB


class FakeTransport(NasTransport):
    def __init__(self, protocol, outcomes=None):
        self.protocol = protocol
        self.outcomes = outcomes or {}
        self.uploaded = []

    async def test_connection(self, config):
        return True

    async def upload_photo(self, photo, config):
        self.uploaded.append(photo.filename)
        outcome = self.outcomes.get(photo.filename, True)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    async def download_photo(self, remote_path, config):
        return b"payload"

    async def create_remote_directory(self, config):
        return True

    async def list_remote_files(self, config):
        return ["a.jpg"]


def photo(filename, favorite=False):
    return Photo(
        id=f"id-{filename}",
        uri=f"file:///library/{filename}",
        filename=filename,
        type="image/jpeg",
        size=10,
        is_favorite=favorite,
    )


@pytest.fixture
def state(tmp_path):
    return SyncStateStore(SettingsDB(tmp_path / "settings.db"))


@pytest.fixture
def webdav():
    return FakeTransport(NasProtocol.WEBDAV)


@pytest.fixture
def smb():
    return FakeTransport(NasProtocol.SMB)


@pytest.fixture
def engine(state, webdav, smb):
    return NasSyncEngine(state, webdav=webdav, smb=smb)


@pytest.mark.asyncio
async def test_routes_by_protocol(engine, webdav, smb, webdav_config, smb_config):
    await engine.upload_photo(photo("a.jpg"), webdav_config)
    await engine.upload_photo(photo("b.jpg"), smb_config)

    assert webdav.uploaded == ["a.jpg"]
    assert smb.uploaded == ["b.jpg"]


@pytest.mark.asyncio
async def test_sync_all_successful_records_time(engine, webdav, webdav_config):
    before = datetime.now(timezone.utc)

    result = await engine.sync_to_nas([photo("a.jpg"), photo("b.jpg")], webdav_config)

    assert (result.successful, result.failed) == (2, 0)
    assert webdav.uploaded == ["a.jpg", "b.jpg"]
    last_sync = await engine.get_last_sync_time()
    assert last_sync is not None
    assert last_sync >= before.replace(microsecond=0)


@pytest.mark.asyncio
async def test_failures_do_not_abort_batch(state, webdav_config):
    webdav = FakeTransport(
        NasProtocol.WEBDAV,
        outcomes={"b.jpg": False, "c.jpg": RuntimeError("boom")},
    )
    engine = NasSyncEngine(state, webdav=webdav, smb=FakeTransport(NasProtocol.SMB))

    result = await engine.sync_to_nas(
        [photo("a.jpg"), photo("b.jpg"), photo("c.jpg"), photo("d.jpg")], webdav_config
    )

    assert webdav.uploaded == ["a.jpg", "b.jpg", "c.jpg", "d.jpg"]
    assert (result.successful, result.failed, result.total) == (2, 2, 4)
    assert [(f.filename, f.reason) for f in result.failures] == [
        ("b.jpg", "upload failed"),
        ("c.jpg", "boom"),
    ]
    assert await engine.get_last_sync_time() is not None


@pytest.mark.asyncio
async def test_no_success_leaves_time_untouched(state, webdav_config):
    webdav = FakeTransport(NasProtocol.WEBDAV, outcomes={"a.jpg": False})
    engine = NasSyncEngine(state, webdav=webdav, smb=FakeTransport(NasProtocol.SMB))

    result = await engine.sync_to_nas([photo("a.jpg")], webdav_config)

    assert (result.successful, result.failed) == (0, 1)
    assert await engine.get_last_sync_time() is None


@pytest.mark.asyncio
async def test_empty_batch(engine, webdav_config):
    result = await engine.sync_to_nas([], webdav_config)

    assert result.total == 0
    assert await engine.get_last_sync_time() is None


@pytest.mark.asyncio
async def test_favorites_only(engine, webdav, webdav_config):
    config = webdav_config.model_copy(update={"sync_favorites_only": True})
    photos = [photo("a.jpg", favorite=True), photo("b.jpg"), photo("c.jpg", favorite=True)]

    result = await engine.sync_to_nas(photos, config)

    assert webdav.uploaded == ["a.jpg", "c.jpg"]
    assert result.total == 2


@pytest.mark.asyncio
async def test_progress_after_each_item(state, webdav_config):
    webdav = FakeTransport(NasProtocol.WEBDAV, outcomes={"a.jpg": False})
    engine = NasSyncEngine(state, webdav=webdav, smb=FakeTransport(NasProtocol.SMB))
    on_progress = AsyncMock()

    await engine.sync_to_nas([photo("a.jpg"), photo("b.jpg")], webdav_config, progress_callback=on_progress)

    assert on_progress.await_args_list == [call(1, 2), call(2, 2)]


@pytest.mark.asyncio
async def test_state_failure_does_not_break_batch(engine, webdav_config):
    with patch.object(engine.state.db, "set_setting", AsyncMock(side_effect=OSError("read-only"))):
        result = await engine.sync_to_nas([photo("a.jpg")], webdav_config)

    assert result.successful == 1


@pytest.mark.asyncio
async def test_missing_credentials_fail_every_item(engine, webdav):
    config = NasConfig(host="nas.local", username="alice", remote_path="/photos")

    result = await engine.sync_to_nas([photo("a.jpg"), photo("b.jpg")], config)

    assert (result.successful, result.failed) == (0, 2)
    assert webdav.uploaded == []


@pytest.mark.asyncio
async def test_cancellation_propagates_without_timestamp(state, webdav_config):
    webdav = FakeTransport(NasProtocol.WEBDAV, outcomes={"b.jpg": asyncio.CancelledError()})
    engine = NasSyncEngine(state, webdav=webdav, smb=FakeTransport(NasProtocol.SMB))

    with pytest.raises(asyncio.CancelledError):
        await engine.sync_to_nas([photo("a.jpg"), photo("b.jpg"), photo("c.jpg")], webdav_config)

    assert webdav.uploaded == ["a.jpg", "b.jpg"]
    assert await engine.get_last_sync_time() is None


@pytest.mark.asyncio
async def test_single_item_operations(engine, smb_config):
    assert await engine.test_connection(smb_config) is True
    assert await engine.download_photo("a.jpg", smb_config) == b"payload"
    assert await engine.create_remote_directory(smb_config) is True
    assert await engine.list_remote_files(smb_config) == ["a.jpg"]


@pytest.mark.asyncio
async def test_single_item_operations_need_credentials(engine):
    config = NasConfig(host="nas.local")

    assert await engine.test_connection(config) is False
    assert await engine.download_photo("a.jpg", config) is None
    assert await engine.list_remote_files(config) == []


def test_from_config_uses_data_dir(app_config):
    engine = NasSyncEngine.from_config(app_config)

    assert engine.state.db.db_path == app_config.settings_db_path
    assert engine.transports[NasProtocol.WEBDAV].download_dir == app_config.download_dir
