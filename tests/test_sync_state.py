"""Tests for last-sync time persistence."""

from datetime import datetime, timezone

import pytest

from nasbridge.core.sync_state import LAST_SYNC_KEY, SyncStateStore, parse_timestamp
from nasbridge.utils.db import SettingsDB


@pytest.fixture
def db(tmp_path):
    return SettingsDB(tmp_path / "state" / "settings.db")


@pytest.mark.asyncio
async def test_never_synced(db):
    assert await SyncStateStore(db).get_last_sync_time() is None


@pytest.mark.asyncio
async def test_round_trip_datetime(db):
    store = SyncStateStore(db)
    moment = datetime(2024, 5, 1, 12, 30, 15, 250000, tzinfo=timezone.utc)

    await store.set_last_sync_time(moment)

    assert await store.get_last_sync_time() == moment
    assert await db.get_setting(LAST_SYNC_KEY) == "2024-05-01T12:30:15.250000+00:00"


@pytest.mark.asyncio
async def test_epoch_milliseconds_accepted(db):
    store = SyncStateStore(db)

    await store.set_last_sync_time(1_700_000_000_000)

    assert await store.get_last_sync_time() == datetime.fromtimestamp(1_700_000_000, tz=timezone.utc)


@pytest.mark.asyncio
async def test_overwrites_previous_value(db):
    store = SyncStateStore(db)
    await store.set_last_sync_time(datetime(2024, 1, 1, tzinfo=timezone.utc))
    await store.set_last_sync_time(datetime(2024, 2, 1, tzinfo=timezone.utc))

    assert await store.get_last_sync_time() == datetime(2024, 2, 1, tzinfo=timezone.utc)


@pytest.mark.asyncio
async def test_reads_legacy_epoch_millis(db):
    await db.initialize()
    await db.set_setting(LAST_SYNC_KEY, "1700000000000")

    assert await SyncStateStore(db).get_last_sync_time() == datetime.fromtimestamp(1_700_000_000, tz=timezone.utc)


@pytest.mark.asyncio
async def test_malformed_value_reads_as_never(db):
    await db.initialize()
    await db.set_setting(LAST_SYNC_KEY, "yesterday-ish")

    assert await SyncStateStore(db).get_last_sync_time() is None


@pytest.mark.asyncio
async def test_storage_errors_are_swallowed(tmp_path):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("file in the way")
    store = SyncStateStore(SettingsDB(blocker / "settings.db"))

    await store.set_last_sync_time(datetime.now(timezone.utc))
    assert await store.get_last_sync_time() is None


def test_parse_timestamp_naive_iso_is_utc():
    assert parse_timestamp("2024-05-01T10:00:00") == datetime(2024, 5, 1, 10, tzinfo=timezone.utc)


@pytest.mark.asyncio
async def test_delete_setting(db):
    await db.initialize()
    await db.set_setting("k", "v")
    await db.delete_setting("k")
    assert await db.get_setting("k") is None
