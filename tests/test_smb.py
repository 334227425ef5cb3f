"""Tests for the SMB transport with an in-memory client."""

from functools import partial

import pytest

from nasbridge.core.config import NasConfig
from nasbridge.sources.nas import SmbClient, SmbTransport


class FakeSmbClient:
    """Records calls; raises OSError for every method named in ``fail_on``."""

    def __init__(self, host, username, password, share_name, port=445, *, created, fail_on=(), files=()):
        self.host = host
        self.username = username
        self.password = password
        self.share_name = share_name
        self.port = port
        self.fail_on = set(fail_on)
        self.files = list(files)
        self.calls = []
        created.append(self)

    def _record(self, name, *args):
        self.calls.append((name, *args))
        if name in self.fail_on:
            raise OSError(f"{name} failed")

    def connect(self):
        self._record("connect")

    def disconnect(self):
        self._record("disconnect")

    def makedirs(self, path):
        self._record("makedirs", path)

    def upload(self, local_path, remote_path):
        self._record("upload", local_path, remote_path)

    def download(self, remote_path, local_path):
        self._record("download", remote_path, local_path)
        with open(local_path, "wb") as f:
            f.write(b"smb-bytes")

    def list(self, path):
        self._record("list", path)
        return self.files


@pytest.fixture
def created():
    return []


def make_transport(tmp_path, created, **kwargs) -> SmbTransport:
    download_dir = tmp_path / "downloads"
    download_dir.mkdir()
    return SmbTransport(download_dir, client_factory=partial(FakeSmbClient, created=created, **kwargs))


def call_names(client):
    return [call[0] for call in client.calls]


@pytest.mark.asyncio
async def test_connection_opens_and_closes_session(tmp_path, smb_config, created):
    transport = make_transport(tmp_path, created)

    assert await transport.test_connection(smb_config) is True

    (client,) = created
    assert (client.host, client.share_name, client.port) == ("nas.local", "photos", 445)
    assert (client.username, client.password) == ("alice", "secret")
    assert call_names(client) == ["connect", "disconnect"]


@pytest.mark.asyncio
async def test_connect_failure_skips_disconnect(tmp_path, smb_config, created):
    transport = make_transport(tmp_path, created, fail_on={"connect"})

    assert await transport.test_connection(smb_config) is False
    assert call_names(created[0]) == ["connect"]


@pytest.mark.asyncio
async def test_upload_targets_subpath_and_disconnects(tmp_path, smb_config, created, make_photo):
    photo = make_photo("IMG_0002.jpg")
    transport = make_transport(tmp_path, created)

    assert await transport.upload_photo(photo, smb_config) is True

    client = created[0]
    assert client.calls == [
        ("connect",),
        ("upload", str(photo.local_path), "vacation/IMG_0002.jpg"),
        ("disconnect",),
    ]


@pytest.mark.asyncio
async def test_upload_failure_still_disconnects(tmp_path, smb_config, created, make_photo):
    transport = make_transport(tmp_path, created, fail_on={"upload"})

    assert await transport.upload_photo(make_photo(), smb_config) is False
    assert call_names(created[0]) == ["connect", "upload", "disconnect"]


@pytest.mark.asyncio
async def test_disconnect_failure_does_not_change_result(tmp_path, smb_config, created, make_photo):
    transport = make_transport(tmp_path, created, fail_on={"disconnect"})
    assert await transport.upload_photo(make_photo(), smb_config) is True


@pytest.mark.asyncio
async def test_upload_without_share_name_never_connects(tmp_path, created, make_photo):
    config = NasConfig(host="nas.local", port=445, username="alice", password="secret", remote_path="/")
    transport = make_transport(tmp_path, created)

    assert await transport.upload_photo(make_photo(), config) is False
    assert created == []


def test_initialize_client_requires_credentials(tmp_path, created):
    config = NasConfig(host="nas.local", port=445, username="alice", remote_path="photos")
    assert make_transport(tmp_path, created).initialize_client(config) is None
    assert created == []


def test_initialize_client_defaults_port(tmp_path, created):
    config = NasConfig(
        host="nas.local", username="alice", password="secret", remote_path="photos", protocol="smb"
    )
    client = make_transport(tmp_path, created).initialize_client(config)
    assert client.port == 445


@pytest.mark.asyncio
async def test_download_returns_bytes(tmp_path, smb_config, created):
    transport = make_transport(tmp_path, created)

    content = await transport.download_photo("2024/a.jpg", smb_config)

    assert content == b"smb-bytes"
    assert created[0].calls[1][:2] == ("download", "vacation/2024/a.jpg")
    assert (tmp_path / "downloads" / "a.jpg").read_bytes() == b"smb-bytes"


@pytest.mark.asyncio
async def test_download_failure_returns_none(tmp_path, smb_config, created):
    transport = make_transport(tmp_path, created, fail_on={"download"})

    assert await transport.download_photo("a.jpg", smb_config) is None
    assert call_names(created[0]) == ["connect", "download", "disconnect"]


@pytest.mark.asyncio
async def test_create_remote_directory(tmp_path, smb_config, created):
    transport = make_transport(tmp_path, created)

    assert await transport.create_remote_directory(smb_config) is True
    assert created[0].calls[1] == ("makedirs", "vacation")


@pytest.mark.asyncio
async def test_list_remote_files(tmp_path, smb_config, created):
    transport = make_transport(tmp_path, created, files=["vacation/a.jpg", "vacation/b.jpg"])

    assert await transport.list_remote_files(smb_config) == ["vacation/a.jpg", "vacation/b.jpg"]
    assert created[0].calls[1] == ("list", "vacation")


@pytest.mark.asyncio
async def test_list_remote_files_failure_is_empty(tmp_path, smb_config, created):
    transport = make_transport(tmp_path, created, fail_on={"list"})
    assert await transport.list_remote_files(smb_config) == []


def test_unc_path():
    client = SmbClient("nas.local", "alice", "secret", "photos")
    assert client.unc_path() == "\\\\nas.local\\photos"
    assert client.unc_path("vacation/a.jpg") == "\\\\nas.local\\photos\\vacation\\a.jpg"
