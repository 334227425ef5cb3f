"""Tests for the local photo folder scanner."""

from nasbridge.sources.photos import LocalPhotoScanner
from nasbridge.sources.photos.scanner import guess_mime_type


def populate(root):
    (root / "2024").mkdir(parents=True)
    (root / "a.jpg").write_bytes(b"a")
    (root / "b.HEIC").write_bytes(b"bb")
    (root / "notes.txt").write_text("skip me")
    (root / "clip.mov").write_bytes(b"video")
    (root / "2024" / "c.png").write_bytes(b"ccc")


def test_recursive_scan(tmp_path):
    populate(tmp_path)

    photos = LocalPhotoScanner(tmp_path).scan()

    assert sorted(p.filename for p in photos) == ["a.jpg", "b.HEIC", "c.png"]
    by_name = {p.filename: p for p in photos}
    assert by_name["b.HEIC"].type == "image/heic"
    assert by_name["c.png"].size == 3
    assert by_name["a.jpg"].local_path == (tmp_path / "a.jpg").resolve()


def test_flat_scan_with_videos(tmp_path):
    populate(tmp_path)

    photos = LocalPhotoScanner(tmp_path, recursive=False, include_videos=True).scan()

    assert sorted(p.filename for p in photos) == ["a.jpg", "b.HEIC", "clip.mov"]


def test_favorites_by_name(tmp_path):
    populate(tmp_path)

    photos = LocalPhotoScanner(tmp_path, favorites=["A.JPG"]).scan()

    assert [p.filename for p in photos if p.is_favorite] == ["a.jpg"]


def test_ids_are_stable(tmp_path):
    populate(tmp_path)
    first = [p.id for p in LocalPhotoScanner(tmp_path).scan()]
    second = [p.id for p in LocalPhotoScanner(tmp_path).scan()]
    assert first == second
    assert len(set(first)) == len(first)


def test_missing_folder(tmp_path):
    assert LocalPhotoScanner(tmp_path / "nope").scan() == []


def test_guess_mime_type(tmp_path):
    assert guess_mime_type(tmp_path / "x.dng") == "image/x-raw"
    assert guess_mime_type(tmp_path / "x.jpg") == "image/jpeg"
