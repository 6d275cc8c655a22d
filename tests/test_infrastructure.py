from __future__ import annotations

import csv
from datetime import datetime
import json
import os
from pathlib import Path
import sys

from PIL import Image
from loguru import logger
import pytest

from core.models import GeoLocation, Photo, Size
from core.services.interfaces import AssetStoreError
from core.services.review_engine import ReviewEngine
from infrastructure import delete_service
from infrastructure.csv_repository import CSV_HEADERS, CsvAssetSource
from infrastructure.delete_service import TrashAssetStore
from infrastructure.folder_source import FolderAssetSource
from infrastructure.logging import (
    find_latest_delete_log_file,
    find_latest_log_file,
    init_logging,
)
from infrastructure.settings import JsonSettings
from infrastructure.utils import _dms_to_degrees, format_csv_datetime, parse_csv_datetime


def _write_jpeg(path: Path, taken: str | None = None) -> None:
    img = Image.new("RGB", (32, 16), (200, 30, 30))
    if taken is None:
        img.save(path, "JPEG")
        return
    exif = Image.Exif()
    exif[306] = taken
    img.save(path, "JPEG", exif=exif)


# Settings
def test_settings_dotted_access(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    path.write_text(
        json.dumps({"card": {"stack_count": "4"}, "thumbnail": {"size": [120, 80]}}),
        encoding="utf-8",
    )
    settings = JsonSettings(path)

    assert settings.get("card.stack_count") == "4"
    assert settings.get("card.missing", 7) == 7
    assert settings.get_int("card.stack_count", 3) == 4
    assert settings.get_size("thumbnail.size", Size(1, 1)) == Size(120, 80)


def test_settings_typed_fallbacks() -> None:
    settings = JsonSettings(data={"a": "x", "side": 64, "bad_size": ["w", 1]})

    assert settings.get_int("a", 5) == 5
    assert settings.get_size("side", Size(1, 1)) == Size(64, 64)
    assert settings.get_size("bad_size", Size(2, 2)) == Size(2, 2)
    assert settings.get_size("absent", Size(3, 3)) == Size(3, 3)


def test_settings_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        JsonSettings(tmp_path / "nope.json")


def test_shipped_settings_file_is_readable() -> None:
    settings = JsonSettings(Path(__file__).resolve().parent.parent / "settings.json")

    assert settings.get("swipe.threshold") == 100
    assert settings.get_int("thumbnail.preload_count", 0) == 20


# Metadata helpers
def test_csv_datetime_round_trip_and_bad_input() -> None:
    dt = datetime(2023, 4, 5, 6, 7, 8)

    assert parse_csv_datetime(format_csv_datetime(dt)) == dt
    assert parse_csv_datetime("not a date") is None
    assert format_csv_datetime(None) == ""


def test_dms_to_degrees_applies_hemisphere() -> None:
    assert _dms_to_degrees((52.0, 30.0, 0.0), "N") == pytest.approx(52.5)
    assert _dms_to_degrees((1.0, 15.0, 0.0), "W") == pytest.approx(-1.25)
    assert _dms_to_degrees(("x",), "N") is None


# Asset sources
async def test_csv_source_reads_rows_and_skips_bad_ones(tmp_path: Path) -> None:
    path = tmp_path / "photos.csv"
    with path.open("w", encoding="utf-8", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(CSV_HEADERS)
        writer.writerow(["a", "/p/a.jpg", "2024-01-02 03:04:05", "48.1", "11.5"])
        writer.writerow(["", "/p/b.jpg", "", "", ""])
        writer.writerow(["c", "/p/c.jpg", "", "north", "11.5"])
        writer.writerow(["d", "", "", "", ""])

    photos = await CsvAssetSource(path).fetch_all()

    assert [p.id for p in photos] == ["a", "/p/b.jpg"]
    assert photos[0].creation_date == datetime(2024, 1, 2, 3, 4, 5)
    assert photos[0].location == GeoLocation(48.1, 11.5)
    assert photos[1].location is None
    assert photos[1].file_path == "/p/b.jpg"


async def test_csv_source_missing_file_is_empty(tmp_path: Path) -> None:
    assert await CsvAssetSource(tmp_path / "missing.csv").fetch_all() == []


async def test_csv_source_without_file_path_header_is_empty(
    tmp_path: Path, loader, store, delete_queue, image_cache
) -> None:
    path = tmp_path / "photos.csv"
    path.write_text("PhotoId\na\n", encoding="utf-8")
    source = CsvAssetSource(path)

    with pytest.raises(ValueError):
        list(source.iter_rows())
    assert await source.fetch_all() == []

    engine = ReviewEngine(source, loader, store, delete_queue, image_cache)
    await engine.load()
    assert engine.photos == []


async def test_folder_source_orders_newest_first(tmp_path: Path) -> None:
    _write_jpeg(tmp_path / "old.jpg", "2021:05:01 10:00:00")
    _write_jpeg(tmp_path / "new.jpg", "2023:05:01 10:00:00")
    (tmp_path / "notes.txt").write_text("not a photo", encoding="utf-8")
    nested = tmp_path / "nested"
    nested.mkdir()
    _write_jpeg(nested / "inner.jpg", "2022:05:01 10:00:00")

    photos = await FolderAssetSource(tmp_path).fetch_all()

    assert [Path(p.id).name for p in photos] == ["new.jpg", "inner.jpg", "old.jpg"]
    assert photos[0].creation_date == datetime(2023, 5, 1, 10, 0, 0)
    assert photos[0].file_path == os.path.abspath(str(tmp_path / "new.jpg"))


async def test_folder_source_non_recursive_and_missing(tmp_path: Path) -> None:
    nested = tmp_path / "nested"
    nested.mkdir()
    _write_jpeg(nested / "inner.jpg")
    _write_jpeg(tmp_path / "top.jpg")

    photos = await FolderAssetSource(tmp_path, recursive=False).fetch_all()

    assert [Path(p.id).name for p in photos] == ["top.jpg"]
    assert photos[0].creation_date is not None
    assert await FolderAssetSource(tmp_path / "missing").fetch_all() == []


# Asset store
@pytest.fixture
def trashed(monkeypatch: pytest.MonkeyPatch) -> list[str]:
    removed: list[str] = []

    def fake_send2trash(path: str) -> None:
        os.remove(path)
        removed.append(path)

    monkeypatch.setattr(delete_service, "send2trash", fake_send2trash)
    return removed


async def test_trash_store_deletes_batch_and_writes_log(tmp_path: Path, trashed) -> None:
    files = []
    for name in ("a.jpg", "b.jpg"):
        target = tmp_path / name
        target.write_bytes(b"x")
        files.append(target)
    log_dir = tmp_path / "logs"
    store = TrashAssetStore(str(log_dir))

    await store.delete_batch({Photo(f.name, file_path=str(f)) for f in files})

    assert len(trashed) == 2
    assert not any(f.exists() for f in files)
    assert store.last_log_path is not None
    assert find_latest_delete_log_file(str(log_dir)) == Path(store.last_log_path)
    with open(store.last_log_path, encoding="utf-8", newline="") as f:
        rows = list(csv.DictReader(f))
    assert sorted(r["PhotoId"] for r in rows) == ["a.jpg", "b.jpg"]
    assert {r["Success"] for r in rows} == {"1"}


async def test_trash_store_reports_missing_file(tmp_path: Path, trashed) -> None:
    present = tmp_path / "a.jpg"
    present.write_bytes(b"x")
    store = TrashAssetStore(str(tmp_path / "logs"))

    with pytest.raises(AssetStoreError) as excinfo:
        await store.delete_batch(
            {
                Photo("a", file_path=str(present)),
                Photo("b", file_path=str(tmp_path / "gone.jpg")),
            }
        )

    assert "1 of 2" in excinfo.value.reason
    assert "File does not exist" in excinfo.value.reason


async def test_trash_store_failure_from_send2trash(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    target = tmp_path / "a.jpg"
    target.write_bytes(b"x")

    def refuse(path: str) -> None:
        raise OSError("trash unavailable")

    monkeypatch.setattr(delete_service, "send2trash", refuse)
    store = TrashAssetStore(str(tmp_path / "logs"))

    with pytest.raises(AssetStoreError) as excinfo:
        await store.delete_batch({Photo("a", file_path=str(target))})

    assert "trash unavailable" in excinfo.value.reason
    assert target.exists()


async def test_retry_after_partial_trash_failure_commits(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, source, loader, delete_queue, image_cache
) -> None:
    files = {}
    for name in ("a", "b"):
        files[name] = tmp_path / f"{name}.jpg"
        files[name].write_bytes(b"x")
    refuse_b = True

    def flaky_send2trash(path: str) -> None:
        if refuse_b and path.endswith("b.jpg"):
            raise OSError("device busy")
        os.remove(path)

    monkeypatch.setattr(delete_service, "send2trash", flaky_send2trash)
    source.photos = [Photo(name, file_path=str(path)) for name, path in files.items()]
    store = TrashAssetStore(str(tmp_path / "logs"))
    engine = ReviewEngine(source, loader, store, delete_queue, image_cache)
    await engine.load()
    for photo in engine.photos:
        engine.mark_for_deletion(photo)

    first = await engine.commit_deletes()

    assert not first.ok
    assert not files["a"].exists()
    assert engine.photos_to_delete_count == 2

    refuse_b = False
    second = await engine.commit_deletes()

    assert second.ok
    assert second.deleted_ids == ["a", "b"]
    assert engine.photos_to_delete_count == 0
    assert store.last_log_path is not None
    with open(store.last_log_path, encoding="utf-8", newline="") as f:
        rows = {r["PhotoId"]: r for r in csv.DictReader(f)}
    assert rows["a"]["Success"] == "1"
    assert rows["a"]["Reason"] == "Already in recycle bin"
    assert rows["b"]["Reason"] == ""


def test_init_logging_writes_findable_app_log(tmp_path: Path) -> None:
    log_dir = init_logging(str(tmp_path / "logs"), level="DEBUG")
    try:
        logger.info("hello from the log test")
        logger.complete()
        latest = find_latest_log_file(str(log_dir))
    finally:
        logger.remove()
        logger.add(sys.stderr)

    assert log_dir == tmp_path / "logs"
    assert latest is not None
    assert latest.name.startswith("app_")
    assert find_latest_log_file(str(tmp_path / "nowhere")) is None
