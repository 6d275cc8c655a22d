"""CSV-backed asset source.

Reads a photo list exported by another tool. The CSV order is the review
order; rows that cannot be parsed are logged and skipped.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterator
import csv
from pathlib import Path

from loguru import logger

from core.models import GeoLocation, Photo
from infrastructure.utils import parse_csv_datetime

CSV_HEADERS = [
    "PhotoId",
    "FilePath",
    "Creation Date",
    "Latitude",
    "Longitude",
]
REQUIRED_HEADERS = ["FilePath"]


def _parse_float(value: str | None) -> float | None:
    if value is None or not str(value).strip():
        return None
    return float(value)


def _parse_location(row: dict[str, str]) -> GeoLocation | None:
    lat = _parse_float(row.get("Latitude"))
    lon = _parse_float(row.get("Longitude"))
    if lat is None or lon is None:
        return None
    return GeoLocation(lat, lon)


class CsvAssetSource:
    """Load photos listed in a CSV file."""

    def __init__(self, csv_path: str | Path) -> None:
        self._path = Path(csv_path)

    async def fetch_all(self) -> list[Photo]:
        """Return the listed photos; a missing or unreadable file yields []."""
        if not self._path.exists():
            logger.error("Photo list not found: {}", self._path)
            return []
        try:
            return await asyncio.to_thread(lambda: list(self.iter_rows()))
        except (OSError, ValueError) as ex:
            logger.error("Photo list unreadable: {} | {}", self._path, ex)
            return []

    def iter_rows(self) -> Iterator[Photo]:
        """Yield `Photo` from the CSV file."""
        with self._path.open("r", encoding="utf-8", newline="") as f:
            reader = csv.DictReader(f)
            missing = [h for h in REQUIRED_HEADERS if h not in (reader.fieldnames or [])]
            if missing:
                raise ValueError(f"CSV missing required headers: {missing}")

            for row in reader:
                try:
                    file_path = (row.get("FilePath") or "").strip()
                    if not file_path:
                        raise ValueError("empty FilePath")
                    photo_id = (row.get("PhotoId") or "").strip() or file_path
                    yield Photo(
                        id=photo_id,
                        creation_date=parse_csv_datetime(row.get("Creation Date")),
                        location=_parse_location(row),
                        file_path=file_path,
                    )
                except (ValueError, TypeError) as ex:
                    logger.error("CSV row error: {} | row={}", ex, row)
                    continue
