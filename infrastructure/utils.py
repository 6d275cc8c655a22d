"""Utilities for photo metadata extraction (EXIF and filesystem) and dates.

Everything here is best-effort: helpers never raise on unreadable files and
return `None` when data is not available.
"""

from __future__ import annotations

from datetime import datetime
import os
from typing import Any

from PIL import Image
from loguru import logger

from core.models import GeoLocation

try:  # pragma: no cover - optional dependency
    from pillow_heif import register_heif_opener  # type: ignore

    register_heif_opener()
    PIL_HEIF_AVAILABLE = True
except ImportError:  # pragma: no cover - optional dependency
    PIL_HEIF_AVAILABLE = False

CSV_DT_FMT = "%Y-%m-%d %H:%M:%S"

_EXIF_DATETIME_ORIGINAL = 36867
_EXIF_DATETIME = 306
_EXIF_IFD = 0x8769
_GPS_IFD = 0x8825


def parse_csv_datetime(value: str | None) -> datetime | None:
    """Parse timestamp from CSV using CSV_DT_FMT; return None on failure."""
    if not value:
        return None
    try:
        return datetime.strptime(value.strip(), CSV_DT_FMT)
    except (ValueError, TypeError):
        return None


def format_csv_datetime(dt: datetime | None) -> str:
    """Format datetime for CSV; empty string when None."""
    return dt.strftime(CSV_DT_FMT) if dt else ""


def get_filesystem_creation_datetime(path: str) -> datetime | None:
    """Best-effort file creation time.

    On Windows `os.path.getctime` is the creation time; elsewhere it may be the
    metadata change time, which is accepted as a best-effort value.
    """
    try:
        return datetime.fromtimestamp(os.path.getctime(path))
    except (OSError, ValueError) as ex:
        logger.debug("getctime failed for {}: {}", path, ex)
        return None


def _parse_exif_datetime(value: Any) -> datetime | None:
    text = str(value).strip().rstrip("\x00")
    try:
        # Common EXIF format: "YYYY:MM:DD HH:MM:SS"
        if len(text) >= 19 and text[4] == ":" and text[7] == ":":
            return datetime.strptime(text[:19], "%Y:%m:%d %H:%M:%S")
        return datetime.fromisoformat(text.replace("/", "-"))
    except ValueError:
        return None


def _dms_to_degrees(dms: Any, ref: Any) -> float | None:
    try:
        degrees, minutes, seconds = (float(v) for v in dms)
    except (TypeError, ValueError, ZeroDivisionError):
        return None
    value = degrees + minutes / 60.0 + seconds / 3600.0
    if str(ref).upper().startswith(("S", "W")):
        value = -value
    return value


def read_photo_metadata(path: str) -> tuple[datetime | None, GeoLocation | None]:
    """Return (DateTimeOriginal, GPS location) read with Pillow."""
    try:
        with Image.open(path) as im:
            exif = im.getexif()
            raw_dt = exif.get_ifd(_EXIF_IFD).get(_EXIF_DATETIME_ORIGINAL) or exif.get(
                _EXIF_DATETIME
            )
            taken = _parse_exif_datetime(raw_dt) if raw_dt else None

            location = None
            gps = exif.get_ifd(_GPS_IFD)
            if gps and 2 in gps and 4 in gps:
                lat = _dms_to_degrees(gps[2], gps.get(1, "N"))
                lon = _dms_to_degrees(gps[4], gps.get(3, "E"))
                if lat is not None and lon is not None:
                    location = GeoLocation(lat, lon)
            return taken, location
    except (OSError, ValueError, SyntaxError) as ex:
        logger.debug("EXIF read failed for {}: {}", path, ex)
        return None, None
