"""Asset source listing image files under a folder, newest first."""

from __future__ import annotations

import asyncio
from datetime import datetime
import os
from pathlib import Path

from loguru import logger

from core.constants import IMAGE_EXTENSIONS
from core.models import Photo
from infrastructure.utils import get_filesystem_creation_datetime, read_photo_metadata


class FolderAssetSource:
    """Enumerate photos in `root` (optionally recursive).

    The photo id is the absolute file path. Creation time comes from EXIF
    DateTimeOriginal when present and from the filesystem otherwise; photos
    are ordered newest first with undated files last.
    """

    def __init__(self, root: str | Path, recursive: bool = True) -> None:
        self._root = Path(root)
        self._recursive = recursive

    async def fetch_all(self) -> list[Photo]:
        """Return every image file as a Photo; a missing folder yields []."""
        if not self._root.is_dir():
            logger.error("Photo folder not available: {}", self._root)
            return []
        return await asyncio.to_thread(self._scan)

    def _iter_files(self) -> list[Path]:
        pattern = "**/*" if self._recursive else "*"
        return [
            p
            for p in self._root.glob(pattern)
            if p.is_file() and p.suffix.lower() in IMAGE_EXTENSIONS
        ]

    def _scan(self) -> list[Photo]:
        photos: list[Photo] = []
        for path in self._iter_files():
            file_path = os.path.abspath(str(path))
            taken, location = read_photo_metadata(file_path)
            photos.append(
                Photo(
                    id=file_path,
                    creation_date=taken or get_filesystem_creation_datetime(file_path),
                    location=location,
                    file_path=file_path,
                )
            )

        def _key(photo: Photo) -> tuple[int, float, str]:
            if photo.creation_date is None:
                return (1, 0.0, photo.id)
            return (0, -_timestamp(photo.creation_date), photo.id)

        photos.sort(key=_key)
        logger.info("Scanned {}: {} photos", self._root, len(photos))
        return photos


def _timestamp(dt: datetime) -> float:
    try:
        return dt.timestamp()
    except (OverflowError, OSError, ValueError):
        return 0.0
