"""Asset store that moves photo files to the recycle bin.

Each batch writes an audit CSV log. The review engine treats a batch as
all-or-nothing, so any per-file failure fails the whole batch even though the
other files of the batch may already be in the recycle bin. The store remembers
the files it trashed, so retrying such a batch counts them as deleted.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable
import csv
from datetime import datetime
import os
from pathlib import Path

from loguru import logger
from send2trash import send2trash

from core.models import Photo
from core.services.interfaces import AssetStoreError
from infrastructure.logging import get_delete_log_directory


class TrashAssetStore:
    """Coordinates recycle-bin deletes and audit logging."""

    def __init__(self, log_dir: str | None = None) -> None:
        """Create the store.

        Args:
            log_dir: Directory for `delete_*.csv` audit logs; defaults to the
                application's delete log directory.
        """
        self._log_dir = os.path.expandvars(log_dir) if log_dir else get_delete_log_directory()
        self.last_log_path: str | None = None
        # Paths this store already sent to the recycle bin
        self._trashed: set[str] = set()
        self._already_trashed: set[str] = set()

    async def delete_batch(self, photos: set[Photo]) -> None:
        """Send every photo file to the recycle bin.

        Raises:
            AssetStoreError: when at least one file could not be deleted.
        """
        ordered = sorted(photos, key=lambda p: p.id)
        success, failed = await asyncio.to_thread(self.delete_to_recycle, ordered)
        self.last_log_path = self.write_log(success, failed)
        if failed:
            first_id, first_reason = failed[0]
            raise AssetStoreError(
                f"{len(failed)} of {len(ordered)} photos could not be deleted "
                f"(first: {first_id}: {first_reason})"
            )

    def delete_to_recycle(
        self, photos: Iterable[Photo]
    ) -> tuple[list[Photo], list[tuple[str, str]]]:
        """Send files to recycle bin and report per-photo results."""
        success: list[Photo] = []
        failed: list[tuple[str, str]] = []
        self._already_trashed = set()
        for photo in photos:
            if not photo.file_path:
                failed.append((photo.id, "No file path"))
                continue
            normalized_path = os.path.normpath(photo.file_path)
            if not os.path.exists(normalized_path) and normalized_path in self._trashed:
                # Trashed by an earlier batch that failed on another file
                logger.info("Already in recycle bin: {}", normalized_path)
                self._already_trashed.add(photo.id)
                success.append(photo)
                continue
            if not os.path.exists(normalized_path):
                logger.error("File does not exist: {}", normalized_path)
                failed.append((photo.id, "File does not exist"))
                continue
            try:
                send2trash(normalized_path)
                self._trashed.add(normalized_path)
                success.append(photo)
            except (UnicodeEncodeError, OSError) as ex:
                logger.warning("Failed to delete with normalized path {}: {}", normalized_path, ex)
                # Retry with the absolute path for non-ASCII or relative paths
                try:
                    send2trash(os.path.abspath(photo.file_path))
                    self._trashed.add(normalized_path)
                    success.append(photo)
                except (UnicodeEncodeError, OSError) as ex2:
                    logger.error("All delete methods failed for {}: {} / {}", photo.id, ex, ex2)
                    failed.append((photo.id, f"{ex2}"))
        return success, failed

    def write_log(self, success: list[Photo], failed: list[tuple[str, str]]) -> str | None:
        """Write the audit CSV log and return its path (None when it fails)."""
        try:
            Path(self._log_dir).mkdir(parents=True, exist_ok=True)
            ts = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
            log_path = os.path.join(self._log_dir, f"delete_{ts}.csv")
            with open(log_path, "w", encoding="utf-8", newline="") as f:
                writer = csv.writer(f)
                writer.writerow(["PhotoId", "FilePath", "Success", "Reason"])
                for photo in success:
                    note = "Already in recycle bin" if photo.id in self._already_trashed else ""
                    writer.writerow([photo.id, photo.file_path or "", 1, note])
                for photo_id, reason in failed:
                    writer.writerow([photo_id, "", 0, reason])
            logger.info(
                "Delete log written: {} ({} success, {} failed)",
                log_path,
                len(success),
                len(failed),
            )
            return log_path
        except (OSError, ValueError) as ex:
            logger.error("Write delete log failed: {}", ex)
            return None
