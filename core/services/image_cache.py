"""Thread-safe two-tier memory cache for decoded images.

The cache holds full-size previews and thumbnails in independent maps keyed by
photo identifier. It has no capacity-based eviction: entries leave when the
review engine resolves a photo or when the whole cache is cleared, so memory
tracks the review stack plus the prefetch window.
"""

from __future__ import annotations

import threading
from typing import Any

from core.models import ImageTier


class ImageCache:
    """Full-size and thumbnail tiers guarded by a single lock.

    The lock covers one map operation at a time; decoding happens outside it.
    """

    def __init__(self) -> None:
        self._tiers: dict[ImageTier, dict[str, Any]] = {tier: {} for tier in ImageTier}
        self._lock = threading.Lock()

    def get(self, tier: ImageTier, photo_id: str) -> Any | None:
        """Return the cached image, or None on a miss. Never fetches."""
        with self._lock:
            return self._tiers[tier].get(photo_id)

    def put(self, tier: ImageTier, photo_id: str, image: Any) -> None:
        """Store `image`, overwriting any previous entry."""
        with self._lock:
            self._tiers[tier][photo_id] = image

    def remove(self, tier: ImageTier, photo_id: str) -> None:
        """Drop one tier's entry for `photo_id`; no-op on a miss."""
        with self._lock:
            self._tiers[tier].pop(photo_id, None)

    def remove_all_tiers(self, photo_id: str) -> None:
        """Drop every tier's entry for `photo_id`."""
        with self._lock:
            for entries in self._tiers.values():
                entries.pop(photo_id, None)

    def clear_all(self) -> None:
        with self._lock:
            for entries in self._tiers.values():
                entries.clear()

    def count(self, tier: ImageTier) -> int:
        """Number of entries held in `tier`."""
        with self._lock:
            return len(self._tiers[tier])

    # Tier-specific accessors
    def get_image(self, photo_id: str) -> Any | None:
        return self.get(ImageTier.FULL, photo_id)

    def get_thumbnail(self, photo_id: str) -> Any | None:
        return self.get(ImageTier.THUMBNAIL, photo_id)

    def cache_image(self, image: Any, photo_id: str) -> None:
        self.put(ImageTier.FULL, photo_id, image)

    def cache_thumbnail(self, image: Any, photo_id: str) -> None:
        self.put(ImageTier.THUMBNAIL, photo_id, image)

    def remove_image(self, photo_id: str) -> None:
        self.remove(ImageTier.FULL, photo_id)

    def remove_thumbnail(self, photo_id: str) -> None:
        self.remove(ImageTier.THUMBNAIL, photo_id)
