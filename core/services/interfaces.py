"""Core service interfaces and shared data structures.

The review engine depends only on the protocols below; infrastructure
adapters and test fakes satisfy them structurally.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Protocol

from core.models import AuthorizationStatus, ImageTier, Photo, Size


class AssetStoreError(Exception):
    """Raised by an asset store when a batch delete does not complete."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


@dataclass
class CommitResult:
    """Outcome of a batch commit.

    Attributes:
        deleted_ids: Identifiers removed from the store (empty on failure).
        error: Human-readable failure message, or None on success/no-op.
    """

    deleted_ids: list[str] = field(default_factory=list)
    error: str | None = None

    @property
    def ok(self) -> bool:
        """True when nothing went wrong."""
        return self.error is None


class AssetSource(Protocol):
    """Provides the ordered photo list for a session."""

    async def fetch_all(self) -> list[Photo]:
        """Return every photo, in source order. May be empty."""
        ...


class ImageLoader(Protocol):
    """Turns a photo and target size into a decoded image."""

    async def load(self, photo: Photo, target_size: Size) -> Any | None:
        """Return the decoded image, or None when it cannot be produced."""
        ...


class AssetStore(Protocol):
    """Performs the irreversible delete."""

    async def delete_batch(self, photos: set[Photo]) -> None:
        """Delete `photos` as a single operation.

        Raises:
            AssetStoreError: when the delete did not fully succeed.
        """
        ...


class AuthorizationService(Protocol):
    """Reports and requests access to the photo library."""

    async def status(self) -> AuthorizationStatus:
        """Return the current status without prompting."""
        ...

    async def request_authorization(self) -> AuthorizationStatus:
        """Ask for access and return the resulting status."""
        ...


class DeleteQueueProtocol(Protocol):
    """Ordered collection of photos pending deletion."""

    @property
    def queue(self) -> list[Photo]: ...

    @property
    def count(self) -> int: ...

    @property
    def is_empty(self) -> bool: ...

    def add(self, photo: Photo) -> None: ...

    def remove(self, photo_id: str) -> None: ...

    def contains(self, photo_id: str) -> bool: ...

    def remove_last(self) -> Photo | None: ...

    def clear(self) -> None: ...


class ImageCacheProtocol(Protocol):
    """Two-tier memory cache keyed by photo identifier."""

    def get(self, tier: ImageTier, photo_id: str) -> Any | None: ...

    def put(self, tier: ImageTier, photo_id: str, image: Any) -> None: ...

    def remove(self, tier: ImageTier, photo_id: str) -> None: ...

    def remove_all_tiers(self, photo_id: str) -> None: ...

    def clear_all(self) -> None: ...


class TimerHandle(Protocol):
    """Handle returned by a scheduler."""

    def cancel(self) -> None: ...


class Scheduler(Protocol):
    """Runs callbacks later on the interaction thread."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        """Run `callback` once after `delay` seconds."""
        ...
