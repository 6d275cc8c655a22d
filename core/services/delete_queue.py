"""Ordered queue of photos waiting for batch deletion."""

from __future__ import annotations

from core.models import Photo


class DeleteQueue:
    """Photos pending deletion, in the order the user queued them.

    The tail is the most recent decision, so `remove_last` undoes in LIFO
    order. Membership checks are linear; queues stay small compared to the
    library.
    """

    def __init__(self) -> None:
        self._queue: list[Photo] = []

    @property
    def queue(self) -> list[Photo]:
        """Snapshot of the queue in insertion order."""
        return list(self._queue)

    @property
    def count(self) -> int:
        return len(self._queue)

    @property
    def is_empty(self) -> bool:
        return not self._queue

    def __len__(self) -> int:
        return len(self._queue)

    def add(self, photo: Photo) -> None:
        """Append `photo` to the tail."""
        self._queue.append(photo)

    def remove(self, photo_id: str) -> None:
        """Remove the photo with `photo_id`; no-op when absent."""
        self._queue = [p for p in self._queue if p.id != photo_id]

    def contains(self, photo_id: str) -> bool:
        return any(p.id == photo_id for p in self._queue)

    def remove_last(self) -> Photo | None:
        """Pop and return the tail, or None when empty."""
        if not self._queue:
            return None
        return self._queue.pop()

    def clear(self) -> None:
        self._queue.clear()
