"""Qt timer scheduler for hosts that drive the review from a Qt event loop."""

from __future__ import annotations

from collections.abc import Callable

from PySide6.QtCore import QObject, QTimer


class _QtTimerHandle:
    """Cancellable wrapper around a single-shot QTimer."""

    def __init__(self, timer: QTimer, release: Callable[[QTimer], None]) -> None:
        self._timer = timer
        self._release = release

    def cancel(self) -> None:
        self._timer.stop()
        self._release(self._timer)

    @property
    def active(self) -> bool:
        return self._timer.isActive()


class QtScheduler:
    """Runs callbacks once on the Qt thread owning `parent` (or the caller's)."""

    def __init__(self, parent: QObject | None = None) -> None:
        self._parent = parent
        # Strong references until each timer fires or is cancelled
        self._timers: set[QTimer] = set()

    def call_later(self, delay: float, callback: Callable[[], None]) -> _QtTimerHandle:
        """Start a single-shot timer firing `callback` after `delay` seconds."""
        timer = QTimer(self._parent)
        timer.setSingleShot(True)
        self._timers.add(timer)

        def _fire() -> None:
            self._timers.discard(timer)
            callback()

        timer.timeout.connect(_fire)
        timer.start(max(0, int(delay * 1000)))
        return _QtTimerHandle(timer, self._timers.discard)

    @property
    def pending_count(self) -> int:
        return len(self._timers)
