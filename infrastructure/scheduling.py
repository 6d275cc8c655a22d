"""Event-loop scheduler used to sequence swipe animations."""

from __future__ import annotations

import asyncio
from collections.abc import Callable


class AsyncioScheduler:
    """Schedules callbacks on the asyncio loop driving the interaction.

    The loop is resolved lazily so the scheduler can be built before the loop
    starts; `call_later` itself must run on the loop thread.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    def call_later(self, delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        """Run `callback` after `delay` seconds; the handle supports cancel()."""
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(max(0.0, delay), callback)
