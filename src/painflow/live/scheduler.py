"""Coalescing schedulers for the live delta store.

A scheduler runs a callback once on the next tick and can cancel a pending
callback. The store asks for at most one pending callback at a time; what a
"tick" means is up to the scheduler.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any, Protocol

# One display frame at 60 Hz
FRAME_INTERVAL = 1 / 60


class CoalescingScheduler(Protocol):
    """Schedule-once-per-tick capability."""

    def schedule(self, callback: Callable[[], None]) -> Any:
        """Run ``callback`` on the next tick; returns a handle for ``cancel``."""
        ...

    def cancel(self, handle: Any) -> None:
        """Cancel a callback that has not run yet. Unknown handles are ignored."""
        ...


class LoopScheduler:
    """Tick on the running asyncio event loop.

    With a positive ``interval`` the callback runs that many seconds later
    (a render frame by default); with ``interval == 0`` it runs on the next
    loop iteration.
    """

    def __init__(
        self,
        interval: float = FRAME_INTERVAL,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        if interval < 0:
            raise ValueError("interval must not be negative")
        self.interval = interval
        self._loop = loop

    def schedule(self, callback: Callable[[], None]) -> asyncio.Handle:
        """Schedule ``callback``.

        Raises:
            RuntimeError: If no loop was given and none is running.
        """
        loop = self._loop or asyncio.get_running_loop()
        if self.interval == 0:
            return loop.call_soon(callback)
        return loop.call_later(self.interval, callback)

    def cancel(self, handle: Any) -> None:
        if isinstance(handle, asyncio.Handle):
            handle.cancel()


class ManualScheduler:
    """Tick only when ``tick()`` is called.

    For synchronous drivers (and tests) that decide themselves when a frame
    boundary has passed.
    """

    def __init__(self) -> None:
        self._pending: dict[int, Callable[[], None]] = {}
        self._next_handle = 0

    def schedule(self, callback: Callable[[], None]) -> int:
        self._next_handle += 1
        self._pending[self._next_handle] = callback
        return self._next_handle

    def cancel(self, handle: Any) -> None:
        self._pending.pop(handle, None)

    @property
    def pending(self) -> int:
        """Number of callbacks waiting for the next tick."""
        return len(self._pending)

    def tick(self) -> int:
        """Run every callback scheduled before this tick.

        Callbacks scheduled while ticking wait for the next tick.

        Returns:
            Number of callbacks run.
        """
        due, self._pending = self._pending, {}
        for callback in due.values():
            callback()
        return len(due)
