"""Observer registry shared by the workflow engine and the live delta store.

Observers are plain callables. ``subscribe`` returns a handle that removes
the observer again; calling it more than once is harmless. Notification
iterates over a copy of the registry, so observers may subscribe or
unsubscribe (themselves or others) from inside a notification.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Generic, ParamSpec

from painflow.observability.logging import get_logger

log = get_logger(__name__)

P = ParamSpec("P")

Unsubscribe = Callable[[], None]


class ObserverSet(Generic[P]):
    """Ordered collection of observers with removal-safe notification."""

    def __init__(self, owner: str) -> None:
        self._owner = owner
        self._observers: list[Callable[P, Any]] = []

    def subscribe(self, observer: Callable[P, Any]) -> Unsubscribe:
        self._observers.append(observer)
        removed = False

        def unsubscribe() -> None:
            nonlocal removed
            if removed:
                return
            removed = True
            # Remove this registration only, even if the callable was added twice
            for index, existing in enumerate(self._observers):
                if existing is observer:
                    del self._observers[index]
                    break

        return unsubscribe

    def notify(self, *args: P.args, **kwargs: P.kwargs) -> None:
        for observer in list(self._observers):
            try:
                observer(*args, **kwargs)
            except Exception as e:
                log.error(
                    "observer_failed",
                    owner=self._owner,
                    observer=getattr(observer, "__qualname__", repr(observer)),
                    error=str(e),
                    exc_info=True,
                )

    def clear(self) -> None:
        self._observers.clear()

    def __len__(self) -> int:
        return len(self._observers)
