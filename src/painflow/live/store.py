"""Live delta store: coalesced view of a streamed assistant turn."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, replace
from typing import Any

from painflow.live.scheduler import CoalescingScheduler, LoopScheduler
from painflow.observability.logging import get_logger
from painflow.observers import ObserverSet, Unsubscribe

log = get_logger(__name__)

LiveObserver = Callable[["LiveSnapshot"], Any]


@dataclass(frozen=True)
class LiveSnapshot:
    """Published state of the current session."""

    assistant_id: str | None = None
    assistant_text: str = ""
    streaming: bool = False
    session_id: str | None = None


EMPTY_SNAPSHOT = LiveSnapshot()


class LiveDeltaStore:
    """Single-writer broadcast cell for one streamed assistant turn.

    The producer pushes small fragments with ``append_delta``. Fragments
    collect in a private buffer and are folded into the published text at
    most once per scheduler tick, so observers see one update per frame no
    matter how many fragments arrived. Within a session the published text
    only ever grows.

    Only one session is live at a time. ``start`` while a session is still
    streaming drops that session, including text not flushed yet; the
    return value tells the caller this happened.

    Lifecycle: create, then ``start`` ... ``commit`` any number of times,
    then ``dispose``.
    """

    def __init__(self, scheduler: CoalescingScheduler | None = None) -> None:
        self._scheduler: CoalescingScheduler = scheduler or LoopScheduler()
        self._current = EMPTY_SNAPSHOT
        self._buffer: list[str] = []
        self._flush_handle: Any = None
        self._flushing = False
        self._commit_requested = False
        self._observers: ObserverSet[[LiveSnapshot]] = ObserverSet("live_delta_store")

    def get_snapshot(self) -> LiveSnapshot:
        return self._current

    def subscribe(self, observer: LiveObserver) -> Unsubscribe:
        """Register ``observer(snapshot)``; returns the unsubscribe handle."""
        return self._observers.subscribe(observer)

    def start(self, assistant_id: str, session_id: str | None = None) -> bool:
        """Begin a new session with empty text.

        Args:
            assistant_id: Logical message being built.
            session_id: Correlation id; defaults to ``assistant_id``.

        Returns:
            True if a still-streaming session was superseded.

        Raises:
            ValueError: If ``session_id`` names the current session and that
                session already published text. Restarting it would shrink
                its text; use a fresh id, or ``reset`` first.
        """
        session = session_id or assistant_id
        if session == self._current.session_id and self._current.assistant_text:
            raise ValueError(f"Session {session!r} already has text; use a new session id")
        superseded = self._current.streaming
        if superseded:
            log.warning(
                "live_session_superseded",
                previous_session=self._current.session_id,
                session=session,
                dropped_chars=sum(len(part) for part in self._buffer),
            )
        self._cancel_flush()
        self._buffer.clear()
        self._commit_requested = False
        self._emit(
            LiveSnapshot(
                assistant_id=assistant_id,
                assistant_text="",
                streaming=True,
                session_id=session,
            )
        )
        return superseded

    def append_delta(self, fragment: str) -> None:
        """Buffer ``fragment``; ignored when not streaming or empty."""
        if not self._current.streaming or not fragment:
            return
        self._buffer.append(fragment)
        if self._flush_handle is None:
            self._flush_handle = self._scheduler.schedule(self._on_tick)

    def commit(self) -> None:
        """Flush buffered text now and end streaming. Safe to repeat.

        Called from an observer while a flush is running, the commit is
        deferred until that flush has drained the buffer.
        """
        self._cancel_flush()
        if self._flushing:
            self._commit_requested = True
            return
        self._flush()
        self._end_streaming()

    def reset(self) -> None:
        """Forget the session entirely and publish the empty state."""
        self._cancel_flush()
        self._buffer.clear()
        self._commit_requested = False
        self._emit(EMPTY_SNAPSHOT)

    def dispose(self) -> None:
        """Release the pending tick, the buffer and all observers."""
        self._cancel_flush()
        self._buffer.clear()
        self._commit_requested = False
        self._observers.clear()

    @property
    def has_pending(self) -> bool:
        """True when buffered text waits for the next flush."""
        return bool(self._buffer)

    def _on_tick(self) -> None:
        self._flush_handle = None
        self._flush()

    def _flush(self) -> None:
        if self._flushing:
            return
        self._flushing = True
        try:
            # Observers may append more while we publish
            while self._buffer:
                pending = "".join(self._buffer)
                self._buffer.clear()
                self._emit(
                    replace(self._current, assistant_text=self._current.assistant_text + pending)
                )
        finally:
            self._flushing = False
        if self._commit_requested:
            self._commit_requested = False
            self._end_streaming()

    def _end_streaming(self) -> None:
        if self._current.streaming:
            self._emit(replace(self._current, streaming=False))

    def _cancel_flush(self) -> None:
        if self._flush_handle is not None:
            self._scheduler.cancel(self._flush_handle)
            self._flush_handle = None

    def _emit(self, snapshot: LiveSnapshot) -> None:
        # Dataclass equality compares exactly the four published fields
        if snapshot == self._current:
            return
        self._current = snapshot
        self._observers.notify(snapshot)
