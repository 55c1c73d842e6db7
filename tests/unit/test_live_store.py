"""Tests for the live delta store."""

from __future__ import annotations

import pytest

from painflow.live import EMPTY_SNAPSHOT, LiveDeltaStore, LiveSnapshot, ManualScheduler


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def store(scheduler: ManualScheduler) -> LiveDeltaStore:
    return LiveDeltaStore(scheduler)


@pytest.fixture
def snapshots(store: LiveDeltaStore) -> list[LiveSnapshot]:
    seen: list[LiveSnapshot] = []
    store.subscribe(seen.append)
    return seen


def test_initial_snapshot_is_empty(store: LiveDeltaStore) -> None:
    assert store.get_snapshot() == EMPTY_SNAPSHOT
    assert store.get_snapshot() == LiveSnapshot(
        assistant_id=None, assistant_text="", streaming=False, session_id=None
    )


def test_start_publishes_streaming_session(
    store: LiveDeltaStore, snapshots: list[LiveSnapshot]
) -> None:
    superseded = store.start("a1", "s1")

    assert superseded is False
    assert snapshots == [
        LiveSnapshot(assistant_id="a1", assistant_text="", streaming=True, session_id="s1")
    ]


def test_session_id_defaults_to_assistant_id(store: LiveDeltaStore) -> None:
    store.start("a1")

    assert store.get_snapshot().session_id == "a1"


def test_fragments_in_one_tick_coalesce(
    store: LiveDeltaStore, scheduler: ManualScheduler, snapshots: list[LiveSnapshot]
) -> None:
    """Three fragments before a tick produce a single notification."""
    store.start("a1")
    snapshots.clear()

    store.append_delta("A")
    store.append_delta("B")
    store.append_delta("C")

    assert snapshots == []
    assert scheduler.pending == 1
    assert store.has_pending

    scheduler.tick()

    assert [s.assistant_text for s in snapshots] == ["ABC"]
    assert not store.has_pending
    assert store.get_snapshot().streaming is True


def test_one_notification_per_tick(
    store: LiveDeltaStore, scheduler: ManualScheduler, snapshots: list[LiveSnapshot]
) -> None:
    store.start("a1")
    snapshots.clear()

    store.append_delta("Hel")
    scheduler.tick()
    store.append_delta("lo")
    scheduler.tick()
    scheduler.tick()

    assert [s.assistant_text for s in snapshots] == ["Hel", "Hello"]


def test_commit_flushes_and_stops_streaming(
    store: LiveDeltaStore, scheduler: ManualScheduler, snapshots: list[LiveSnapshot]
) -> None:
    """commit publishes pending text before the streaming flag clears."""
    store.start("a1")
    store.append_delta("Hel")
    store.append_delta("lo")

    store.commit()

    assert snapshots[-2:] == [
        LiveSnapshot(assistant_id="a1", assistant_text="Hello", streaming=True, session_id="a1"),
        LiveSnapshot(assistant_id="a1", assistant_text="Hello", streaming=False, session_id="a1"),
    ]
    assert scheduler.pending == 0
    assert not store.has_pending


def test_commit_twice_is_a_no_op(
    store: LiveDeltaStore, snapshots: list[LiveSnapshot]
) -> None:
    store.start("a1")
    store.append_delta("x")
    store.commit()
    count = len(snapshots)

    store.commit()

    assert len(snapshots) == count
    assert store.get_snapshot().assistant_text == "x"


def test_commit_without_session_publishes_nothing(
    store: LiveDeltaStore, snapshots: list[LiveSnapshot]
) -> None:
    store.commit()

    assert snapshots == []
    assert store.get_snapshot() == EMPTY_SNAPSHOT


def test_append_ignored_when_not_streaming(
    store: LiveDeltaStore, scheduler: ManualScheduler, snapshots: list[LiveSnapshot]
) -> None:
    store.append_delta("orphan")
    store.start("a1")
    store.commit()
    store.append_delta("late")
    scheduler.tick()

    assert scheduler.pending == 0
    assert store.get_snapshot().assistant_text == ""
    assert all("orphan" not in s.assistant_text for s in snapshots)


def test_empty_fragment_schedules_nothing(
    store: LiveDeltaStore, scheduler: ManualScheduler
) -> None:
    store.start("a1")

    store.append_delta("")

    assert scheduler.pending == 0


def test_start_supersedes_streaming_session(
    store: LiveDeltaStore, scheduler: ManualScheduler, snapshots: list[LiveSnapshot]
) -> None:
    """Unflushed text of the dropped session never reaches observers."""
    store.start("a1", "s1")
    store.append_delta("stale")

    superseded = store.start("a2", "s2")
    scheduler.tick()

    assert superseded is True
    assert scheduler.pending == 0
    assert store.get_snapshot() == LiveSnapshot(
        assistant_id="a2", assistant_text="", streaming=True, session_id="s2"
    )
    assert all("stale" not in s.assistant_text for s in snapshots)


def test_start_after_commit_is_not_a_supersede(store: LiveDeltaStore) -> None:
    store.start("a1")
    store.commit()

    assert store.start("a2") is False


def test_text_only_grows_within_a_session(
    store: LiveDeltaStore, scheduler: ManualScheduler, snapshots: list[LiveSnapshot]
) -> None:
    store.start("a1")
    for fragment in ["The ", "main ", "", "pain ", "is ", "speed"]:
        store.append_delta(fragment)
        scheduler.tick()
    store.commit()

    texts = [s.assistant_text for s in snapshots]
    assert all(later.startswith(earlier) for earlier, later in zip(texts, texts[1:]))
    assert texts[-1] == "The main pain is speed"


def test_reset_publishes_empty_state(
    store: LiveDeltaStore, scheduler: ManualScheduler, snapshots: list[LiveSnapshot]
) -> None:
    store.start("a1")
    store.append_delta("pending")

    store.reset()
    scheduler.tick()

    assert store.get_snapshot() == EMPTY_SNAPSHOT
    assert snapshots[-1] == EMPTY_SNAPSHOT
    assert not store.has_pending


def test_reset_when_empty_publishes_nothing(
    store: LiveDeltaStore, snapshots: list[LiveSnapshot]
) -> None:
    store.reset()

    assert snapshots == []


def test_dispose_releases_tick_and_observers(
    store: LiveDeltaStore, scheduler: ManualScheduler, snapshots: list[LiveSnapshot]
) -> None:
    store.start("a1")
    store.append_delta("x")
    count = len(snapshots)

    store.dispose()
    scheduler.tick()
    store.start("a2")

    assert scheduler.pending == 0
    assert len(snapshots) == count


def test_unsubscribed_observer_is_not_called(
    store: LiveDeltaStore, scheduler: ManualScheduler
) -> None:
    seen: list[LiveSnapshot] = []
    unsubscribe = store.subscribe(seen.append)

    store.start("a1")
    unsubscribe()
    store.append_delta("x")
    scheduler.tick()

    assert len(seen) == 1


def test_observer_reentrant_commit(
    store: LiveDeltaStore, scheduler: ManualScheduler
) -> None:
    """A commit from inside a flush publishes the fragment appended with it."""

    def committer(snapshot: LiveSnapshot) -> None:
        if snapshot.streaming and snapshot.assistant_text == "Hi":
            store.append_delta("!")
            store.commit()

    store.start("a1")
    store.subscribe(committer)
    store.append_delta("Hi")
    scheduler.tick()
    scheduler.tick()

    snapshot = store.get_snapshot()
    assert snapshot.streaming is False
    assert snapshot.assistant_text == "Hi!"
    assert not store.has_pending
    assert scheduler.pending == 0


def test_observer_appends_are_drained_in_same_flush(
    store: LiveDeltaStore, scheduler: ManualScheduler, snapshots: list[LiveSnapshot]
) -> None:
    def echo(snapshot: LiveSnapshot) -> None:
        if snapshot.assistant_text == "a":
            store.append_delta("b")

    store.start("a1")
    store.subscribe(echo)
    store.append_delta("a")
    scheduler.tick()

    assert store.get_snapshot().assistant_text == "ab"
    assert not store.has_pending
    scheduler.tick()
    assert [s.assistant_text for s in snapshots] == ["", "a", "ab"]


def test_commit_during_flush_then_later_appends_are_ignored(
    store: LiveDeltaStore, scheduler: ManualScheduler
) -> None:
    def committer(snapshot: LiveSnapshot) -> None:
        if snapshot.streaming and snapshot.assistant_text:
            store.commit()

    store.start("a1")
    store.subscribe(committer)
    store.append_delta("done")
    scheduler.tick()
    store.append_delta("late")

    assert store.get_snapshot() == LiveSnapshot(
        assistant_id="a1", assistant_text="done", streaming=False, session_id="a1"
    )
    assert not store.has_pending


def test_restart_of_session_with_text_is_rejected(
    store: LiveDeltaStore, scheduler: ManualScheduler, snapshots: list[LiveSnapshot]
) -> None:
    store.start("m1", "s1")
    store.append_delta("Hello")
    scheduler.tick()

    with pytest.raises(ValueError, match="s1"):
        store.start("m1", "s1")

    lengths = [len(s.assistant_text) for s in snapshots if s.session_id == "s1"]
    assert lengths == sorted(lengths)
    assert store.get_snapshot().assistant_text == "Hello"


def test_session_id_can_be_reused_after_reset(store: LiveDeltaStore) -> None:
    store.start("m1", "s1")
    store.append_delta("Hello")
    store.commit()
    store.reset()

    assert store.start("m1", "s1") is False
    assert store.get_snapshot().assistant_text == ""


def test_restart_of_session_without_text_is_allowed(store: LiveDeltaStore) -> None:
    store.start("a1")
    store.commit()

    assert store.start("a1") is False
    assert store.get_snapshot().streaming is True
