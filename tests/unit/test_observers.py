"""Tests for the observer registry."""

from __future__ import annotations

from painflow.observers import ObserverSet


def test_notify_calls_observers_in_subscription_order() -> None:
    observers: ObserverSet[[int]] = ObserverSet("test")
    calls: list[str] = []
    observers.subscribe(lambda value: calls.append(f"a{value}"))
    observers.subscribe(lambda value: calls.append(f"b{value}"))

    observers.notify(1)

    assert calls == ["a1", "b1"]


def test_unsubscribe_is_idempotent() -> None:
    observers: ObserverSet[[int]] = ObserverSet("test")
    unsubscribe = observers.subscribe(lambda value: None)

    unsubscribe()
    unsubscribe()

    assert len(observers) == 0


def test_unsubscribe_removes_one_registration() -> None:
    """The same callable subscribed twice is removed one handle at a time."""
    observers: ObserverSet[[int]] = ObserverSet("test")
    calls: list[int] = []

    def record(value: int) -> None:
        calls.append(value)

    first = observers.subscribe(record)
    observers.subscribe(record)

    first()
    first()
    observers.notify(7)

    assert calls == [7]


def test_unsubscribing_another_observer_during_notify() -> None:
    """Removals during a pass take effect on the next pass."""
    observers: ObserverSet[[int]] = ObserverSet("test")
    calls: list[str] = []

    def remover(value: int) -> None:
        calls.append("remover")
        unsubscribe_other()

    observers.subscribe(remover)
    unsubscribe_other = observers.subscribe(lambda value: calls.append("other"))

    observers.notify(1)
    observers.notify(2)

    assert calls == ["remover", "other", "remover"]


def test_subscribing_during_notify_waits_for_next_pass() -> None:
    observers: ObserverSet[[int]] = ObserverSet("test")
    calls: list[str] = []

    def adder(value: int) -> None:
        calls.append("adder")
        if value == 1:
            observers.subscribe(lambda v: calls.append("late"))

    observers.subscribe(adder)

    observers.notify(1)
    observers.notify(2)

    assert calls == ["adder", "adder", "late"]


def test_raising_observer_does_not_stop_others() -> None:
    observers: ObserverSet[[int]] = ObserverSet("test")
    calls: list[int] = []

    def broken(value: int) -> None:
        raise RuntimeError("boom")

    observers.subscribe(broken)
    observers.subscribe(calls.append)

    observers.notify(3)

    assert calls == [3]


def test_clear_drops_everything() -> None:
    observers: ObserverSet[[int]] = ObserverSet("test")
    observers.subscribe(lambda value: None)

    observers.clear()

    assert len(observers) == 0
