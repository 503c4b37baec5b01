"""Shared fixtures for the WordSmith test-suite."""

from __future__ import annotations

import pytest

from core.history import SearchHistoryStore


class FakeTimer:
    def __init__(self, scheduler: "FakeScheduler", due: float, callback) -> None:
        self.scheduler = scheduler
        self.due = due
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class FakeScheduler:
    """Manual clock standing in for ``threading.Timer``.

    ``advance(seconds)`` fires every timer that has come due, in order.
    """

    def __init__(self) -> None:
        self.now = 0.0
        self.timers: list[FakeTimer] = []

    def __call__(self, delay: float, callback) -> FakeTimer:
        timer = FakeTimer(self, self.now + delay, callback)
        self.timers.append(timer)
        return timer

    @property
    def pending(self) -> list[FakeTimer]:
        return [t for t in self.timers if not t.cancelled]

    def advance(self, seconds: float) -> None:
        self.now += seconds
        for timer in sorted(self.pending, key=lambda t: t.due):
            if timer.due <= self.now and not timer.cancelled:
                timer.cancelled = True
                timer.callback()


@pytest.fixture
def scheduler() -> FakeScheduler:
    return FakeScheduler()


@pytest.fixture
def store(tmp_path) -> SearchHistoryStore:
    """A history store backed by a fresh temp SQLite file."""
    history_store = SearchHistoryStore(tmp_path / "test_history.db")
    history_store.init_db()
    return history_store
