"""Shared fixtures: a manual clock for session timers and sample personalities."""

from __future__ import annotations

import os
import time
from typing import Callable, List, Optional

import pytest

from nihush.core.personalities import Personality


class ManualTimer:
    def __init__(self, scheduler: "ManualScheduler", due_ms: int, callback: Callable[[], None],
                 interval_ms: Optional[int]) -> None:
        self.scheduler = scheduler
        self.due_ms = due_ms
        self.callback = callback
        self.interval_ms = interval_ms
        self.cancelled = False
        self.cancel_calls = 0

    @property
    def repeating(self) -> bool:
        return self.interval_ms is not None

    def cancel(self) -> None:
        self.cancel_calls += 1
        self.cancelled = True


class ManualScheduler:
    """Scheduler whose time only moves when a test calls ``advance``."""

    def __init__(self) -> None:
        self.now_ms = 0
        self.timers: List[ManualTimer] = []

    def call_repeating(self, interval_ms: int, callback: Callable[[], None]) -> ManualTimer:
        timer = ManualTimer(self, self.now_ms + interval_ms, callback, interval_ms)
        self.timers.append(timer)
        return timer

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> ManualTimer:
        timer = ManualTimer(self, self.now_ms + delay_ms, callback, None)
        self.timers.append(timer)
        return timer

    def active_timers(self, repeating: Optional[bool] = None) -> List[ManualTimer]:
        return [
            t for t in self.timers
            if not t.cancelled and (repeating is None or t.repeating == repeating)
        ]

    def advance(self, ms: int) -> None:
        target = self.now_ms + ms
        while True:
            pending = [t for t in self.timers if not t.cancelled and t.due_ms <= target]
            if not pending:
                break
            timer = min(pending, key=lambda t: t.due_ms)
            self.now_ms = timer.due_ms
            if timer.repeating:
                timer.due_ms += timer.interval_ms
            else:
                timer.cancelled = True
            timer.callback()
        self.now_ms = target


@pytest.fixture()
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture()
def ben_gurion() -> Personality:
    return Personality(name="דוד בן-גוריון", clues=("c1", "c2", "c3", "c4"))


@pytest.fixture()
def pool() -> List[Personality]:
    return [
        Personality(name="גולדה מאיר", clues=("g1", "g2", "g3", "g4")),
        Personality(name="רבין", clues=("r1", "r2", "r3", "r4")),
        Personality(name="בן-יהודה", clues=("b1", "b2", "b3", "b4")),
    ]


@pytest.fixture(scope="session")
def qapp():
    """Headless QApplication for the widget and worker tests."""
    pytest.importorskip("PySide6.QtWidgets")
    os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
    from PySide6.QtWidgets import QApplication

    return QApplication.instance() or QApplication([])


def drain_leaderboard(app, loader, timeout_s: float = 5.0) -> None:
    """Let pool threads finish, then deliver their queued results."""
    assert loader.wait_for_done(int(timeout_s * 1000))
    deadline = time.monotonic() + timeout_s
    while loader.pending and time.monotonic() < deadline:
        app.processEvents()
    assert loader.pending == 0
