"""Tests for nihush.ui.leaderboard_worker – leaderboard requests off the GUI thread."""

from __future__ import annotations

import threading

import pytest

pytest.importorskip("PySide6.QtCore")

from conftest import drain_leaderboard  # noqa: E402
from nihush.core.leaderboard import (  # noqa: E402
    FAILED_MESSAGE,
    SAVED_MESSAGE,
    LeaderboardEntry,
    LeaderboardService,
    LeaderboardSubmitFailed,
    LeaderboardUnavailable,
)
from nihush.ui.leaderboard_worker import LeaderboardLoader  # noqa: E402


class SlowGateway:
    """Blocks every call until the test releases it."""

    def __init__(self, fail: bool = False) -> None:
        self.release = threading.Event()
        self.fail = fail
        self.threads = []

    def submit(self, name, score, timestamp):
        self.threads.append(threading.current_thread())
        self.release.wait(5)
        if self.fail:
            raise LeaderboardSubmitFailed("offline")

    def fetch_top(self, n):
        self.threads.append(threading.current_thread())
        self.release.wait(5)
        if self.fail:
            raise LeaderboardUnavailable("offline")
        return [LeaderboardEntry("a", 3), LeaderboardEntry("b", 30)]


class BrokenGateway:
    def submit(self, name, score, timestamp):
        raise RuntimeError("bug")

    def fetch_top(self, n):
        raise RuntimeError("bug")


# ---------------------------------------------------------------------------
# fetch_top
# ---------------------------------------------------------------------------

class TestFetch:
    def test_does_not_block_caller(self, qapp):
        gateway = SlowGateway()
        loader = LeaderboardLoader(LeaderboardService(gateway))
        received = []
        try:
            loader.fetch_top(10, received.append)
            assert received == []
            assert loader.pending == 1
        finally:
            gateway.release.set()
        drain_leaderboard(qapp, loader)
        assert [(r.rank, r.name) for r in received[0]] == [(1, "b"), (2, "a")]
        assert gateway.threads[0] is not threading.main_thread()

    def test_callback_runs_on_gui_thread(self, qapp):
        gateway = SlowGateway()
        gateway.release.set()
        loader = LeaderboardLoader(LeaderboardService(gateway))
        threads = []
        loader.fetch_top(10, lambda rows: threads.append(threading.current_thread()))
        drain_leaderboard(qapp, loader)
        assert threads == [threading.main_thread()]

    def test_unavailable_gives_sample(self, qapp):
        gateway = SlowGateway(fail=True)
        gateway.release.set()
        loader = LeaderboardLoader(LeaderboardService(gateway))
        received = []
        loader.fetch_top(10, received.append)
        drain_leaderboard(qapp, loader)
        assert received == [LeaderboardService.sample_rows(10)]

    def test_unexpected_error_gives_sample(self, qapp):
        loader = LeaderboardLoader(LeaderboardService(BrokenGateway()))
        received = []
        loader.fetch_top(1, received.append)
        drain_leaderboard(qapp, loader)
        assert received == [LeaderboardService.sample_rows(1)]


# ---------------------------------------------------------------------------
# submit
# ---------------------------------------------------------------------------

class TestSubmit:
    def test_saved(self, qapp):
        gateway = SlowGateway()
        loader = LeaderboardLoader(LeaderboardService(gateway))
        received = []
        try:
            loader.submit("נועה", 12, received.append)
            assert received == []
        finally:
            gateway.release.set()
        drain_leaderboard(qapp, loader)
        assert received[0].saved is True
        assert received[0].message == SAVED_MESSAGE

    def test_failed(self, qapp):
        gateway = SlowGateway(fail=True)
        gateway.release.set()
        loader = LeaderboardLoader(LeaderboardService(gateway))
        received = []
        loader.submit("נועה", 12, received.append)
        drain_leaderboard(qapp, loader)
        assert received[0].saved is False
        assert received[0].message == FAILED_MESSAGE

    def test_unexpected_error_gives_none(self, qapp):
        loader = LeaderboardLoader(LeaderboardService(BrokenGateway()))
        received = []
        loader.submit("נועה", 12, received.append)
        drain_leaderboard(qapp, loader)
        assert received == [None]
