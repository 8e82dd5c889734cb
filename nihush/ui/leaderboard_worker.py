"""Runs leaderboard requests on a thread pool and hands results back on the GUI thread."""

from __future__ import annotations

import logging
from typing import Any, Callable, List, Optional, Set

from PySide6.QtCore import QObject, QRunnable, QThreadPool, Signal, Slot

from nihush.core.leaderboard import LeaderboardRow, LeaderboardService, SubmitResult

logger = logging.getLogger(__name__)


class _ResultRelay(QObject):
    """Lives on the GUI thread; a signal emitted from a worker is queued to it."""

    finished = Signal(object)

    def __init__(self, callback: Callable[[Any], None], on_done: Callable[["_ResultRelay"], None]) -> None:
        super().__init__()
        self._callback = callback
        self._on_done = on_done
        self.finished.connect(self._deliver)

    @Slot(object)
    def _deliver(self, value: Any) -> None:
        self._on_done(self)
        self._callback(value)


class _ServiceCall(QRunnable):
    def __init__(self, fn: Callable[[], Any], relay: _ResultRelay) -> None:
        super().__init__()
        self._fn = fn
        self._relay = relay

    def run(self) -> None:
        try:
            value = self._fn()
        except Exception:
            logger.exception("Leaderboard request failed")
            value = None
        self._relay.finished.emit(value)


class LeaderboardLoader(QObject):
    """Non-blocking front for ``LeaderboardService``.

    Callbacks always run on the thread that owns the loader. A fetch callback
    receives a list of rows (sample rows if the request broke unexpectedly);
    a submit callback receives the ``SubmitResult`` or None.
    """

    def __init__(
        self,
        service: LeaderboardService,
        pool: Optional[QThreadPool] = None,
        parent: Optional[QObject] = None,
    ) -> None:
        super().__init__(parent)
        self._service = service
        self._pool = pool or QThreadPool(self)
        self._pending: Set[_ResultRelay] = set()

    @property
    def service(self) -> LeaderboardService:
        return self._service

    @property
    def has_backend(self) -> bool:
        return self._service.has_backend

    @property
    def pending(self) -> int:
        return len(self._pending)

    def fetch_top(self, n: int, callback: Callable[[List[LeaderboardRow]], None]) -> None:
        def deliver(rows: Optional[List[LeaderboardRow]]) -> None:
            callback(rows if rows is not None else LeaderboardService.sample_rows(n))

        self._run(lambda: self._service.fetch_top(n), deliver)

    def submit(self, name: str, score: int, callback: Callable[[Optional[SubmitResult]], None]) -> None:
        self._run(lambda: self._service.submit(name, score), callback)

    def wait_for_done(self, msecs: int = -1) -> bool:
        return self._pool.waitForDone(msecs)

    def _run(self, fn: Callable[[], Any], callback: Callable[[Any], None]) -> None:
        relay = _ResultRelay(callback, self._pending.discard)
        self._pending.add(relay)
        self._pool.start(_ServiceCall(fn, relay))
