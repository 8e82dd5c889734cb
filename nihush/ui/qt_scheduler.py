"""QTimer-backed scheduler for the game session."""

from __future__ import annotations

from typing import Callable, Optional

from PySide6.QtCore import QObject, QTimer


class QtTimerHandle:
    def __init__(self, timer: QTimer) -> None:
        self._timer: Optional[QTimer] = timer

    def cancel(self) -> None:
        if self._timer is None:
            return
        self._timer.stop()
        self._timer.deleteLater()
        self._timer = None


class QtScheduler:
    """Runs session callbacks on the Qt event loop."""

    def __init__(self, parent: Optional[QObject] = None) -> None:
        self._parent = parent

    def call_repeating(self, interval_ms: int, callback: Callable[[], None]) -> QtTimerHandle:
        timer = QTimer(self._parent)
        timer.setInterval(interval_ms)
        timer.timeout.connect(callback)
        timer.start()
        return QtTimerHandle(timer)

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> QtTimerHandle:
        timer = QTimer(self._parent)
        timer.setSingleShot(True)
        timer.setInterval(delay_ms)
        timer.timeout.connect(callback)
        timer.start()
        return QtTimerHandle(timer)
