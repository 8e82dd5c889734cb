"""Timer seam between the game logic and whatever event loop drives it."""

from __future__ import annotations

from typing import Callable, Protocol


class TimerHandle(Protocol):
    def cancel(self) -> None:
        """Stop the timer. Cancelling an already stopped timer does nothing."""


class Scheduler(Protocol):
    def call_repeating(self, interval_ms: int, callback: Callable[[], None]) -> TimerHandle:
        """Run *callback* every *interval_ms* until the handle is cancelled."""

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> TimerHandle:
        """Run *callback* once after *delay_ms* unless cancelled first."""
