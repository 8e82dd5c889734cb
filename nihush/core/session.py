from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Sequence, Tuple

from nihush.core.personalities import Personality
from nihush.core.round import OutcomeKind, RoundController, RoundOutcome
from nihush.core.scheduling import Scheduler, TimerHandle
from nihush.core.settings import GameSettings

logger = logging.getLogger(__name__)

TICK_INTERVAL_MS = 1000

COMPLETED_MESSAGE = "סיימת את כל הדמויות!"
TIMEOUT_MESSAGE = "נגמר הזמן!"


class EventKind(Enum):
    STARTED = "started"
    ROUND_LOADED = "round_loaded"
    CLUE_REVEALED = "clue_revealed"
    INPUT_CHANGED = "input_changed"
    INCORRECT = "incorrect"
    ROUND_SOLVED = "round_solved"
    ROUND_GAVE_UP = "round_gave_up"
    TICK = "tick"
    ENDED = "ended"


@dataclass(frozen=True)
class SlotSnapshot:
    char: str
    is_separator: bool
    revealed: bool = False


@dataclass(frozen=True)
class SessionSnapshot:
    """Read-only view of the session for the presentation layer."""

    score: int
    remaining_seconds: int
    level_index: int
    total_levels: int
    active: bool
    clue_index: int = 0
    clue_text: str = ""
    clue_points: int = 0
    final_stage: bool = False
    slots: Tuple[SlotSnapshot, ...] = ()
    focus_index: Optional[int] = None


@dataclass(frozen=True)
class GameResult:
    score: int
    completed_all: bool
    message: str
    eligible_for_leaderboard: bool


@dataclass(frozen=True)
class SessionEvent:
    kind: EventKind
    snapshot: SessionSnapshot
    outcome: Optional[RoundOutcome] = None
    result: Optional[GameResult] = None


SessionListener = Callable[[SessionEvent], None]


class GameSession:
    """One timed game over a shuffled queue of personalities.

    The session owns the countdown timer, the score and the single open
    round. Input is accepted only while ``active`` is true; it is switched
    off during the pause between rounds and once the session ends.

    Pending round transitions remember the generation they were scheduled
    in, so a callback firing after a timeout or a restart does nothing.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        settings: Optional[GameSettings] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self._scheduler = scheduler
        self._settings = settings or GameSettings()
        self._rng = rng or random.Random()
        self._listeners: List[SessionListener] = []

        self._queue: List[Personality] = []
        self._round: Optional[RoundController] = None
        self._score = 0
        self._remaining_seconds = self._settings.duration_seconds
        self._level_index = 0
        self._active = False
        self._running = False
        self._generation = 0
        self._timer: Optional[TimerHandle] = None
        self._pending_transition: Optional[TimerHandle] = None
        self._result: Optional[GameResult] = None

    # -- properties -------------------------------------------------------------

    @property
    def settings(self) -> GameSettings:
        return self._settings

    @property
    def score(self) -> int:
        return self._score

    @property
    def remaining_seconds(self) -> int:
        return self._remaining_seconds

    @property
    def level_index(self) -> int:
        return self._level_index

    @property
    def total_levels(self) -> int:
        return len(self._queue)

    @property
    def active(self) -> bool:
        return self._active

    @property
    def running(self) -> bool:
        """True from ``start`` until the session ends."""
        return self._running

    @property
    def current_round(self) -> Optional[RoundController]:
        return self._round

    @property
    def queue(self) -> Tuple[Personality, ...]:
        return tuple(self._queue)

    @property
    def result(self) -> Optional[GameResult]:
        return self._result

    # -- observers --------------------------------------------------------------

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Register *listener*; returns a function that removes it again."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def snapshot(self) -> SessionSnapshot:
        base = dict(
            score=self._score,
            remaining_seconds=self._remaining_seconds,
            level_index=self._level_index,
            total_levels=len(self._queue),
            active=self._active,
        )
        if self._round is None:
            return SessionSnapshot(**base)
        ladder = self._round.ladder
        buffer = self._round.buffer
        return SessionSnapshot(
            **base,
            clue_index=ladder.current_clue_index(),
            clue_text=self._round.current_clue(),
            clue_points=ladder.current_points(),
            final_stage=ladder.is_final_stage(),
            slots=tuple(
                SlotSnapshot(char=slot.value, is_separator=slot.is_separator, revealed=slot.revealed)
                for slot in buffer.slots
            ),
            focus_index=buffer.next_empty_index(),
        )

    def _emit(
        self,
        kind: EventKind,
        outcome: Optional[RoundOutcome] = None,
        result: Optional[GameResult] = None,
    ) -> None:
        event = SessionEvent(kind=kind, snapshot=self.snapshot(), outcome=outcome, result=result)
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception("Session listener failed on %s", kind.value)

    # -- lifecycle --------------------------------------------------------------

    def start(self, pool: Sequence[Personality]) -> None:
        """Begin a new game over a shuffled copy of *pool*."""
        self._cancel_timers()
        self._generation += 1
        self._score = 0
        self._remaining_seconds = self._settings.duration_seconds
        self._level_index = 0
        self._result = None
        self._round = None
        self._queue = list(pool)
        self._rng.shuffle(self._queue)
        self._running = True
        self._active = True
        logger.info("Session %d started with %d personalities", self._generation, len(self._queue))

        self._timer = self._scheduler.call_repeating(TICK_INTERVAL_MS, self.tick)
        self._emit(EventKind.STARTED)
        self._load_level()

    def tick(self) -> None:
        if not self._running:
            return
        self._remaining_seconds = max(0, self._remaining_seconds - 1)
        self._emit(EventKind.TICK)
        if self._remaining_seconds <= 0:
            self.end(completed_all=False)

    def end(self, completed_all: bool) -> None:
        if not self._running:
            return
        self._running = False
        self._active = False
        self._cancel_timers()
        message = COMPLETED_MESSAGE if completed_all else TIMEOUT_MESSAGE
        self._result = GameResult(
            score=self._score,
            completed_all=completed_all,
            message=message,
            eligible_for_leaderboard=self._score > 0,
        )
        logger.info(
            "Session %d ended (completed_all=%s) with score %d",
            self._generation, completed_all, self._score,
        )
        self._emit(EventKind.ENDED, result=self._result)

    def _cancel_timers(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        if self._pending_transition is not None:
            self._pending_transition.cancel()
            self._pending_transition = None

    def _load_level(self) -> None:
        if self._level_index >= len(self._queue):
            self.end(completed_all=True)
            return
        personality = self._queue[self._level_index]
        self._round = RoundController.start(
            personality,
            clue_points=self._settings.clue_points,
            on_outcome=self.on_round_outcome,
        )
        self._active = True
        logger.debug("Loaded level %d/%d", self._level_index + 1, len(self._queue))
        self._emit(EventKind.ROUND_LOADED)

    def _schedule_next_level(self, delay_ms: int) -> None:
        generation = self._generation

        def _advance() -> None:
            self._pending_transition = None
            if generation != self._generation or not self._running:
                logger.debug("Dropping stale round transition from session %d", generation)
                return
            self._load_level()

        self._pending_transition = self._scheduler.call_later(delay_ms, _advance)

    # -- round outcomes ---------------------------------------------------------

    def on_round_outcome(self, outcome: RoundOutcome) -> None:
        if not self._running:
            return
        if outcome.kind is OutcomeKind.INCORRECT:
            self._emit(EventKind.INCORRECT, outcome=outcome)
            return

        self._active = False
        if outcome.kind is OutcomeKind.SOLVED:
            self._score += outcome.points_earned
            kind, delay_ms = EventKind.ROUND_SOLVED, self._settings.solved_delay_ms
        else:
            kind, delay_ms = EventKind.ROUND_GAVE_UP, self._settings.gave_up_delay_ms
        logger.info(
            "Round %d %s (+%d, score %d)",
            self._level_index + 1, outcome.kind.value, outcome.points_earned, self._score,
        )
        self._emit(kind, outcome=outcome)

        self._level_index += 1
        if self._level_index >= len(self._queue):
            self.end(completed_all=True)
            return
        self._schedule_next_level(delay_ms)

    # -- input (no-ops while inactive) ------------------------------------------

    def _open_round(self) -> Optional[RoundController]:
        if not self._active or self._round is None:
            return None
        return self._round

    def type_character(self, char: str) -> Optional[RoundOutcome]:
        current = self._open_round()
        if current is None:
            return None
        before = current.buffer.compact_view()
        outcome = current.type_character(char)
        if outcome is None and current.buffer.compact_view() != before:
            self._emit(EventKind.INPUT_CHANGED)
        return outcome

    def set_letters(self, text: str) -> Optional[RoundOutcome]:
        current = self._open_round()
        if current is None:
            return None
        before = current.buffer.compact_view()
        outcome = current.set_letters(text)
        if outcome is None and current.buffer.compact_view() != before:
            self._emit(EventKind.INPUT_CHANGED)
        return outcome

    def backspace(self) -> bool:
        current = self._open_round()
        if current is None or not current.backspace():
            return False
        self._emit(EventKind.INPUT_CHANGED)
        return True

    def request_next_clue(self) -> bool:
        current = self._open_round()
        if current is None or not current.request_next_clue():
            return False
        self._emit(EventKind.CLUE_REVEALED)
        return True

    def give_up(self) -> Optional[RoundOutcome]:
        current = self._open_round()
        if current is None:
            return None
        return current.give_up()
