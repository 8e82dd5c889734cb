from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Sequence

from nihush.core.answer_buffer import AnswerBuffer, strip_separators
from nihush.core.clues import DEFAULT_CLUE_POINTS, ClueLadder
from nihush.core.personalities import Personality

logger = logging.getLogger(__name__)


class RoundState(Enum):
    AWAITING_INPUT = "awaiting_input"
    SOLVED = "solved"
    GAVE_UP = "gave_up"


class OutcomeKind(Enum):
    SOLVED = "solved"
    GAVE_UP = "gave_up"
    INCORRECT = "incorrect"


@dataclass(frozen=True)
class RoundOutcome:
    kind: OutcomeKind
    points_earned: int = 0

    @classmethod
    def solved(cls, points: int) -> "RoundOutcome":
        return cls(OutcomeKind.SOLVED, points)

    @classmethod
    def gave_up(cls) -> "RoundOutcome":
        return cls(OutcomeKind.GAVE_UP, 0)

    @classmethod
    def incorrect(cls) -> "RoundOutcome":
        return cls(OutcomeKind.INCORRECT, 0)

    @property
    def is_terminal(self) -> bool:
        return self.kind is not OutcomeKind.INCORRECT


OutcomeCallback = Callable[[RoundOutcome], None]


class RoundController:
    """Plays one personality: collects input, reveals clues, decides the outcome.

    A round starts in ``AWAITING_INPUT`` and ends in ``SOLVED`` or ``GAVE_UP``.
    Requests that do not fit the current state are ignored and return
    ``None``/``False``; the UI may race a click against a state change.

    Every outcome, including the non-terminal ``INCORRECT`` feedback, is passed
    to *on_outcome* and returned from the call that caused it.
    """

    def __init__(
        self,
        personality: Personality,
        clue_points: Sequence[int] = DEFAULT_CLUE_POINTS,
        on_outcome: Optional[OutcomeCallback] = None,
    ) -> None:
        self._personality = personality
        self._buffer = AnswerBuffer(personality.name)
        self._ladder = ClueLadder(clue_points)
        self._state = RoundState.AWAITING_INPUT
        self._on_outcome = on_outcome

    @classmethod
    def start(
        cls,
        personality: Personality,
        clue_points: Sequence[int] = DEFAULT_CLUE_POINTS,
        on_outcome: Optional[OutcomeCallback] = None,
    ) -> "RoundController":
        return cls(personality, clue_points=clue_points, on_outcome=on_outcome)

    @property
    def personality(self) -> Personality:
        return self._personality

    @property
    def buffer(self) -> AnswerBuffer:
        return self._buffer

    @property
    def ladder(self) -> ClueLadder:
        return self._ladder

    @property
    def state(self) -> RoundState:
        return self._state

    @property
    def is_open(self) -> bool:
        return self._state is RoundState.AWAITING_INPUT

    def current_clue(self) -> str:
        return self._personality.clues[self._ladder.current_clue_index()]

    # -- input --------------------------------------------------------------

    def type_character(self, char: str) -> Optional[RoundOutcome]:
        if not self.is_open:
            logger.debug("Ignoring typed character: round is %s", self._state.value)
            return None
        letters = strip_separators(char)
        if not letters or not self._buffer.apply_typed_character(letters[0]):
            return None
        return self._evaluate()

    def set_letters(self, text: str) -> Optional[RoundOutcome]:
        if not self.is_open:
            logger.debug("Ignoring letter string: round is %s", self._state.value)
            return None
        self._buffer.apply_full_letter_string(strip_separators(text))
        return self._evaluate()

    def backspace(self) -> bool:
        if not self.is_open:
            return False
        return self._buffer.remove_last_typed_character()

    # -- clue ladder ----------------------------------------------------------

    def request_next_clue(self) -> bool:
        if not self.is_open or self._ladder.is_final_stage():
            logger.debug("Next clue rejected (state=%s, stage=%d)",
                         self._state.value, self._ladder.current_clue_index())
            return False
        return self._ladder.advance()

    def give_up(self) -> Optional[RoundOutcome]:
        if not self.is_open or not self._ladder.is_final_stage():
            logger.debug("Give up rejected (state=%s, stage=%d)",
                         self._state.value, self._ladder.current_clue_index())
            return None
        self._buffer.reveal_remaining()
        self._state = RoundState.GAVE_UP
        return self._emit(RoundOutcome.gave_up())

    # -- internals ------------------------------------------------------------

    def _evaluate(self) -> Optional[RoundOutcome]:
        if not self._buffer.is_complete():
            return None
        if self._buffer.matches_target():
            self._state = RoundState.SOLVED
            return self._emit(RoundOutcome.solved(self._ladder.current_points()))
        return self._emit(RoundOutcome.incorrect())

    def _emit(self, outcome: RoundOutcome) -> RoundOutcome:
        if self._on_outcome is not None:
            self._on_outcome(outcome)
        return outcome
