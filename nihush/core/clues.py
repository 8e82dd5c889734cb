from __future__ import annotations

from typing import Sequence, Tuple

CLUE_STAGES = 4
DEFAULT_CLUE_POINTS: Tuple[int, ...] = (10, 7, 5, 3)


def validate_clue_points(points: Sequence[int]) -> Tuple[int, ...]:
    """Return *points* as a tuple, or raise ValueError if it is not a valid schedule."""
    values = tuple(points)
    if len(values) != CLUE_STAGES:
        raise ValueError(f"expected {CLUE_STAGES} clue point values, got {len(values)}")
    for value in values:
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise ValueError(f"clue points must be non-negative integers, got {value!r}")
    return values


class ClueLadder:
    """Which clue is revealed for the current personality, and what it is worth.

    The active stage only moves forward and stops at the last clue.
    """

    def __init__(self, points: Sequence[int] = DEFAULT_CLUE_POINTS) -> None:
        self._points = validate_clue_points(points)
        self._active_index = 0

    @property
    def points(self) -> Tuple[int, ...]:
        return self._points

    def current_clue_index(self) -> int:
        return self._active_index

    def current_points(self) -> int:
        return self._points[self._active_index]

    def is_final_stage(self) -> bool:
        return self._active_index == len(self._points) - 1

    def advance(self) -> bool:
        """Move to the next clue. Returns False when already at the final stage."""
        if self.is_final_stage():
            return False
        self._active_index += 1
        return True
