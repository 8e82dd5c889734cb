from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

SEPARATORS = (" ", "-")


class InvalidTarget(ValueError):
    """Raised when an answer buffer is built from an empty name."""


def strip_separators(text: str) -> str:
    """Remove space and hyphen characters; they are structural, never typed."""
    return "".join(ch for ch in text if ch not in SEPARATORS)


@dataclass
class Slot:
    """One position of the answer: an editable letter or a fixed separator."""

    separator: Optional[str] = None
    value: str = ""
    revealed: bool = False

    @property
    def is_separator(self) -> bool:
        return self.separator is not None

    @property
    def is_filled(self) -> bool:
        return bool(self.value)


class AnswerBuffer:
    """Fixed-width answer made of letter slots and pre-filled separator slots.

    Two input styles feed the same slots:

    * ``apply_typed_character`` appends one letter at a time (on-screen
      keyboard taps).
    * ``apply_full_letter_string`` replaces the whole compact view, for text
      fields that report their full value on every keystroke.

    The compact view is the sequence of letter slots only, without separators.
    """

    def __init__(self, target_name: str) -> None:
        self._target = ""
        self._slots: List[Slot] = []
        self.reset(target_name)

    @property
    def target(self) -> str:
        return self._target

    @property
    def slots(self) -> Tuple[Slot, ...]:
        return tuple(self._slots)

    @property
    def letter_count(self) -> int:
        return sum(1 for slot in self._slots if not slot.is_separator)

    @property
    def filled_count(self) -> int:
        return sum(1 for slot in self._slots if not slot.is_separator and slot.is_filled)

    def reset(self, target_name: str) -> None:
        """Rebuild the slots for *target_name*; old ``Slot`` objects are dropped."""
        target = (target_name or "").strip()
        if not target:
            raise InvalidTarget("target name is empty")
        self._target = target
        self._slots = [
            Slot(separator=ch, value=ch) if ch in SEPARATORS else Slot()
            for ch in target
        ]

    def _letter_slots(self) -> List[Slot]:
        return [slot for slot in self._slots if not slot.is_separator]

    def compact_view(self) -> str:
        return "".join(slot.value for slot in self._letter_slots())

    def next_empty_index(self) -> Optional[int]:
        """Index in the compact view of the first empty letter slot."""
        for idx, slot in enumerate(self._letter_slots()):
            if not slot.is_filled:
                return idx
        return None

    def apply_typed_character(self, letter: str) -> bool:
        """Place *letter* in the first empty letter slot. Returns False if ignored."""
        if len(letter) != 1 or letter in SEPARATORS:
            return False
        for slot in self._slots:
            if not slot.is_separator and not slot.is_filled:
                slot.value = letter
                return True
        return False

    def apply_full_letter_string(self, letters: str) -> bool:
        """Overwrite the compact view with *letters*. Returns True if any slot changed."""
        letter_slots = self._letter_slots()
        letters = strip_separators(letters)[: len(letter_slots)]
        changed = False
        for idx, slot in enumerate(letter_slots):
            value = letters[idx] if idx < len(letters) else ""
            if slot.value != value or slot.revealed:
                slot.value = value
                slot.revealed = False
                changed = True
        return changed

    def remove_last_typed_character(self) -> bool:
        for slot in reversed(self._slots):
            if slot.is_separator:
                continue
            if slot.is_filled:
                slot.value = ""
                slot.revealed = False
                return True
        return False

    def is_complete(self) -> bool:
        return all(slot.is_filled for slot in self._slots if not slot.is_separator)

    def current_joined_string(self) -> str:
        return "".join(slot.value for slot in self._slots)

    def matches_target(self) -> bool:
        return self.current_joined_string() == self._target

    def reveal_remaining(self) -> int:
        """Fill every empty letter slot with the correct character."""
        revealed = 0
        for slot, expected in zip(self._slots, self._target):
            if slot.is_separator or slot.is_filled:
                continue
            slot.value = expected
            slot.revealed = True
            revealed += 1
        return revealed
