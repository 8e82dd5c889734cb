"""Data models used by the UI."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List

from nihush.core.session import SessionSnapshot


class SlotLook(Enum):
    EMPTY = "empty"
    FOCUS = "focus"
    FILLED = "filled"
    REVEALED = "revealed"
    SOLVED = "solved"
    SEPARATOR = "separator"


@dataclass
class SlotView:
    """How one answer slot should be painted."""

    text: str
    look: SlotLook


def format_clock(seconds: int) -> str:
    """Render remaining seconds as MM:SS."""
    seconds = max(0, int(seconds))
    minutes, secs = divmod(seconds, 60)
    return f"{minutes:02d}:{secs:02d}"


def build_slot_views(snapshot: SessionSnapshot, solved: bool = False) -> List[SlotView]:
    views: List[SlotView] = []
    letter_idx = 0
    for slot in snapshot.slots:
        if slot.is_separator:
            # spaces render as a gap, hyphens as a visible dash
            text = "" if slot.char == " " else slot.char
            views.append(SlotView(text=text, look=SlotLook.SEPARATOR))
            continue
        if solved:
            look = SlotLook.SOLVED
        elif slot.revealed:
            look = SlotLook.REVEALED
        elif slot.char:
            look = SlotLook.FILLED
        elif snapshot.active and snapshot.focus_index == letter_idx:
            look = SlotLook.FOCUS
        else:
            look = SlotLook.EMPTY
        views.append(SlotView(text=slot.char, look=look))
        letter_idx += 1
    return views
