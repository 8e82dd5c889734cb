"""On-screen Hebrew keyboard for tap input."""

from __future__ import annotations

from typing import Callable, Optional

from PySide6.QtCore import Qt
from PySide6.QtWidgets import QGridLayout, QPushButton, QSizePolicy, QWidget

from nihush.ui.colors import GameColors

# Standard Israeli layout, final letters included.
HEBREW_ROWS = (
    ("ק", "ר", "א", "ט", "ו", "ן", "ם", "פ"),
    ("ש", "ד", "ג", "כ", "ע", "י", "ח", "ל", "ך", "ף"),
    ("ז", "ס", "ב", "ה", "נ", "מ", "צ", "ת", "ץ"),
)
BACKSPACE_LABEL = "⌫"


def _key_style() -> str:
    return f"""
        QPushButton {{
            background: #ffffff;
            color: {GameColors.TEXT_PRIMARY};
            border: 1px solid {GameColors.SLOT_BORDER};
            border-radius: 8px;
            font-size: 18px;
            font-weight: 600;
            min-width: 34px;
            min-height: 40px;
        }}
        QPushButton:hover {{
            border-color: {GameColors.PRIMARY};
            color: {GameColors.PRIMARY};
        }}
        QPushButton:pressed {{
            background: {GameColors.SLOT_FOCUS};
        }}
    """


class HebrewKeyboardWidget(QWidget):
    """Letter keys call *on_letter* with one character; the backspace key calls *on_backspace*."""

    def __init__(
        self,
        on_letter: Callable[[str], None],
        on_backspace: Callable[[], None],
        parent: Optional[QWidget] = None,
    ) -> None:
        super().__init__(parent)
        self._on_letter = on_letter
        self._on_backspace = on_backspace

        grid = QGridLayout(self)
        grid.setSpacing(6)
        grid.setContentsMargins(0, 0, 0, 0)
        style = _key_style()
        for row_idx, row in enumerate(HEBREW_ROWS):
            for col_idx, letter in enumerate(row):
                button = self._make_key(letter, style)
                button.clicked.connect(lambda _checked=False, ch=letter: self._on_letter(ch))
                grid.addWidget(button, row_idx, col_idx)
        backspace = self._make_key(BACKSPACE_LABEL, style)
        backspace.clicked.connect(lambda _checked=False: self._on_backspace())
        grid.addWidget(backspace, len(HEBREW_ROWS) - 1, len(HEBREW_ROWS[-1]))

    @staticmethod
    def _make_key(text: str, style: str) -> QPushButton:
        button = QPushButton(text)
        button.setFocusPolicy(Qt.NoFocus)
        button.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Fixed)
        button.setStyleSheet(style)
        return button
