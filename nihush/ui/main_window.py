from __future__ import annotations

from typing import Callable, List, Optional

from PySide6.QtCore import Qt, QTimer
from PySide6.QtGui import QCloseEvent
from PySide6.QtWidgets import (
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QMainWindow,
    QPushButton,
    QStackedWidget,
    QVBoxLayout,
    QWidget,
)

from nihush.core.leaderboard import FAILED_MESSAGE, LeaderboardRow, LeaderboardService, SubmitResult
from nihush.core.personalities import PersonalityRepository
from nihush.core.session import EventKind, GameResult, GameSession, SessionEvent
from nihush.ui.colors import GameColors
from nihush.ui.game_widgets import AnswerSlotsWidget, ClueCard, GameBackground, GlassCard
from nihush.ui.keyboard import HebrewKeyboardWidget
from nihush.ui.leaderboard_worker import LeaderboardLoader
from nihush.ui.models import build_slot_views, format_clock
from nihush.ui.qt_scheduler import QtScheduler


NEXT_CLUE_TEXT = "רמז הבא"
SKIP_TEXT = "דלג"
NO_SCORES_TEXT = "אין עדיין תוצאות"
LOADING_TEXT = "טוען..."
SAVING_TEXT = "שומר..."


def _primary_button_style() -> str:
    return f"""
        QPushButton {{
            background: qlineargradient(x1:0, y1:0, x2:1, y2:1,
                stop:0 {GameColors.PRIMARY_LIGHT}, stop:1 {GameColors.PRIMARY});
            color: white;
            padding: 12px 28px;
            border: none;
            border-radius: 14px;
            font-weight: 700;
            font-size: 16px;
        }}
        QPushButton:hover {{
            background: {GameColors.PRIMARY_DARK};
        }}
        QPushButton:disabled {{
            background: {GameColors.SLOT_BORDER};
        }}
    """


def _muted_label(text: str = "", size: int = 14) -> QLabel:
    lbl = QLabel(text)
    lbl.setStyleSheet(f"color: {GameColors.TEXT_SECONDARY}; font-size: {size}px; background: transparent;")
    return lbl


def _big_value(text: str = "", size: int = 32, color: str = GameColors.PRIMARY) -> QLabel:
    lbl = QLabel(text)
    lbl.setStyleSheet(f"color: {color}; font-size: {size}px; font-weight: 800; background: transparent;")
    return lbl


class MainWindow(QMainWindow):
    """Three screens: start (leaderboard), game, and game over.

    The window only renders session events. Typing in the hidden line edit
    sends the whole current value to the session; the on-screen keyboard
    sends one letter at a time, and the line edit is then resynced to the
    letters held by the answer slots.
    """

    def __init__(
        self,
        personalities: PersonalityRepository,
        leaderboard: LeaderboardService,
        session: Optional[GameSession] = None,
        leaderboard_size: int = 10,
    ) -> None:
        super().__init__()
        self._personalities = personalities
        self.leaderboard_loader = LeaderboardLoader(leaderboard, parent=self)
        self._leaderboard_request = 0
        self._leaderboard_size = leaderboard_size
        self._session = session or GameSession(QtScheduler(self))
        self._session.subscribe(self._on_session_event)
        self._input_sync_block = False
        self._round_solved = False
        self._last_result: Optional[GameResult] = None

        self._stack: Optional[QStackedWidget] = None
        self._start_screen: Optional[QWidget] = None
        self._game_screen: Optional[QWidget] = None
        self._game_over_screen: Optional[QWidget] = None

        self._leaderboard_layout: Optional[QVBoxLayout] = None
        self._start_status_label: Optional[QLabel] = None
        self._timer_label: Optional[QLabel] = None
        self._score_label: Optional[QLabel] = None
        self._level_label: Optional[QLabel] = None
        self._clue_card: Optional[ClueCard] = None
        self._slots_widget: Optional[AnswerSlotsWidget] = None
        self._next_clue_button: Optional[QPushButton] = None
        self.input_box: Optional[QLineEdit] = None
        self._final_score_label: Optional[QLabel] = None
        self._final_message_label: Optional[QLabel] = None
        self._high_score_form: Optional[QWidget] = None
        self._player_name_input: Optional[QLineEdit] = None
        self._save_feedback_label: Optional[QLabel] = None
        self._save_button: Optional[QPushButton] = None

        self._build_ui()
        self._show_start_screen()

    # -- construction -----------------------------------------------------------

    def _build_ui(self) -> None:
        self.setWindowTitle("ניחוש - מי אני?")
        self.setMinimumSize(900, 700)
        self.setLayoutDirection(Qt.RightToLeft)

        self._stack = QStackedWidget()
        self._start_screen = self._build_start_screen()
        self._game_screen = self._build_game_screen()
        self._game_over_screen = self._build_game_over_screen()
        for screen in (self._start_screen, self._game_screen, self._game_over_screen):
            self._stack.addWidget(screen)
        self.setCentralWidget(self._stack)

    def _build_start_screen(self) -> QWidget:
        screen = GameBackground()
        layout = QVBoxLayout(screen)
        layout.setContentsMargins(40, 40, 40, 40)
        layout.setSpacing(20)

        title = _big_value("מי אני?", size=44, color=GameColors.PRIMARY_DARK)
        title.setAlignment(Qt.AlignCenter)
        subtitle = _muted_label("נחשו את שם הדמות לפי הרמזים. כל רמז נוסף שווה פחות נקודות.", size=16)
        subtitle.setAlignment(Qt.AlignCenter)
        subtitle.setWordWrap(True)

        card = GlassCard()
        card_layout = QVBoxLayout(card)
        card_layout.setContentsMargins(24, 20, 24, 20)
        card_layout.addWidget(_big_value("טבלת השיאים", size=20))
        self._leaderboard_layout = QVBoxLayout()
        self._leaderboard_layout.setSpacing(6)
        card_layout.addLayout(self._leaderboard_layout)

        self._start_status_label = _muted_label()
        self._start_status_label.setAlignment(Qt.AlignCenter)

        start_button = QPushButton("התחל משחק")
        start_button.setStyleSheet(_primary_button_style())
        start_button.clicked.connect(self._start_game)

        layout.addStretch(1)
        layout.addWidget(title)
        layout.addWidget(subtitle)
        layout.addWidget(card)
        layout.addWidget(self._start_status_label)
        layout.addWidget(start_button, alignment=Qt.AlignCenter)
        layout.addStretch(1)
        return screen

    def _build_game_screen(self) -> QWidget:
        screen = GameBackground()
        layout = QVBoxLayout(screen)
        layout.setContentsMargins(32, 24, 32, 24)
        layout.setSpacing(18)

        hud = QHBoxLayout()
        self._score_label = _big_value("0", size=28)
        self._level_label = _muted_label()
        self._timer_label = _big_value(format_clock(self._session.settings.duration_seconds), size=28)
        hud.addWidget(_muted_label("ניקוד:"))
        hud.addWidget(self._score_label)
        hud.addStretch(1)
        hud.addWidget(self._level_label)
        hud.addStretch(1)
        hud.addWidget(self._timer_label)

        self._clue_card = ClueCard()
        self._slots_widget = AnswerSlotsWidget()

        # Receives real keyboard input; kept out of sight like a native hidden field.
        self.input_box = QLineEdit()
        self.input_box.setFixedHeight(0)
        self.input_box.setStyleSheet("background: transparent; border: none; color: transparent;")
        self.input_box.textChanged.connect(self._on_native_input)

        self._next_clue_button = QPushButton(NEXT_CLUE_TEXT)
        self._next_clue_button.setStyleSheet(_primary_button_style())
        self._next_clue_button.setFocusPolicy(Qt.NoFocus)
        self._next_clue_button.clicked.connect(self._on_next_clue_clicked)

        keyboard = HebrewKeyboardWidget(on_letter=self._on_key_tapped, on_backspace=self._on_backspace_tapped)

        layout.addLayout(hud)
        layout.addWidget(self._clue_card)
        layout.addWidget(self._slots_widget)
        layout.addWidget(self.input_box)
        layout.addWidget(self._next_clue_button, alignment=Qt.AlignCenter)
        layout.addStretch(1)
        layout.addWidget(keyboard)
        return screen

    def _build_game_over_screen(self) -> QWidget:
        screen = GameBackground()
        layout = QVBoxLayout(screen)
        layout.setContentsMargins(40, 40, 40, 40)
        layout.setSpacing(18)

        self._final_message_label = _big_value(size=30, color=GameColors.PRIMARY_DARK)
        self._final_message_label.setAlignment(Qt.AlignCenter)
        self._final_score_label = _big_value(size=56)
        self._final_score_label.setAlignment(Qt.AlignCenter)

        self._high_score_form = GlassCard()
        form_layout = QHBoxLayout(self._high_score_form)
        form_layout.setContentsMargins(20, 16, 20, 16)
        self._player_name_input = QLineEdit()
        self._player_name_input.setPlaceholderText("השם שלך")
        self._player_name_input.setMaxLength(24)
        self._player_name_input.returnPressed.connect(self._submit_high_score)
        self._save_button = QPushButton("שמור תוצאה")
        self._save_button.setStyleSheet(_primary_button_style())
        self._save_button.clicked.connect(self._submit_high_score)
        form_layout.addWidget(self._player_name_input, 1)
        form_layout.addWidget(self._save_button)

        self._save_feedback_label = _muted_label()
        self._save_feedback_label.setAlignment(Qt.AlignCenter)

        restart_button = QPushButton("חזרה למסך הראשי")
        restart_button.setStyleSheet(_primary_button_style())
        restart_button.clicked.connect(self._show_start_screen)

        layout.addStretch(1)
        layout.addWidget(self._final_message_label)
        layout.addWidget(_muted_label("הניקוד שלך:", size=18), alignment=Qt.AlignCenter)
        layout.addWidget(self._final_score_label)
        layout.addWidget(self._high_score_form)
        layout.addWidget(self._save_feedback_label)
        layout.addWidget(restart_button, alignment=Qt.AlignCenter)
        layout.addStretch(1)
        return screen

    # -- navigation -------------------------------------------------------------

    def _show_start_screen(self) -> None:
        if self._stack is None or self._start_screen is None:
            return
        self._refresh_leaderboard()
        self._stack.setCurrentWidget(self._start_screen)

    def _show_game_screen(self) -> None:
        if self._stack is None or self._game_screen is None:
            return
        self._stack.setCurrentWidget(self._game_screen)
        QTimer.singleShot(100, self._focus_input)

    def _show_game_over_screen(self, result: GameResult) -> None:
        if self._stack is None or self._game_over_screen is None:
            return
        self._final_message_label.setText(result.message)
        self._final_score_label.setText(str(result.score))
        self._save_feedback_label.setText("")
        self._save_button.setEnabled(True)
        self._player_name_input.clear()
        self._high_score_form.setVisible(result.eligible_for_leaderboard)
        self._stack.setCurrentWidget(self._game_over_screen)
        if result.eligible_for_leaderboard:
            QTimer.singleShot(500, self._player_name_input.setFocus)

    def _focus_input(self) -> None:
        if self.input_box is not None and self._session.active:
            self.input_box.setFocus()

    # -- leaderboard ------------------------------------------------------------

    def _refresh_leaderboard(self) -> None:
        if self._leaderboard_layout is None:
            return
        self._leaderboard_request += 1
        request = self._leaderboard_request
        self._clear_leaderboard()
        self._leaderboard_layout.addWidget(_muted_label(LOADING_TEXT))
        self.leaderboard_loader.fetch_top(
            self._leaderboard_size,
            lambda rows: self._on_leaderboard_loaded(request, rows),
        )

    def _clear_leaderboard(self) -> None:
        while self._leaderboard_layout.count():
            item = self._leaderboard_layout.takeAt(0)
            if item.widget() is not None:
                item.widget().deleteLater()

    def _on_leaderboard_loaded(self, request: int, rows: List[LeaderboardRow]) -> None:
        # a newer refresh owns the list
        if request != self._leaderboard_request:
            return
        self._clear_leaderboard()
        if not rows:
            self._leaderboard_layout.addWidget(_muted_label(NO_SCORES_TEXT))
            return
        for row in rows:
            line = QHBoxLayout()
            line.addWidget(_muted_label(f"#{row.rank} {row.name}", size=16))
            line.addStretch(1)
            line.addWidget(_big_value(str(row.score), size=16))
            holder = QWidget()
            holder.setLayout(line)
            self._leaderboard_layout.addWidget(holder)

    def _submit_high_score(self) -> None:
        if self._last_result is None or not self._last_result.eligible_for_leaderboard:
            return
        name = self._player_name_input.text()
        if not name.strip() or not self._save_button.isEnabled():
            return
        self._save_button.setEnabled(False)
        self._save_feedback_label.setText(SAVING_TEXT)
        self.leaderboard_loader.submit(name, self._last_result.score, self._on_score_submitted)

    def _on_score_submitted(self, result: Optional[SubmitResult]) -> None:
        self._save_button.setEnabled(True)
        if self._stack.currentWidget() is not self._game_over_screen:
            return
        if result is None:
            self._save_feedback_label.setText(FAILED_MESSAGE)
            return
        if not result.saved and self.leaderboard_loader.has_backend:
            self._save_feedback_label.setText(result.message)
            return
        self._last_result = None
        self._start_status_label.setText(result.message)
        self._show_start_screen()

    # -- game actions -----------------------------------------------------------

    def _start_game(self) -> None:
        self._start_status_label.setText("")
        self._round_solved = False
        self._show_game_screen()
        self._session.start(self._personalities.all())

    def _on_native_input(self, text: str) -> None:
        if self._input_sync_block:
            return
        self._session.set_letters(text)
        # overflow and separators never reach the slots; drop them from the field too
        current = self._session.current_round
        if current is not None and current.buffer.compact_view() != text:
            self._sync_input_box()

    def _on_key_tapped(self, letter: str) -> None:
        self._session.type_character(letter)
        self._sync_input_box()

    def _on_backspace_tapped(self) -> None:
        self._session.backspace()
        self._sync_input_box()

    def _on_next_clue_clicked(self) -> None:
        if self._session.snapshot().final_stage:
            self._session.give_up()
        else:
            self._session.request_next_clue()
        self._focus_input()

    def _sync_input_box(self) -> None:
        """Mirror the letters in the slots into the line edit without re-feeding them."""
        current = self._session.current_round
        text = current.buffer.compact_view() if current is not None else ""
        self._set_input_text(text)

    def _set_input_text(self, text: str) -> None:
        if self.input_box is None:
            return
        self._input_sync_block = True
        try:
            self.input_box.setText(text)
            self.input_box.setCursorPosition(len(text))
        finally:
            self._input_sync_block = False

    # -- session events ---------------------------------------------------------

    def _on_session_event(self, event: SessionEvent) -> None:
        handlers: dict[EventKind, Callable[[SessionEvent], None]] = {
            EventKind.ROUND_LOADED: self._on_round_loaded,
            EventKind.CLUE_REVEALED: self._render_clue,
            EventKind.INPUT_CHANGED: self._render_slots,
            EventKind.INCORRECT: self._on_incorrect,
            EventKind.ROUND_SOLVED: self._on_round_solved,
            EventKind.ROUND_GAVE_UP: self._on_round_gave_up,
            EventKind.TICK: self._render_hud,
            EventKind.STARTED: self._render_hud,
            EventKind.ENDED: self._on_session_ended,
        }
        handler = handlers.get(event.kind)
        if handler is not None:
            handler(event)

    def _render_hud(self, event: SessionEvent) -> None:
        snap = event.snapshot
        self._timer_label.setText(format_clock(snap.remaining_seconds))
        self._score_label.setText(str(snap.score))
        if snap.total_levels:
            self._level_label.setText(f"דמות {min(snap.level_index + 1, snap.total_levels)} מתוך {snap.total_levels}")

    def _render_clue(self, event: SessionEvent) -> None:
        snap = event.snapshot
        self._clue_card.set_clue(snap.clue_index, snap.clue_text, snap.clue_points)
        self._next_clue_button.setText(SKIP_TEXT if snap.final_stage else NEXT_CLUE_TEXT)
        self._next_clue_button.setEnabled(snap.active)

    def _render_slots(self, event: SessionEvent) -> None:
        self._slots_widget.set_slots(build_slot_views(event.snapshot, solved=self._round_solved))

    def _on_round_loaded(self, event: SessionEvent) -> None:
        self._round_solved = False
        self._set_input_text("")
        self._render_hud(event)
        self._render_clue(event)
        self._render_slots(event)
        QTimer.singleShot(50, self._focus_input)

    def _on_incorrect(self, event: SessionEvent) -> None:
        self._render_slots(event)
        self._slots_widget.flash_error()

    def _on_round_solved(self, event: SessionEvent) -> None:
        self._round_solved = True
        self._render_hud(event)
        self._render_slots(event)
        self._next_clue_button.setEnabled(False)

    def _on_round_gave_up(self, event: SessionEvent) -> None:
        self._render_slots(event)
        self._next_clue_button.setEnabled(False)

    def _on_session_ended(self, event: SessionEvent) -> None:
        if event.result is None:
            return
        self._last_result = event.result
        self.input_box.clearFocus()
        self._show_game_over_screen(event.result)

    def closeEvent(self, event: QCloseEvent) -> None:
        self._session.end(completed_all=False)
        super().closeEvent(event)
