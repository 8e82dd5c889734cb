"""Game screen widgets: background, glass card, answer slots, clue card."""

from __future__ import annotations

from typing import List, Optional

from PySide6.QtCore import Qt, QPoint, QTimer
from PySide6.QtGui import QColor, QLinearGradient, QPainter, QPen, QRadialGradient
from PySide6.QtWidgets import QFrame, QGraphicsDropShadowEffect, QLabel, QVBoxLayout, QWidget

from nihush.ui.colors import GameColors, blend_hex
from nihush.ui.models import SlotLook, SlotView


class GameBackground(QWidget):
    """Gradient background with a few soft glows and faint Hebrew letters."""

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.setAttribute(Qt.WidgetAttribute.WA_StyledBackground, True)

    def paintEvent(self, event) -> None:
        painter = QPainter(self)
        painter.setRenderHint(QPainter.Antialiasing, True)

        gradient = QLinearGradient(0, 0, self.width(), self.height())
        gradient.setColorAt(0.0, QColor(GameColors.BG_TOP))
        gradient.setColorAt(0.5, QColor(GameColors.BG_MIDDLE))
        gradient.setColorAt(1.0, QColor(GameColors.BG_BOTTOM))
        painter.fillRect(self.rect(), gradient)

        painter.setPen(Qt.NoPen)
        for x_ratio, y_ratio, radius in ((0.85, 0.15, 220), (0.12, 0.82, 170), (0.7, 0.62, 70)):
            radial = QRadialGradient(self.width() * x_ratio, self.height() * y_ratio, radius)
            radial.setColorAt(0, QColor(255, 255, 255, 60))
            radial.setColorAt(1, QColor(255, 255, 255, 0))
            painter.setBrush(radial)
            painter.drawEllipse(QPoint(int(self.width() * x_ratio), int(self.height() * y_ratio)), radius, radius)

        painter.setOpacity(0.06)
        font = painter.font()
        font.setPointSize(90)
        font.setBold(True)
        painter.setFont(font)
        painter.setPen(QColor(GameColors.PRIMARY_DARK))
        for letter, x, y in (("א", 0.08, 0.22), ("ב", 0.86, 0.35), ("ש", 0.14, 0.78), ("ת", 0.78, 0.83)):
            painter.drawText(int(self.width() * x), int(self.height() * y), letter)


class GlassCard(QFrame):
    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.setObjectName("glassCard")
        self.setStyleSheet(
            f"""
            QFrame#glassCard {{
                background: {GameColors.CARD_BG};
                border: 1px solid {GameColors.CARD_BORDER};
                border-radius: 20px;
            }}
            """
        )
        shadow = QGraphicsDropShadowEffect(self)
        shadow.setBlurRadius(30)
        shadow.setOffset(0, 8)
        shadow.setColor(QColor(0, 50, 70, 40))
        self.setGraphicsEffect(shadow)


class AnswerSlotsWidget(QWidget):
    """Row of boxes for the answer, painted right to left.

    Separators are drawn as a gap (space) or a dash (hyphen) and are never
    highlighted. A short red border flash marks a full but wrong answer.
    """

    _ERROR_STEPS = 10

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self._views: List[SlotView] = []
        self._error_level: float = 0.0
        self._error_timer = QTimer(self)
        self._error_timer.setInterval(50)
        self._error_timer.timeout.connect(self._fade_error)
        self.setFixedHeight(72)
        self.setMinimumWidth(240)

    def set_slots(self, views: List[SlotView]) -> None:
        self._views = list(views)
        self.update()

    def flash_error(self) -> None:
        self._error_level = 1.0
        self._error_timer.start()
        self.update()

    def _fade_error(self) -> None:
        self._error_level = max(0.0, self._error_level - 1.0 / self._ERROR_STEPS)
        if self._error_level <= 0.0:
            self._error_timer.stop()
        self.update()

    def _colors_for(self, look: SlotLook) -> tuple[str, str, str]:
        """Return (fill, border, text) for a slot look."""
        if look is SlotLook.SOLVED:
            return GameColors.SLOT_SOLVED, GameColors.SLOT_SOLVED_BORDER, "#ffffff"
        if look is SlotLook.REVEALED:
            return GameColors.SLOT_REVEALED, GameColors.SLOT_REVEALED_BORDER, "#ffffff"
        border = blend_hex(GameColors.SLOT_BORDER, GameColors.SLOT_ERROR_BORDER, self._error_level)
        if look is SlotLook.FOCUS:
            return GameColors.SLOT_FOCUS, blend_hex(GameColors.PRIMARY, border, self._error_level), GameColors.PRIMARY
        if look is SlotLook.FILLED:
            return GameColors.SLOT_EMPTY, blend_hex(GameColors.PRIMARY_LIGHT, border, self._error_level), GameColors.TEXT_PRIMARY
        return GameColors.SLOT_EMPTY, border, GameColors.TEXT_MUTED

    def paintEvent(self, event) -> None:
        super().paintEvent(event)
        if not self._views:
            return
        painter = QPainter(self)
        painter.setRenderHint(QPainter.Antialiasing, True)

        box_size = 44
        spacing = 8
        sep_width = 22
        radius = 10

        widths = [sep_width if v.look is SlotLook.SEPARATOR else box_size for v in self._views]
        total_width = sum(widths) + spacing * (len(widths) - 1)
        scale = min(1.0, self.width() / total_width) if total_width else 1.0
        box_size = int(box_size * scale)
        spacing = max(2, int(spacing * scale))
        widths = [max(4, int(w * scale)) for w in widths]
        total_width = sum(widths) + spacing * (len(widths) - 1)

        # Hebrew reads right to left: the first slot sits at the right edge.
        x = (self.width() + total_width) // 2
        y = (self.height() - box_size) // 2
        for view, width in zip(self._views, widths):
            x -= width
            if view.look is SlotLook.SEPARATOR:
                if view.text:
                    painter.setPen(QColor(GameColors.TEXT_SECONDARY))
                    painter.drawText(x, y, width, box_size, Qt.AlignCenter, view.text)
            else:
                fill, border, text_color = self._colors_for(view.look)
                painter.setBrush(QColor(fill))
                painter.setPen(QPen(QColor(border), 2))
                painter.drawRoundedRect(x, y, width, box_size, radius, radius)
                if view.text:
                    painter.setPen(QColor(text_color))
                    font = painter.font()
                    font.setPointSize(max(9, int(18 * scale)))
                    font.setBold(True)
                    painter.setFont(font)
                    painter.drawText(x, y, width, box_size, Qt.AlignCenter, view.text)
            x -= spacing


class ClueCard(GlassCard):
    """Clue number, clue text and the points it is worth."""

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        layout = QVBoxLayout(self)
        layout.setContentsMargins(24, 18, 24, 18)
        layout.setSpacing(8)

        self._label = QLabel()
        self._label.setStyleSheet(f"color: {GameColors.TEXT_SECONDARY}; font-size: 14px; font-weight: 600;")
        self._text = QLabel()
        self._text.setWordWrap(True)
        self._text.setAlignment(Qt.AlignCenter)
        self._text.setStyleSheet(f"color: {GameColors.TEXT_PRIMARY}; font-size: 22px; font-weight: 700;")
        self._points = QLabel()
        self._points.setStyleSheet(f"color: {GameColors.PRIMARY}; font-size: 14px; font-weight: 700;")

        layout.addWidget(self._label)
        layout.addWidget(self._text)
        layout.addWidget(self._points, alignment=Qt.AlignLeft)

    def set_clue(self, index: int, text: str, points: int) -> None:
        self._label.setText(f"רמז {index + 1}")
        self._text.setText(text)
        self._points.setText(f"{points} נקודות")
