"""Application entry point and setup for the Nihush quiz."""

import logging
import sys

from PySide6.QtCore import Qt
from PySide6.QtGui import QFont
from PySide6.QtWidgets import QApplication

from nihush.core.leaderboard import build_leaderboard_service
from nihush.core.personalities import PersonalityRepository
from nihush.core.session import GameSession
from nihush.core.settings import load_settings
from nihush.ui.main_window import MainWindow
from nihush.ui.qt_scheduler import QtScheduler


def configure_logging() -> None:
    """Configure application-wide logging with a standard format."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def run() -> None:
    """Load settings and data, then show the main window."""
    configure_logging()
    app = QApplication(sys.argv)
    app.setApplicationName("Nihush")
    app.setApplicationDisplayName("מי אני?")
    app.setLayoutDirection(Qt.RightToLeft)

    app_font = QFont()
    app_font.setPointSize(12)
    app.setFont(app_font)

    settings = load_settings()
    personalities = PersonalityRepository()
    logging.info("Loaded %d personalities from %s", len(personalities), personalities.path)
    leaderboard = build_leaderboard_service(settings)

    session = GameSession(QtScheduler(app), settings=settings)
    window = MainWindow(
        personalities=personalities,
        leaderboard=leaderboard,
        session=session,
        leaderboard_size=settings.leaderboard_size,
    )
    window.show()

    sys.exit(app.exec())


if __name__ == "__main__":
    run()
