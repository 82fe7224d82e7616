"""Application entry point and setup for Pulse Arcade."""

import logging
import sys

from PySide6.QtGui import QFont, QGuiApplication
from PySide6.QtWidgets import QApplication

from pulsearcade.core.ledger import ProgressLedger
from pulsearcade.core.storage import JsonFileStore
from pulsearcade.core.tuning import default_tuning
from pulsearcade.ui.main_window import MainWindow


def configure_logging() -> None:
    """Configure application-wide logging with a standard format."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def flush_progress(ledger: ProgressLedger) -> None:
    """Last write of progress before the event loop ends."""
    if ledger.flush():
        logging.info("Progress saved")
    else:
        logging.warning("Progress could not be fully saved")


def run() -> None:
    """Initialize the application, load progress, and start the main window."""
    configure_logging()
    app = QApplication(sys.argv)
    app.setApplicationName("Pulse Arcade")
    app.setApplicationDisplayName("Pulse Arcade")

    app_font = QFont()
    app_font.setPointSize(11)
    QGuiApplication.setFont(app_font)

    # Fail fast on a broken tuning file rather than on the first game.
    default_tuning()

    store = JsonFileStore()
    ledger = ProgressLedger(store)
    logging.info("Loaded progress from %s", store.root)
    app.aboutToQuit.connect(lambda: flush_progress(ledger))

    window = MainWindow(ledger=ledger)
    screen = QGuiApplication.primaryScreen()
    if screen is not None:
        geometry = screen.availableGeometry()
        window.resize(min(1200, geometry.width()), min(800, geometry.height()))
    window.show()

    sys.exit(app.exec())


if __name__ == "__main__":
    run()
