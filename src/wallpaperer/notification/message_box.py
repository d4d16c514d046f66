"""MessageBoxNotifier - Dialog based notifications for the drag-and-drop launcher."""

from __future__ import annotations

import sys

from PyQt6.QtWidgets import QApplication, QMessageBox

from wallpaperer.logging import get_logger

logger = get_logger("wallpaperer")

WINDOW_TITLE = "Wallpaperer"


class MessageBoxNotifier:
    """
    Shows each message in a modal information dialog.

    Used when the program is launched by dropping files onto it, where there
    is no console to read.
    """

    def __init__(self, app: QApplication | None = None) -> None:
        self._app = app

    def _ensure_app(self) -> QApplication:
        if self._app is None:
            # QMessageBox needs a running QApplication; reuse one if present.
            self._app = QApplication.instance() or QApplication(sys.argv)  # type: ignore[assignment]
        return self._app  # type: ignore[return-value]

    def notify(self, message: str) -> None:
        self._ensure_app()
        logger.info("Notifying user: %s", message)
        QMessageBox.information(None, WINDOW_TITLE, message)
