"""
Application entry point, logging setup and dark-theme stylesheet.

Usage:
    python -m image_cutter [IMAGE]
    image-cutter [IMAGE]          (after pip install)

Set ``IMAGE_CUTTER_LOG_LEVEL`` (debug, info, warning, error) to change
the log verbosity.
"""

import logging
import os
import sys
from pathlib import Path

from PyQt6.QtWidgets import QApplication

from image_cutter.main_window import MainWindow

DARK_STYLESHEET = """
    QMainWindow, QWidget { background: #262626; color: #e0e0e0; font-size: 10pt; }
    QGroupBox { border: 1px solid #4a4a4a; border-radius: 3px; margin-top: 10px; padding-top: 10px; }
    QGroupBox::title { subcontrol-origin: margin; left: 6px; padding: 0 3px; color: #bbb; }
    QToolBar { background: #303030; border: none; spacing: 6px; padding: 3px; }
    QToolButton { padding: 4px 8px; border-radius: 3px; }
    QToolButton:hover { background: #404040; }
    QToolButton:disabled { color: #666; }
    QSpinBox, QComboBox { background: #333; border: 1px solid #4a4a4a; border-radius: 3px; padding: 2px 4px; }
    QSlider::groove:horizontal { height: 4px; background: #444; }
    QSlider::handle:horizontal { width: 12px; margin: -5px 0; background: #2a82da; border-radius: 6px; }
    QStatusBar { background: #303030; color: #aaa; }
"""

_LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def setup_logging() -> None:
    """Send package logs to stderr at the level named by IMAGE_CUTTER_LOG_LEVEL."""
    env_level = (os.getenv("IMAGE_CUTTER_LOG_LEVEL") or "").strip().lower()
    logging.basicConfig(
        level=_LOG_LEVELS.get(env_level, logging.INFO),
        format="[%(asctime)s] %(levelname)s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def main():
    setup_logging()

    app = QApplication(sys.argv)
    app.setStyleSheet(DARK_STYLESHEET)

    window = MainWindow()
    window.show()

    args = app.arguments()[1:]
    if args:
        window.open_path(Path(args[0]))

    try:
        sys.exit(app.exec())
    except (SystemExit, KeyboardInterrupt):
        pass


if __name__ == "__main__":
    main()
