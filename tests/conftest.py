"""Pytest configuration.

Widget tests use PyQt6 through pytest-qt.  Tests run headless on the
offscreen platform unless QT_QPA_PLATFORM is already set, and a single
``QApplication`` is created for the whole session as early as possible.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

_APP: Any | None = None


def pytest_configure(config) -> None:  # noqa: ARG001
    """Ensure a QApplication exists before collecting/running tests."""
    try:
        from PyQt6.QtWidgets import QApplication
    except ImportError:
        return

    global _APP

    app = QApplication.instance()
    if app is None:
        # Keep a strong ref so it isn't GC'd mid-session.
        _APP = QApplication([])
    else:
        _APP = app


@pytest.fixture
def config_home(tmp_path: Path, monkeypatch) -> Path:
    """Redirect the settings file into a temporary directory."""
    monkeypatch.setattr("image_cutter.settings.config_dir", lambda: tmp_path)
    return tmp_path
