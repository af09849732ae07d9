from __future__ import annotations

import json
from pathlib import Path

from image_cutter.main_window import MainWindow
from image_cutter.settings import OutputSettings


def test_window_applies_settings(qtbot) -> None:
    window = MainWindow(OutputSettings(output_width=64, output_height=32, pixelated=True))
    qtbot.addWidget(window)
    editor = window._cutter.editor
    assert editor.output_size == (64, 32)
    assert editor.pixelated is True
    assert not window._act_export.isEnabled()


def test_output_controls_update_editor(qtbot) -> None:
    window = MainWindow(OutputSettings())
    qtbot.addWidget(window)
    window._out_width.setValue(256)
    assert window._cutter.editor.output_size == (256, 128)
    window._pixelated.setChecked(True)
    assert window._cutter.pixelated is True


def test_open_path_loads_image(qtbot, tmp_path: Path) -> None:
    from PIL import Image

    path = tmp_path / "pic.png"
    Image.new("RGB", (64, 48)).save(path)
    window = MainWindow(OutputSettings())
    qtbot.addWidget(window)
    with qtbot.waitSignal(window._cutter.selection_changed, timeout=5000):
        window.open_path(path)
    assert window._act_export.isEnabled()
    assert "48 × 48" in window._selection_label.text()
    window._cutter._loader.wait(2000)


def test_close_persists_settings(qtbot, config_home: Path) -> None:
    window = MainWindow(OutputSettings())
    qtbot.addWidget(window)
    window.show()
    window._out_height.setValue(72)
    window.close()
    raw = json.loads((config_home / "settings.json").read_text(encoding="utf-8"))
    assert raw["settings"]["output_height"] == 72
