"""
Main application window.

Hosts the crop editor, the output settings panel and the export actions.
Output settings are loaded from and saved to ``settings.json``.
"""

import logging
from pathlib import Path

from PyQt6.QtWidgets import (
    QMainWindow, QWidget, QVBoxLayout, QHBoxLayout, QLabel, QFileDialog,
    QGroupBox, QMessageBox, QStatusBar, QToolBar, QCheckBox, QComboBox,
    QSpinBox, QSlider, QApplication,
)
from PyQt6.QtCore import Qt
from PyQt6.QtGui import QAction, QKeySequence

from image_cutter.config import (
    FORMAT_SUFFIXES, IMAGE_EXTENSIONS, JPEG_QUALITY_MAX, JPEG_QUALITY_MIN, OUTPUT_FORMATS,
)
from image_cutter.crop_widget import ImageCutterWidget, is_supported_image
from image_cutter.image_io import save_image
from image_cutter.models import CropRect
from image_cutter.settings import OutputSettings, load_settings, save_settings

logger = logging.getLogger(__name__)

# Largest output edge offered in the size spin boxes
_MAX_OUTPUT_SIZE = 16384


class MainWindow(QMainWindow):
    def __init__(self, settings: OutputSettings | None = None):
        super().__init__()
        self.setWindowTitle("Image Cutter")
        self.setMinimumSize(800, 500)
        self.resize(1100, 700)

        self._settings = settings if settings is not None else load_settings()
        self._source_path: Path | None = None

        self._build_ui()
        self._apply_settings_to_editor()
        self._update_button_states()

    # =========================================================================
    # UI construction
    # =========================================================================

    def _build_ui(self):
        self._build_toolbar()

        central = QWidget()
        self.setCentralWidget(central)
        main_layout = QHBoxLayout(central)
        main_layout.setContentsMargins(4, 4, 4, 4)

        self._cutter = ImageCutterWidget(
            output_width=self._settings.output_width,
            output_height=self._settings.output_height,
            pixelated=self._settings.pixelated,
        )
        self._cutter.selection_changed.connect(self._on_selection_changed)
        self._cutter.file_dropped.connect(self._on_file_dropped)
        self._cutter.load_failed.connect(self._on_load_failed)
        main_layout.addWidget(self._cutter, stretch=1)

        self._right_panel = self._build_right_panel()
        main_layout.addWidget(self._right_panel)
        # Dropping onto the settings panel opens the image as well
        self._cutter.add_drop_target(self._right_panel)

        self._status = QStatusBar()
        self.setStatusBar(self._status)
        self._status.showMessage("Open or drop an image to begin.")

    def _build_toolbar(self):
        toolbar = QToolBar("Main")
        toolbar.setMovable(False)
        self.addToolBar(toolbar)

        act_open = QAction("📂 Open Image", self)
        act_open.setShortcut(QKeySequence.StandardKey.Open)
        act_open.triggered.connect(self._open_image)
        toolbar.addAction(act_open)

        toolbar.addSeparator()

        act_reset = QAction("🎯 Reset Selection", self)
        act_reset.setToolTip("Reset selection to maximum size, centered (R)")
        act_reset.triggered.connect(self._reset_selection)
        toolbar.addAction(act_reset)
        self._act_reset = act_reset

        act_export = QAction("💾 Export…", self)
        act_export.setShortcut(QKeySequence.StandardKey.Save)
        act_export.triggered.connect(self._export)
        toolbar.addAction(act_export)
        self._act_export = act_export

        act_copy = QAction("📋 Copy Data URL", self)
        act_copy.setToolTip("Copy the exported image to the clipboard as a data: URL")
        act_copy.triggered.connect(self._copy_data_url)
        toolbar.addAction(act_copy)
        self._act_copy = act_copy

    def _build_right_panel(self) -> QWidget:
        panel = QWidget()
        panel.setFixedWidth(240)
        layout = QVBoxLayout(panel)
        layout.setContentsMargins(4, 0, 0, 0)

        layout.addWidget(self._build_output_group())

        self._selection_label = QLabel("Selection: —")
        self._selection_label.setWordWrap(True)
        layout.addWidget(self._selection_label)

        help_label = QLabel(
            "Drag corners/edges: resize\n"
            "Drag inside: move\n"
            "Arrow keys: nudge (1px)\n"
            "Shift+Arrow: nudge (10px)\n"
            "R: reset selection"
        )
        help_label.setStyleSheet("color: #888; font-size: 8pt;")
        layout.addWidget(help_label)

        layout.addStretch()
        return panel

    def _build_output_group(self) -> QGroupBox:
        group = QGroupBox("Output")
        layout = QVBoxLayout(group)

        size_row = QHBoxLayout()
        self._out_width = QSpinBox()
        self._out_width.setRange(1, _MAX_OUTPUT_SIZE)
        self._out_width.setValue(self._settings.output_width)
        self._out_width.setSuffix(" px")
        size_row.addWidget(self._out_width)
        size_row.addWidget(QLabel("×"))
        self._out_height = QSpinBox()
        self._out_height.setRange(1, _MAX_OUTPUT_SIZE)
        self._out_height.setValue(self._settings.output_height)
        self._out_height.setSuffix(" px")
        size_row.addWidget(self._out_height)
        layout.addLayout(size_row)
        self._out_width.valueChanged.connect(self._on_output_size_changed)
        self._out_height.valueChanged.connect(self._on_output_size_changed)

        self._pixelated = QCheckBox("Pixelated (no smoothing)")
        self._pixelated.setChecked(self._settings.pixelated)
        self._pixelated.toggled.connect(self._on_pixelated_changed)
        layout.addWidget(self._pixelated)

        fmt_row = QHBoxLayout()
        fmt_row.addWidget(QLabel("Format:"))
        self._export_format = QComboBox()
        self._export_format.addItems(OUTPUT_FORMATS)
        self._export_format.setCurrentText(self._settings.format)
        self._export_format.currentTextChanged.connect(self._on_export_format_changed)
        fmt_row.addWidget(self._export_format)
        layout.addLayout(fmt_row)

        quality_row = QHBoxLayout()
        self._jpeg_quality_caption = QLabel("Quality:")
        quality_row.addWidget(self._jpeg_quality_caption)
        self._jpeg_quality_slider = QSlider(Qt.Orientation.Horizontal)
        self._jpeg_quality_slider.setRange(JPEG_QUALITY_MIN, JPEG_QUALITY_MAX)
        self._jpeg_quality_slider.setValue(self._settings.jpeg_quality)
        quality_row.addWidget(self._jpeg_quality_slider, stretch=1)
        self._jpeg_quality_label = QLabel(str(self._settings.jpeg_quality))
        self._jpeg_quality_label.setFixedWidth(24)
        quality_row.addWidget(self._jpeg_quality_label)
        self._jpeg_quality_slider.valueChanged.connect(self._on_jpeg_quality_changed)
        layout.addLayout(quality_row)

        # Hide JPEG controls when PNG is selected
        self._on_export_format_changed(self._export_format.currentText())

        return group

    # =========================================================================
    # Settings
    # =========================================================================

    def _apply_settings_to_editor(self):
        self._cutter.set_output_size(self._settings.output_width, self._settings.output_height)
        self._cutter.pixelated = self._settings.pixelated

    def _on_output_size_changed(self, *args):
        self._settings.output_width = self._out_width.value()
        self._settings.output_height = self._out_height.value()
        self._cutter.set_output_size(self._settings.output_width, self._settings.output_height)
        self._cutter.update()

    def _on_pixelated_changed(self, checked: bool):
        self._settings.pixelated = checked
        self._cutter.pixelated = checked
        self._cutter.update()

    def _on_export_format_changed(self, fmt: str):
        """Show/hide JPEG-specific controls based on selected format."""
        self._settings.format = fmt
        is_jpeg = fmt == "JPEG"
        for w in (self._jpeg_quality_caption, self._jpeg_quality_slider, self._jpeg_quality_label):
            w.setVisible(is_jpeg)

    def _on_jpeg_quality_changed(self, value: int):
        self._settings.jpeg_quality = value
        self._jpeg_quality_label.setText(str(value))

    # =========================================================================
    # Image loading
    # =========================================================================

    def _open_image(self):
        patterns = " ".join(f"*{ext}" for ext in sorted(IMAGE_EXTENSIONS))
        start = str(self._source_path.parent) if self._source_path else str(Path.home())
        path, _ = QFileDialog.getOpenFileName(self, "Open Image", start, f"Images ({patterns})")
        if not path:
            return
        self.open_path(Path(path))

    def open_path(self, path: Path):
        if not is_supported_image(path):
            self._status.showMessage(f"Unsupported file type: {path.name}")
            return
        self._source_path = path
        self._status.showMessage(f"Loading {path.name}…")
        self._cutter.load_file(path)

    def _on_file_dropped(self, image, path: Path):
        self._source_path = path
        self._status.showMessage(f"Dropped: {path.name} ({image.width} × {image.height})")

    def _on_load_failed(self, error: str):
        self._status.showMessage(f"Failed to load image: {error}")
        self._update_button_states()

    # =========================================================================
    # Selection
    # =========================================================================

    def _on_selection_changed(self, rect: CropRect):
        self._selection_label.setText(
            f"Selection: {rect.width} × {rect.height}\n"
            f"at ({rect.left}, {rect.top})"
        )
        self._update_button_states()

    def _reset_selection(self):
        self._cutter.reset()

    def _update_button_states(self):
        has_image = self._cutter.has_image()
        self._act_reset.setEnabled(has_image)
        self._act_export.setEnabled(has_image)
        self._act_copy.setEnabled(has_image)

    # =========================================================================
    # Export
    # =========================================================================

    def _default_export_path(self) -> Path:
        fmt = self._settings.format
        w, h = self._settings.output_width, self._settings.output_height
        stem = self._source_path.stem if self._source_path else "cut"
        folder = self._source_path.parent if self._source_path else Path.home()
        return folder / f"{stem}_{w}x{h}{FORMAT_SUFFIXES[fmt]}"

    def _export(self):
        image = self._cutter.extract()
        if image is None:
            return
        fmt = self._settings.format
        path, _ = QFileDialog.getSaveFileName(
            self, "Export Image", str(self._default_export_path()),
            f"{fmt} (*{FORMAT_SUFFIXES[fmt]})",
        )
        if not path:
            return
        try:
            out_path = save_image(image, Path(path), fmt, quality=self._settings.jpeg_quality)
        except (OSError, ValueError) as exc:
            QMessageBox.critical(self, "Export Failed", f"Could not export image:\n{exc}")
            return
        self._status.showMessage(f"Exported: {out_path}")

    def _copy_data_url(self):
        url = self._cutter.to_data_url(self._settings.format, self._settings.jpeg_quality)
        if url is None:
            return
        QApplication.clipboard().setText(url)
        self._status.showMessage(f"Copied data URL ({len(url)} characters)")

    # =========================================================================
    # Shutdown
    # =========================================================================

    def closeEvent(self, event):
        """Persist output settings before closing."""
        try:
            save_settings(self._settings)
        except (OSError, ValueError) as exc:
            logger.error("Could not save settings: %s", exc)
        super().closeEvent(event)
