"""
Interactive crop-overlay widget and Qt image helpers.

This module contains everything that touches both Qt **and** image display:
``pil_to_qpixmap``, the background ``ImageLoaderThread``, and the
``ImageCutterWidget`` editor.  All crop geometry lives in the Qt-free
``CropEditor``; the widget only maps widget coordinates to canvas
coordinates, paints, and relays signals.
"""

import logging
from pathlib import Path

from PIL import Image
from PyQt6.QtWidgets import QWidget, QSizePolicy
from PyQt6.QtCore import Qt, QEvent, QObject, QRectF, QPointF, pyqtSignal, QThread
from PyQt6.QtGui import (
    QPainter, QPixmap, QColor, QPen, QBrush, QImage,
    QDragEnterEvent, QDropEvent, QKeyEvent, QMouseEvent, QPaintEvent, QResizeEvent,
)

from image_cutter.config import (
    DEFAULT_OUTPUT_SIZE, DIM_ALPHA, IMAGE_EXTENSIONS, NUDGE_LARGE, NUDGE_SMALL,
)
from image_cutter.editor import CropEditor
from image_cutter.image_io import open_image, to_data_url
from image_cutter.models import CropRect, Handle, Point

logger = logging.getLogger(__name__)

# Half-size of the painted handle squares (pixels in screen coordinates)
_HANDLE_PAINT_SIZE = 4

_HANDLE_CURSORS = {
    Handle.TOP_LEFT: Qt.CursorShape.SizeFDiagCursor,
    Handle.BOTTOM_RIGHT: Qt.CursorShape.SizeFDiagCursor,
    Handle.TOP_RIGHT: Qt.CursorShape.SizeBDiagCursor,
    Handle.BOTTOM_LEFT: Qt.CursorShape.SizeBDiagCursor,
    Handle.TOP: Qt.CursorShape.SizeVerCursor,
    Handle.BOTTOM: Qt.CursorShape.SizeVerCursor,
    Handle.LEFT: Qt.CursorShape.SizeHorCursor,
    Handle.RIGHT: Qt.CursorShape.SizeHorCursor,
    Handle.MOVE: Qt.CursorShape.SizeAllCursor,
}


# =============================================================================
# Qt ↔ PIL helpers
# =============================================================================

def pil_to_qpixmap(pil_img: Image.Image) -> QPixmap:
    """Convert a PIL Image to QPixmap."""
    img_rgb = pil_img.convert("RGBA")
    data = img_rgb.tobytes("raw", "RGBA")
    qimg = QImage(data, img_rgb.width, img_rgb.height, QImage.Format.Format_RGBA8888)
    return QPixmap.fromImage(qimg.copy())


def is_supported_image(path: Path) -> bool:
    return path.suffix.lower() in IMAGE_EXTENSIONS


# =============================================================================
# Background image loader
# =============================================================================

class ImageLoaderThread(QThread):
    """Background thread for decoding images (especially large PSDs)."""
    loaded = pyqtSignal(object, object)  # PIL image, Path
    error = pyqtSignal(str)

    def __init__(self, path: Path, parent=None):
        super().__init__(parent)
        self._path = path

    def run(self):
        try:
            image = open_image(self._path)
            self.loaded.emit(image, self._path)
        except Exception as e:
            logger.error("Failed to load %s: %s", self._path, e)
            self.error.emit(f"{self._path.name}: {e}")


# =============================================================================
# Image Cutter Widget: interactive crop overlay on image
# =============================================================================

class ImageCutterWidget(QWidget):
    """Widget that displays an image with an aspect-locked, draggable crop overlay."""

    selection_changed = pyqtSignal(object)   # CropRect
    file_dropped = pyqtSignal(object, object)  # PIL image, Path
    load_failed = pyqtSignal(str)

    def __init__(
        self,
        parent=None,
        output_width: int = DEFAULT_OUTPUT_SIZE,
        output_height: int = DEFAULT_OUTPUT_SIZE,
        pixelated: bool = False,
    ):
        super().__init__(parent)
        self.setMinimumSize(400, 300)
        self.setFocusPolicy(Qt.FocusPolicy.StrongFocus)
        self.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Expanding)
        self.setMouseTracking(True)
        self.setAcceptDrops(True)

        self._editor = CropEditor(output_width, output_height, pixelated)
        self._source: Image.Image | None = None
        self._pixmap: QPixmap | None = None

        # Display mapping
        self._scale = 1.0
        self._offset_x = 0.0
        self._offset_y = 0.0

        self._loading = False
        self._loader: ImageLoaderThread | None = None
        self._load_is_drop = False
        self._drop_targets: list[QWidget] = []

    # --- Configuration ---

    @property
    def editor(self) -> CropEditor:
        return self._editor

    @property
    def pixelated(self) -> bool:
        return self._editor.pixelated

    @pixelated.setter
    def pixelated(self, value: bool):
        self._editor.pixelated = bool(value)

    def set_output_size(self, width: int, height: int):
        """Change the output size; re-fits the selection to the new ratio."""
        if (width, height) == self._editor.output_size:
            return
        self._editor.set_output_size(width, height)
        if self.has_image():
            self._selection_updated()

    # --- Image ---

    def has_image(self) -> bool:
        """Return True if an image is loaded and ready for crop operations."""
        return self._source is not None

    def source_image(self) -> Image.Image | None:
        return self._source

    def set_loading(self, loading: bool):
        """Show/hide loading indicator."""
        self._loading = loading
        self.update()

    def set_image(self, image: Image.Image):
        """Display *image* and fit the selection to its bounds."""
        self._loading = False
        self._editor.release()
        self._source = image
        self._pixmap = pil_to_qpixmap(image)
        self._update_display_mapping()
        self._editor.load(image.width, image.height)
        self._selection_updated()

    def load_file(self, path: Path, dropped: bool = False):
        """Decode *path* in the background, then show it.

        When *dropped* is set, ``file_dropped`` is emitted before the
        selection is reset to the new image.
        """
        self._cancel_loader()
        self.set_loading(True)
        self._loader = ImageLoaderThread(path, self)
        self._load_is_drop = dropped
        self._loader.loaded.connect(self._on_loaded)
        self._loader.error.connect(self._on_load_error)
        self._loader.start()

    def _cancel_loader(self):
        if self._loader is None:
            return
        try:
            self._loader.loaded.disconnect()
            self._loader.error.disconnect()
        except (TypeError, RuntimeError):
            pass  # Already disconnected or destroyed
        if self._loader.isRunning():
            self._loader.quit()
            self._loader.wait(500)
        self._loader = None

    def _on_loaded(self, image: Image.Image, path: Path):
        logger.info("Loaded %s (%dx%d)", path, image.width, image.height)
        if self._load_is_drop:
            self.file_dropped.emit(image, path)
        self.set_image(image)

    def _on_load_error(self, error: str):
        self.set_loading(False)
        self.load_failed.emit(error)

    # --- Selection ---

    def selection(self) -> CropRect:
        return self._editor.rect

    def reset(self):
        """Re-fit the largest centered selection."""
        if not self.has_image():
            return
        self._editor.reset()
        self._selection_updated()

    def _selection_updated(self):
        self.selection_changed.emit(self._editor.rect)
        self.update()

    # --- Export ---

    def extract(self) -> Image.Image | None:
        """Return the selection resampled to the output size, or None without an image."""
        if self._source is None:
            return None
        return self._editor.extract(self._source)

    def to_data_url(self, fmt: str = "PNG", quality: int | None = None) -> str | None:
        image = self.extract()
        if image is None:
            return None
        return to_data_url(image, fmt, quality)

    # --- Coordinate mapping ---

    def _update_display_mapping(self):
        """Calculate scale and offset to fit image in widget with letterboxing."""
        if self._source is None:
            return
        img_w, img_h = self._source.width, self._source.height
        if img_w == 0 or img_h == 0:
            return
        ww, wh = self.width(), self.height()
        self._scale = min(ww / img_w, wh / img_h)
        disp_w = img_w * self._scale
        disp_h = img_h * self._scale
        self._offset_x = (ww - disp_w) / 2
        self._offset_y = (wh - disp_h) / 2

    def _canvas_to_display(self, cx: float, cy: float) -> QPointF:
        return QPointF(cx * self._scale + self._offset_x, cy * self._scale + self._offset_y)

    def _display_to_canvas(self, pos: QPointF) -> Point:
        if self._scale == 0:
            return Point(0, 0)
        return Point((pos.x() - self._offset_x) / self._scale, (pos.y() - self._offset_y) / self._scale)

    def _selection_display_rect(self) -> QRectF:
        rect = self._editor.rect
        tl = self._canvas_to_display(rect.left, rect.top)
        br = self._canvas_to_display(rect.right, rect.bottom)
        return QRectF(tl, br)

    # --- Painting ---

    def paintEvent(self, event: QPaintEvent):
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.SmoothPixmapTransform, not self.pixelated)
        painter.fillRect(self.rect(), QColor(30, 30, 30))

        if not self._pixmap:
            painter.setPen(QColor(128, 128, 128))
            msg = "Loading image…" if self._loading else "Drop an image here"
            painter.drawText(self.rect(), Qt.AlignmentFlag.AlignCenter, msg)
            painter.end()
            return

        # Draw image
        tl = self._canvas_to_display(0, 0)
        br = self._canvas_to_display(self._source.width, self._source.height)
        dest = QRectF(tl, br)
        painter.drawPixmap(dest.toRect(), self._pixmap)

        # Dim area outside selection
        sel = self._selection_display_rect()
        dim = QColor(0, 0, 0, DIM_ALPHA)

        # Top strip
        painter.fillRect(QRectF(dest.left(), dest.top(), dest.width(), sel.top() - dest.top()), dim)
        # Bottom strip
        painter.fillRect(QRectF(dest.left(), sel.bottom(), dest.width(), dest.bottom() - sel.bottom()), dim)
        # Left strip
        painter.fillRect(QRectF(dest.left(), sel.top(), sel.left() - dest.left(), sel.height()), dim)
        # Right strip
        painter.fillRect(QRectF(sel.right(), sel.top(), dest.right() - sel.right(), sel.height()), dim)

        # Draw selection border
        painter.setPen(QPen(QColor(255, 255, 255), 1))
        painter.setBrush(Qt.BrushStyle.NoBrush)
        painter.drawRect(sel)

        # Draw corner and edge handles
        painter.setPen(QPen(QColor(0, 0, 0), 1))
        painter.setBrush(QBrush(QColor(255, 255, 255)))
        hs = _HANDLE_PAINT_SIZE
        cx = sel.center().x()
        cy = sel.center().y()
        for x, y in (
            (sel.left(), sel.top()), (cx, sel.top()), (sel.right(), sel.top()),
            (sel.right(), cy), (sel.right(), sel.bottom()), (cx, sel.bottom()),
            (sel.left(), sel.bottom()), (sel.left(), cy),
        ):
            painter.drawRect(QRectF(x - hs, y - hs, hs * 2, hs * 2))

        # Draw selection size label
        rect = self._editor.rect
        out_w, out_h = self._editor.output_size
        painter.setPen(QColor(255, 255, 255))
        label = f"{rect.width} × {rect.height} → {out_w} × {out_h}"
        painter.drawText(
            sel.adjusted(0, -20, 0, 0).toRect(),
            Qt.AlignmentFlag.AlignHCenter | Qt.AlignmentFlag.AlignBottom,
            label,
        )

        painter.end()

    def resizeEvent(self, event: QResizeEvent):
        self._update_display_mapping()
        super().resizeEvent(event)

    # --- Mouse interaction ---

    def mousePressEvent(self, event: QMouseEvent):
        if event.button() != Qt.MouseButton.LeftButton or not self.has_image():
            return
        self._editor.press(self._display_to_canvas(event.position()))

    def mouseMoveEvent(self, event: QMouseEvent):
        if not self.has_image():
            return

        point = self._display_to_canvas(event.position())

        if not self._editor.dragging:
            handle = self._editor.hover(point)
            self.setCursor(_HANDLE_CURSORS.get(handle, Qt.CursorShape.ArrowCursor))
            return

        if self._editor.drag(point) is not None:
            self._selection_updated()

    def mouseReleaseEvent(self, event: QMouseEvent):
        if event.button() == Qt.MouseButton.LeftButton:
            self._editor.release()

    def leaveEvent(self, event: QEvent):
        self._editor.release()
        super().leaveEvent(event)

    # --- Keyboard ---

    def keyPressEvent(self, event: QKeyEvent):
        if not self.has_image():
            super().keyPressEvent(event)
            return
        if event.key() == Qt.Key.Key_R:
            self.reset()
            return
        amount = NUDGE_LARGE if event.modifiers() & Qt.KeyboardModifier.ShiftModifier else NUDGE_SMALL
        steps = {
            Qt.Key.Key_Left: (-amount, 0),
            Qt.Key.Key_Right: (amount, 0),
            Qt.Key.Key_Up: (0, -amount),
            Qt.Key.Key_Down: (0, amount),
        }
        step = steps.get(event.key())
        if step is None:
            super().keyPressEvent(event)
            return
        if self._editor.nudge(*step) is not None:
            self._selection_updated()

    # --- Drag and drop ---

    @staticmethod
    def _dropped_path(event) -> Path | None:
        """First local, supported image file carried by a drag event."""
        mime = event.mimeData()
        if mime is None or not mime.hasUrls():
            return None
        for url in mime.urls():
            if not url.isLocalFile():
                continue
            path = Path(url.toLocalFile())
            if is_supported_image(path):
                return path
        return None

    def dragEnterEvent(self, event: QDragEnterEvent):
        if self._dropped_path(event) is not None:
            event.setDropAction(Qt.DropAction.CopyAction)
            event.accept()
        else:
            event.ignore()

    def dragMoveEvent(self, event):
        self.dragEnterEvent(event)

    def dropEvent(self, event: QDropEvent):
        path = self._dropped_path(event)
        if path is None:
            logger.debug("Ignoring drop without a supported local image file")
            event.ignore()
            return
        event.setDropAction(Qt.DropAction.CopyAction)
        event.accept()
        self.load_file(path, dropped=True)

    def add_drop_target(self, widget: QWidget):
        """Forward file drops on *widget* to this cutter."""
        if widget in self._drop_targets:
            return
        widget.setAcceptDrops(True)
        widget.installEventFilter(self)
        self._drop_targets.append(widget)

    def remove_drop_target(self, widget: QWidget):
        if widget not in self._drop_targets:
            return
        widget.removeEventFilter(self)
        self._drop_targets.remove(widget)

    def eventFilter(self, obj: QObject, event: QEvent) -> bool:
        if obj in self._drop_targets:
            etype = event.type()
            if etype in (QEvent.Type.DragEnter, QEvent.Type.DragMove):
                self.dragEnterEvent(event)
                return True
            if etype == QEvent.Type.Drop:
                self.dropEvent(event)
                return True
        return super().eventFilter(obj, event)
