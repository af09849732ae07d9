"""
Crop editor session and pointer state machine (Qt-free).

``DragController`` owns the per-drag pointer state and turns a
press/drag/release sequence into calls to the geometry functions.
``CropEditor`` owns one editing session: the canvas bounds, the target
aspect ratio and the current crop rectangle.  The widget feeds it pointer
positions already converted to canvas coordinates and repaints whatever
rectangle it returns.
"""

import logging

from PIL import Image

from image_cutter import geometry
from image_cutter.config import DEFAULT_OUTPUT_SIZE, HIT_RADIUS
from image_cutter.image_io import extract
from image_cutter.models import AspectRatio, CanvasBounds, CropRect, Handle, Point

logger = logging.getLogger(__name__)


# =============================================================================
# Drag controller
# =============================================================================
class DragController:
    """Pointer state machine: IDLE -> ACTIVE(mode) -> IDLE.

    Deltas are incremental: after every drag step the anchor moves to the
    current pointer position, so per-step clamping never accumulates.
    """

    def __init__(self, radius: float = HIT_RADIUS):
        self._radius = radius
        self._anchor: Point | None = None
        self._mode = Handle.NONE

    @property
    def active(self) -> bool:
        return self._anchor is not None

    @property
    def mode(self) -> Handle:
        return self._mode

    @property
    def anchor(self) -> Point | None:
        return self._anchor

    @property
    def radius(self) -> float:
        return self._radius

    def target(self, point: Point, rect: CropRect) -> Handle:
        """Handle a press at *point* would grab; MOVE inside the rect."""
        mode = geometry.classify(point, rect, self._radius)
        if mode == Handle.NONE and rect.contains(point):
            return Handle.MOVE
        return mode

    def press(self, point: Point, rect: CropRect) -> bool:
        """Start a drag at *point*.  Returns False if nothing was grabbed."""
        mode = self.target(point, rect)
        if mode == Handle.NONE:
            self.release()
            return False
        logger.debug("Drag started: %s at (%.1f, %.1f)", mode.name, point.x, point.y)
        self._anchor = point
        self._mode = mode
        return True

    def drag(
        self,
        point: Point,
        rect: CropRect,
        bounds: CanvasBounds,
        ratio: AspectRatio,
    ) -> CropRect | None:
        """Apply the pointer movement since the last step; None while idle."""
        if self._anchor is None:
            return None
        dx = point.x - self._anchor.x
        dy = point.y - self._anchor.y
        if self._mode == Handle.MOVE:
            new_rect = geometry.move(rect, bounds, dx, dy)
        else:
            new_rect = geometry.resize(rect, bounds, ratio, self._mode, dx, dy)
        self._anchor = point
        return new_rect

    def release(self):
        """End the drag.  Geometry applied so far is kept."""
        self._anchor = None
        self._mode = Handle.NONE


# =============================================================================
# Editor session
# =============================================================================
class CropEditor:
    """One editing session: canvas bounds, target ratio and crop rectangle."""

    def __init__(
        self,
        output_width: int = DEFAULT_OUTPUT_SIZE,
        output_height: int = DEFAULT_OUTPUT_SIZE,
        pixelated: bool = False,
        radius: float = HIT_RADIUS,
    ):
        self._output_width = output_width
        self._output_height = output_height
        self.pixelated = pixelated
        self._ratio = AspectRatio(output_width, output_height)
        self._bounds = CanvasBounds()
        self._rect = CropRect()
        self._drag = DragController(radius)

    # --- State ---

    @property
    def rect(self) -> CropRect:
        return self._rect

    @property
    def bounds(self) -> CanvasBounds:
        return self._bounds

    @property
    def ratio(self) -> AspectRatio:
        return self._ratio

    @property
    def output_size(self) -> tuple[int, int]:
        return self._output_width, self._output_height

    @property
    def dragging(self) -> bool:
        return self._drag.active

    @property
    def drag_mode(self) -> Handle:
        return self._drag.mode

    def has_image(self) -> bool:
        return not self._bounds.is_empty()

    # --- Configuration ---

    def load(self, width: int, height: int) -> CropRect:
        """Set new canvas bounds and fit the selection to them."""
        self._drag.release()
        self._bounds = CanvasBounds(width, height)
        logger.info("Canvas set to %dx%d", width, height)
        return self.reset()

    def reset(self) -> CropRect:
        """Re-fit the largest centered selection for the current bounds."""
        self._rect = geometry.fit(self._bounds, self._ratio)
        return self._rect

    def set_output_size(self, width: int, height: int) -> CropRect:
        """Change the output size; the selection is re-fitted to the new ratio."""
        self._output_width = width
        self._output_height = height
        self._ratio = AspectRatio(width, height)
        if self.has_image():
            return self.reset()
        return self._rect

    # --- Pointer interaction ---

    def press(self, point: Point) -> bool:
        if not self.has_image():
            return False
        return self._drag.press(point, self._rect)

    def drag(self, point: Point) -> CropRect | None:
        """Feed a pointer move; returns the new rectangle only if it changed."""
        new_rect = self._drag.drag(point, self._rect, self._bounds, self._ratio)
        if new_rect is None or new_rect == self._rect:
            return None
        self._rect = new_rect
        return new_rect

    def release(self):
        self._drag.release()

    def hover(self, point: Point) -> Handle:
        """Handle that a press at *point* would grab (for cursor feedback)."""
        return self._drag.target(point, self._rect)

    def nudge(self, dx: int, dy: int) -> CropRect | None:
        """Move the selection by a keyboard step."""
        if not self.has_image():
            return None
        new_rect = geometry.move(self._rect, self._bounds, dx, dy)
        if new_rect == self._rect:
            return None
        self._rect = new_rect
        return new_rect

    # --- Export ---

    def extract(self, source: Image.Image) -> Image.Image:
        """Crop *source* to the selection at the configured output size."""
        return extract(source, self._rect, self._output_width, self._output_height, self.pixelated)
