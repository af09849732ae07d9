"""
Crop geometry: hit testing, resize, move and fit.

Every function here is pure and Qt-free.  Each takes the current
``CropRect`` and returns a new one; none of them raise.  Out-of-range
input is clamped, and a resize delta large enough to invert the
rectangle is ignored (the input rectangle is returned as-is).
"""

import logging
import math

from image_cutter.config import HIT_RADIUS
from image_cutter.models import AspectRatio, CanvasBounds, CropRect, Handle, Point

logger = logging.getLogger(__name__)


# =============================================================================
# Hit testing
# =============================================================================
def classify(pointer: Point, rect: CropRect, radius: float = HIT_RADIUS) -> Handle:
    """Return the handle under *pointer*, or ``Handle.NONE``.

    Corners are tested before edges so the small corner targets are not
    shadowed by the adjacent edge zones.
    """
    x, y = pointer.x, pointer.y
    left, top, right, bottom = rect.left, rect.top, rect.right, rect.bottom
    r2 = radius * radius

    corners = (
        (Handle.TOP_LEFT, left, top),
        (Handle.TOP_RIGHT, right, top),
        (Handle.BOTTOM_RIGHT, right, bottom),
        (Handle.BOTTOM_LEFT, left, bottom),
    )
    for handle, cx, cy in corners:
        if (cx - x) ** 2 + (cy - y) ** 2 <= r2:
            return handle

    if left - radius <= x <= right + radius:
        if top - radius <= y <= top + radius:
            return Handle.TOP
        if bottom - radius <= y <= bottom + radius:
            return Handle.BOTTOM
    if top - radius <= y <= bottom + radius:
        if left - radius <= x <= left + radius:
            return Handle.LEFT
        if right - radius <= x <= right + radius:
            return Handle.RIGHT

    return Handle.NONE


# =============================================================================
# Resize
# =============================================================================
def resize(
    rect: CropRect,
    bounds: CanvasBounds,
    ratio: AspectRatio,
    handle: Handle,
    dx: float,
    dy: float,
) -> CropRect:
    """Drag *handle* by ``(dx, dy)`` and return the aspect-locked result.

    The edges not touched by the handle stay pinned.  Dragged edges are
    clamped to the canvas and never cross their opposite edge, then the
    free rectangle is fitted back to *ratio*:

    * corners fit by height when the provisional rectangle is wider than
      the target, otherwise by width;
    * left/right edges derive the height from the width, reclamping to
      the canvas height if the derived height does not fit below ``top``;
    * top/bottom edges derive the width from the height, reclamping to
      the canvas width if it does not fit right of ``left``.
    """
    dx = math.floor(dx)
    dy = math.floor(dy)

    if not handle.is_resize:
        return rect
    if handle.resizes_width and abs(dx) > rect.width:
        logger.debug("Ignoring resize: |dx|=%d exceeds width %d", abs(dx), rect.width)
        return rect
    if handle.resizes_height and abs(dy) > rect.height:
        logger.debug("Ignoring resize: |dy|=%d exceeds height %d", abs(dy), rect.height)
        return rect

    left, top, right, bottom = rect.left, rect.top, rect.right, rect.bottom

    # Move the dragged edges, clamped to canvas and to the opposite edge
    if handle & Handle.LEFT:
        left = min(max(0, left + dx), right - 1)
    if handle & Handle.RIGHT:
        right = max(min(bounds.width, right + dx), left + 1)
    if handle & Handle.TOP:
        top = min(max(0, top + dy), bottom - 1)
    if handle & Handle.BOTTOM:
        bottom = max(min(bounds.height, bottom + dy), top + 1)

    width = right - left
    height = bottom - top

    if handle.resizes_width and handle.resizes_height:
        if ratio.is_narrower_than(width, height):
            # Provisional rect is wider than the target: fit height
            width = max(1, ratio.width_for(height))
        else:
            height = max(1, ratio.height_for(width))
    elif handle.resizes_width:
        # Reclamps below re-derive from the clamped side, not the pre-clamp width
        height = max(1, ratio.height_for(width))
        if bounds.height < top + height:
            height = max(1, bounds.height - top)
            width = max(1, ratio.width_for(height))
    else:
        width = max(1, ratio.width_for(height))
        if bounds.width < left + width:
            width = max(1, bounds.width - left)
            height = max(1, ratio.height_for(width))

    # Pinned right/bottom edges anchor the dragged left/top edges
    if handle & Handle.LEFT:
        left = right - width
    if handle & Handle.TOP:
        top = bottom - height

    return CropRect(top=top, left=left, width=width, height=height)


# =============================================================================
# Move
# =============================================================================
def _clamp_axis(start: int, delta: int, extent: int, limit: int) -> int:
    if start + delta <= 0:
        return 0
    if start + delta + extent <= limit:
        return start + delta
    return max(0, limit - extent)


def move(rect: CropRect, bounds: CanvasBounds, dx: float, dy: float) -> CropRect:
    """Translate *rect*, leaving it flush against any edge it would cross."""
    left = _clamp_axis(rect.left, math.floor(dx), rect.width, bounds.width)
    top = _clamp_axis(rect.top, math.floor(dy), rect.height, bounds.height)
    return CropRect(top=top, left=left, width=rect.width, height=rect.height)


# =============================================================================
# Fit
# =============================================================================
def fit(bounds: CanvasBounds, ratio: AspectRatio) -> CropRect:
    """Largest rectangle of *ratio* centered in the canvas."""
    if bounds.is_empty():
        return CropRect()
    if ratio.is_narrower_than(bounds.width, bounds.height):
        # Canvas is wider than the target: use the full height
        height = bounds.height
        width = max(1, ratio.width_for(height))
        return CropRect(top=0, left=(bounds.width - width) // 2, width=width, height=height)
    width = bounds.width
    height = max(1, ratio.height_for(width))
    return CropRect(top=(bounds.height - height) // 2, left=0, width=width, height=height)
