"""
Data models for the crop editor.

All geometry values are integers in canvas (source-image) pixel space,
except ``Point`` which carries the raw, possibly fractional, pointer
position.  The rectangle types are frozen: every geometry operation
returns a new value instead of mutating one in place.
"""

from dataclasses import dataclass
from enum import IntFlag


# =============================================================================
# Data classes
# =============================================================================
@dataclass(frozen=True)
class Point:
    """Pointer position in canvas coordinates."""
    x: float = 0.0
    y: float = 0.0


@dataclass(frozen=True)
class CanvasBounds:
    """Pixel dimensions of the loaded source raster."""
    width: int = 0
    height: int = 0

    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0


@dataclass(frozen=True)
class AspectRatio:
    """Target output aspect ratio, kept as the configured integer pair.

    The integer pair is retained so the derived dimensions can be computed
    with exact integer arithmetic instead of a rounded float ratio.
    """
    width: int = 1
    height: int = 1

    def width_for(self, height: int) -> int:
        """Width matching *height*, floored."""
        return (self.width * height) // self.height

    def height_for(self, width: int) -> int:
        """Height matching *width*, floored."""
        return (self.height * width) // self.width

    def is_narrower_than(self, width: int, height: int) -> bool:
        """True if this ratio is strictly narrower than ``width / height``."""
        return self.width * height < width * self.height


@dataclass(frozen=True)
class CropRect:
    """Crop rectangle in canvas coordinates."""
    top: int = 0
    left: int = 0
    width: int = 0
    height: int = 0

    @property
    def right(self) -> int:
        return self.left + self.width

    @property
    def bottom(self) -> int:
        return self.top + self.height

    def contains(self, point: Point) -> bool:
        """True if *point* lies inside the rectangle, edges included."""
        return (self.left <= point.x <= self.right
                and self.top <= point.y <= self.bottom)

    def box(self) -> tuple[int, int, int, int]:
        """Pillow-style ``(left, upper, right, lower)`` box."""
        return self.left, self.top, self.right, self.bottom


# =============================================================================
# Handles
# =============================================================================
class Handle(IntFlag):
    """Drag target under the pointer.

    Edge handles are single bits; a corner is the union of its two
    adjacent edges, so ``handle & Handle.LEFT`` tells whether a drag moves
    the left edge regardless of which handle was grabbed.
    """
    NONE = 0
    TOP = 1
    LEFT = 2
    BOTTOM = 4
    RIGHT = 8
    TOP_LEFT = TOP | LEFT
    TOP_RIGHT = TOP | RIGHT
    BOTTOM_RIGHT = BOTTOM | RIGHT
    BOTTOM_LEFT = BOTTOM | LEFT
    MOVE = 16

    @property
    def is_resize(self) -> bool:
        return bool(self & (Handle.TOP | Handle.LEFT | Handle.BOTTOM | Handle.RIGHT))

    @property
    def resizes_width(self) -> bool:
        return bool(self & (Handle.LEFT | Handle.RIGHT))

    @property
    def resizes_height(self) -> bool:
        return bool(self & (Handle.TOP | Handle.BOTTOM))
