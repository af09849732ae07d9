"""
Application constants and configuration.

Geometry constants (hit radius, nudge amounts) are shared by the Qt-free
editor core and the widget.  Export constants map onto Pillow save options.

The ``config_dir()`` helper returns the platform-appropriate config
directory used by the settings module.
"""

import os
import sys
from pathlib import Path

# =============================================================================
# APP IDENTITY & CONFIG DIRECTORY
# =============================================================================
APP_NAME = "image-cutter"


def config_dir() -> Path:
    """Return the platform-appropriate config directory, creating it if needed."""
    if sys.platform == "win32":
        base = Path(os.environ.get("APPDATA", Path.home() / "AppData" / "Roaming"))
    elif sys.platform == "darwin":
        base = Path.home() / "Library" / "Application Support"
    else:
        base = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
    directory = base / APP_NAME
    directory.mkdir(parents=True, exist_ok=True)
    return directory


# =============================================================================
# CROP EDITOR
# =============================================================================
# Output size used when none (or an invalid one) is configured
DEFAULT_OUTPUT_SIZE = 128

# Proximity radius for corner/edge handles (pixels in canvas coordinates)
HIT_RADIUS = 20

# Nudge amounts (pixels in canvas coordinates)
NUDGE_SMALL = 1
NUDGE_LARGE = 10

# Opacity of the mask drawn outside the selection (0-255)
DIM_ALPHA = 128

# =============================================================================
# EXPORT
# =============================================================================
# PNG compression level (0-9, 9 = maximum compression)
PNG_COMPRESS_LEVEL = 9

# JPEG export defaults
JPEG_QUALITY_DEFAULT = 95
JPEG_QUALITY_MIN = 1
JPEG_QUALITY_MAX = 100
JPEG_SUBSAMPLING_DEFAULT = 0  # 4:4:4

# Output format options
OUTPUT_FORMATS = ["PNG", "JPEG"]
OUTPUT_FORMAT_DEFAULT = "PNG"

# MIME types for data-URL export
FORMAT_MIME_TYPES = {"PNG": "image/png", "JPEG": "image/jpeg"}

# File suffix per output format
FORMAT_SUFFIXES = {"PNG": ".png", "JPEG": ".jpg"}

# Supported image extensions for open/drop
IMAGE_EXTENSIONS = {".png", ".jpg", ".jpeg", ".bmp", ".gif", ".tiff", ".tif", ".webp", ".psd"}
