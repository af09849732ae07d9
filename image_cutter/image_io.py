"""
Qt-free image I/O utilities.

Provides helpers to open images (including PSD), sample the crop
selection into an output raster, encode the result to bytes or a data
URL, and generate unique file paths.
"""

import base64
import io
import logging
from pathlib import Path

from PIL import Image
from psd_tools import PSDImage

from image_cutter.config import (
    FORMAT_MIME_TYPES, JPEG_QUALITY_DEFAULT, JPEG_SUBSAMPLING_DEFAULT,
    PNG_COMPRESS_LEVEL,
)
from image_cutter.models import CropRect

logger = logging.getLogger(__name__)

# Allow very large images (Pillow's default limit is ~178MP)
Image.MAX_IMAGE_PIXELS = None


# =============================================================================
# Loading
# =============================================================================
def open_image(path: Path) -> Image.Image:
    """Open and fully decode an image file, using psd-tools for PSD and Pillow for the rest."""
    if path.suffix.lower() == ".psd":
        psd = PSDImage.open(str(path))
        return psd.composite()
    with Image.open(path) as img:
        img.load()
        return img.copy() if img.mode in ("RGB", "RGBA") else img.convert("RGBA")


# =============================================================================
# Export
# =============================================================================
def extract(
    source: Image.Image,
    rect: CropRect,
    output_width: int,
    output_height: int,
    pixelated: bool = False,
) -> Image.Image:
    """Sample *rect* of *source* into a new ``output_width × output_height`` image.

    ``pixelated`` switches from Lanczos smoothing to nearest-neighbour,
    which keeps pixel art crisp when scaling up.
    """
    resample = Image.Resampling.NEAREST if pixelated else Image.Resampling.LANCZOS
    return source.resize((output_width, output_height), resample, box=rect.box())


def encode_image(
    image: Image.Image,
    fmt: str = "PNG",
    quality: int = JPEG_QUALITY_DEFAULT,
    subsampling: int = JPEG_SUBSAMPLING_DEFAULT,
) -> bytes:
    """Encode *image* as PNG or JPEG bytes.

    JPEG has no alpha channel, so the image is flattened to RGB first.
    """
    buf = io.BytesIO()
    if fmt == "JPEG":
        image.convert("RGB").save(
            buf, "JPEG",
            quality=quality,
            optimize=True,
            subsampling=subsampling,
        )
    elif fmt == "PNG":
        image.save(buf, "PNG", compress_level=PNG_COMPRESS_LEVEL)
    else:
        raise ValueError(f"Unsupported output format: {fmt!r}")
    return buf.getvalue()


def to_data_url(image: Image.Image, fmt: str = "PNG", quality: int | None = None) -> str:
    """Encode *image* as a ``data:`` URL, e.g. for embedding in HTML."""
    if fmt not in FORMAT_MIME_TYPES:
        raise ValueError(f"Unsupported output format: {fmt!r}")
    data = encode_image(image, fmt, quality=quality or JPEG_QUALITY_DEFAULT)
    payload = base64.b64encode(data).decode("ascii")
    return f"data:{FORMAT_MIME_TYPES[fmt]};base64,{payload}"


def save_image(
    image: Image.Image,
    path: Path,
    fmt: str = "PNG",
    quality: int = JPEG_QUALITY_DEFAULT,
) -> Path:
    """Write *image* to *path*, or to a numbered sibling if *path* exists.

    Returns the path actually written.
    """
    out_path = unique_path(path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_bytes(encode_image(image, fmt, quality=quality))
    logger.info("Exported %dx%d %s to %s", image.width, image.height, fmt, out_path)
    return out_path


def unique_path(out_path: Path) -> Path:
    """Return a unique path by appending -01, -02, etc. if file already exists."""
    if not out_path.exists():
        return out_path
    stem = out_path.stem
    suffix = out_path.suffix
    parent = out_path.parent
    counter = 1
    while True:
        candidate = parent / f"{stem}-{counter:02d}{suffix}"
        if not candidate.exists():
            return candidate
        counter += 1
