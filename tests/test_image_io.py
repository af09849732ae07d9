from __future__ import annotations

import base64
from pathlib import Path

import pytest
from PIL import Image

from image_cutter.image_io import (
    encode_image, extract, open_image, save_image, to_data_url, unique_path,
)
from image_cutter.models import CropRect

RED = (255, 0, 0)
BLUE = (0, 0, 255)
GREEN = (0, 255, 0)


def two_tone(size: int = 4) -> Image.Image:
    img = Image.new("RGB", (size, size), RED)
    img.paste(BLUE, (size // 2, 0, size, size))
    return img


def test_extract_output_size() -> None:
    source = Image.new("RGB", (200, 100))
    out = extract(source, CropRect(top=0, left=50, width=100, height=100), 32, 16)
    assert out.size == (32, 16)


def test_extract_samples_only_the_selection() -> None:
    source = Image.new("RGB", (100, 100), (0, 0, 0))
    source.paste(GREEN, (50, 50, 100, 100))
    out = extract(source, CropRect(top=50, left=50, width=50, height=50), 10, 10, pixelated=True)
    assert out.getcolors() == [(100, GREEN)]


def test_extract_pixelated_keeps_hard_edges() -> None:
    out = extract(two_tone(), CropRect(top=0, left=0, width=4, height=4), 8, 8, pixelated=True)
    assert {color for _, color in out.getcolors()} == {RED, BLUE}
    assert out.getpixel((0, 0)) == RED
    assert out.getpixel((7, 7)) == BLUE


def test_extract_smooth_blends_edges() -> None:
    out = extract(two_tone(), CropRect(top=0, left=0, width=4, height=4), 8, 8, pixelated=False)
    assert len(out.getcolors()) > 2


def test_extract_does_not_modify_source() -> None:
    source = two_tone()
    before = source.tobytes()
    extract(source, CropRect(top=0, left=0, width=2, height=2), 16, 16)
    assert source.tobytes() == before


def test_encode_png_and_jpeg() -> None:
    img = Image.new("RGBA", (8, 8), (1, 2, 3, 128))
    assert encode_image(img, "PNG").startswith(b"\x89PNG")
    assert encode_image(img, "JPEG", quality=80).startswith(b"\xff\xd8")


def test_encode_unknown_format() -> None:
    with pytest.raises(ValueError):
        encode_image(Image.new("RGB", (2, 2)), "GIF")


def test_to_data_url_png() -> None:
    img = Image.new("RGB", (4, 4), RED)
    url = to_data_url(img)
    prefix = "data:image/png;base64,"
    assert url.startswith(prefix)
    assert base64.b64decode(url[len(prefix):]).startswith(b"\x89PNG")


def test_to_data_url_jpeg() -> None:
    url = to_data_url(Image.new("RGB", (4, 4)), "JPEG", quality=70)
    assert url.startswith("data:image/jpeg;base64,")


def test_to_data_url_unknown_format() -> None:
    with pytest.raises(ValueError):
        to_data_url(Image.new("RGB", (2, 2)), "BMP")


def test_save_image_never_overwrites(tmp_path: Path) -> None:
    img = Image.new("RGB", (4, 4))
    first = save_image(img, tmp_path / "out" / "cut.png")
    second = save_image(img, tmp_path / "out" / "cut.png")
    assert first == tmp_path / "out" / "cut.png"
    assert second == tmp_path / "out" / "cut-01.png"
    assert first.read_bytes().startswith(b"\x89PNG")


def test_unique_path_counts_up(tmp_path: Path) -> None:
    (tmp_path / "a.png").write_bytes(b"")
    (tmp_path / "a-01.png").write_bytes(b"")
    assert unique_path(tmp_path / "a.png") == tmp_path / "a-02.png"
    assert unique_path(tmp_path / "b.png") == tmp_path / "b.png"


def test_open_image_decodes_fully(tmp_path: Path) -> None:
    path = tmp_path / "palette.png"
    Image.new("P", (30, 20)).save(path)
    img = open_image(path)
    assert img.size == (30, 20)
    assert img.mode == "RGBA"


def test_open_image_keeps_rgb(tmp_path: Path) -> None:
    path = tmp_path / "rgb.png"
    Image.new("RGB", (5, 6), RED).save(path)
    img = open_image(path)
    assert img.mode == "RGB"
    assert img.getpixel((0, 0)) == RED


def test_open_image_rejects_garbage(tmp_path: Path) -> None:
    path = tmp_path / "bad.png"
    path.write_bytes(b"not an image")
    with pytest.raises(OSError):
        open_image(path)
