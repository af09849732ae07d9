from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from image_cutter.settings import (
    OutputSettings, load_settings, save_settings, settings_from_dict, validate_settings,
)


def test_missing_file_gives_defaults(config_home: Path) -> None:
    settings = load_settings()
    assert settings == OutputSettings()
    assert (settings.output_width, settings.output_height) == (128, 128)
    assert settings.pixelated is False


def test_save_then_load(config_home: Path) -> None:
    saved = OutputSettings(output_width=64, output_height=32, pixelated=True, format="JPEG", jpeg_quality=80)
    save_settings(saved)

    raw = json.loads((config_home / "settings.json").read_text(encoding="utf-8"))
    assert raw["version"] == 1
    assert raw["settings"]["output_width"] == 64

    assert load_settings() == saved


def test_save_rejects_invalid(config_home: Path) -> None:
    with pytest.raises(ValueError):
        save_settings(OutputSettings(output_width=0))
    assert not (config_home / "settings.json").exists()


def test_corrupt_file_gives_defaults(config_home: Path) -> None:
    (config_home / "settings.json").write_text("{not json", encoding="utf-8")
    assert load_settings() == OutputSettings()


def test_version_mismatch_gives_defaults(config_home: Path) -> None:
    envelope = {"version": 99, "settings": {"output_width": 10}}
    (config_home / "settings.json").write_text(json.dumps(envelope), encoding="utf-8")
    assert load_settings() == OutputSettings()


def test_non_positive_size_defaults_to_128(config_home: Path, caplog) -> None:
    envelope = {"version": 1, "settings": {"output_width": 0, "output_height": 48}}
    (config_home / "settings.json").write_text(json.dumps(envelope), encoding="utf-8")
    with caplog.at_level(logging.WARNING, logger="image_cutter.settings"):
        settings = load_settings()
    assert settings.output_width == 128
    assert settings.output_height == 48
    assert "output_width" in caplog.text


@pytest.mark.parametrize(
    "data",
    [
        {"output_width": -5},
        {"output_height": "64"},
        {"output_width": True},
        {"pixelated": "yes"},
        {"format": "GIF"},
        {"jpeg_quality": 0},
        {"jpeg_quality": 101},
    ],
)
def test_validate_rejects(data: dict) -> None:
    assert validate_settings(data)


def test_validate_accepts_partial() -> None:
    assert validate_settings({"output_width": 256}) == []
    assert validate_settings({}) == []
    assert validate_settings([]) == ["Settings data must be a dict"]


def test_settings_from_dict_ignores_unknown_keys() -> None:
    settings = settings_from_dict({"output_width": 300, "theme": "dark"})
    assert settings.output_width == 300
    assert settings.output_height == 128
