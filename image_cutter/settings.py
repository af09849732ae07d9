"""
Output settings persistence: load, save, and validate export settings.

Settings are stored in a JSON file in the user's config directory
(provided by ``config.config_dir()``).  A missing or unreadable file
yields the defaults.  Invalid individual values are replaced by their
default with a warning, so a bad output size never reaches the crop
editor, which assumes a positive aspect ratio.

The on-disk format uses a versioned envelope::

    {"version": 1, "settings": {"output_width": 128, ...}}
"""

import json
import logging
from dataclasses import asdict, dataclass
from pathlib import Path

from image_cutter.config import (
    DEFAULT_OUTPUT_SIZE, JPEG_QUALITY_DEFAULT, JPEG_QUALITY_MAX, JPEG_QUALITY_MIN,
    OUTPUT_FORMAT_DEFAULT, OUTPUT_FORMATS, config_dir,
)

logger = logging.getLogger(__name__)

_SETTINGS_FILENAME = "settings.json"
_FORMAT_VERSION = 1


@dataclass
class OutputSettings:
    """Export configuration for the crop editor."""
    output_width: int = DEFAULT_OUTPUT_SIZE
    output_height: int = DEFAULT_OUTPUT_SIZE
    pixelated: bool = False
    format: str = OUTPUT_FORMAT_DEFAULT
    jpeg_quality: int = JPEG_QUALITY_DEFAULT


# =============================================================================
# Config directory helpers
# =============================================================================
def _settings_path() -> Path:
    """Return the full path to settings.json."""
    return config_dir() / _SETTINGS_FILENAME


# =============================================================================
# Validation
# =============================================================================
def _is_positive_int(val: object) -> bool:
    return isinstance(val, int) and not isinstance(val, bool) and val > 0


def validate_settings(data: object) -> list[str]:
    """
    Validate a settings dict.

    Returns a list of error strings (empty means valid).  Missing keys are
    not errors; they fall back to defaults.
    """
    errors: list[str] = []

    if not isinstance(data, dict):
        errors.append("Settings data must be a dict")
        return errors

    for key in ("output_width", "output_height"):
        if key in data and not _is_positive_int(data[key]):
            errors.append(f"{key} must be a positive integer, got {data[key]!r}")

    if "pixelated" in data and not isinstance(data["pixelated"], bool):
        errors.append(f"pixelated must be a boolean, got {data['pixelated']!r}")

    if "format" in data and data["format"] not in OUTPUT_FORMATS:
        errors.append(f"format must be one of {', '.join(OUTPUT_FORMATS)}, got {data['format']!r}")

    if "jpeg_quality" in data:
        val = data["jpeg_quality"]
        if not _is_positive_int(val) or not JPEG_QUALITY_MIN <= val <= JPEG_QUALITY_MAX:
            errors.append(
                f"jpeg_quality must be an integer in {JPEG_QUALITY_MIN}-{JPEG_QUALITY_MAX}, got {val!r}"
            )

    return errors


def settings_from_dict(data: dict) -> OutputSettings:
    """
    Build OutputSettings from a (possibly partial or invalid) dict.

    Each invalid value is replaced by its default and logged; an output
    size of zero or less becomes ``DEFAULT_OUTPUT_SIZE``.
    """
    defaults = OutputSettings()
    values = asdict(defaults)
    for key in values:
        if key not in data:
            continue
        errors = validate_settings({key: data[key]})
        if errors:
            logger.warning("%s — using default %r", errors[0], values[key])
            continue
        values[key] = data[key]
    return OutputSettings(**values)


# =============================================================================
# Load / Save
# =============================================================================
def load_settings() -> OutputSettings:
    """
    Load settings from settings.json.

    If the file is missing or corrupt, returns the defaults.  Individually
    invalid values are replaced by their defaults.
    """
    path = _settings_path()

    if not path.exists():
        logger.debug("settings.json not found at %s — using defaults", path)
        return OutputSettings()

    try:
        text = path.read_text(encoding="utf-8")
        raw = json.loads(text)
    except (json.JSONDecodeError, OSError) as exc:
        logger.warning("Failed to read settings.json (%s) — using defaults", exc)
        return OutputSettings()

    if not isinstance(raw, dict) or raw.get("version") != _FORMAT_VERSION or "settings" not in raw:
        logger.warning("settings.json version mismatch or invalid format — using defaults")
        return OutputSettings()

    data = raw["settings"]
    if not isinstance(data, dict):
        logger.warning("settings.json 'settings' is not a dict — using defaults")
        return OutputSettings()

    return settings_from_dict(data)


def save_settings(settings: OutputSettings) -> None:
    """
    Validate and write settings to settings.json in versioned envelope.

    Raises ValueError if validation fails.
    Raises OSError if the file cannot be written.
    """
    data = asdict(settings)
    errors = validate_settings(data)
    if errors:
        raise ValueError("Invalid settings:\n  " + "\n  ".join(errors))

    envelope = {"version": _FORMAT_VERSION, "settings": data}
    path = _settings_path()
    path.write_text(json.dumps(envelope, indent=2, ensure_ascii=False), encoding="utf-8")
    logger.info("Saved settings to %s", path)
