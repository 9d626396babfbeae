"""
Config Loader — Encoder settings from a master key or individual env vars.

Supports two modes:
1. Master JSON key: CELLIMAGE_CONFIG with all settings
2. Individual keys: CELLIMAGE_* env vars (override the master key)

## Usage

    export CELLIMAGE_CONFIG='{"default_max_width": 150, "presets_file": "presets.yaml"}'

    # or
    export CELLIMAGE_DEFAULT_MAX_WIDTH=150
    export CELLIMAGE_PRESETS_FILE=presets.yaml

The size budget and tier constants are fixed and cannot be configured.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from ..encoder.budget import DEFAULT_MAX_WIDTH, DEFAULT_QUALITY
from ..encoder.raster import MAX_SURFACE_AREA, MAX_SURFACE_SIDE, SurfaceLimits
from ..validation import ValidationError, validate_positive_int, validate_quality

logger = logging.getLogger(__name__)

MASTER_ENV_VAR = "CELLIMAGE_CONFIG"

ENV_VARS = {
    "default_max_width": "CELLIMAGE_DEFAULT_MAX_WIDTH",
    "default_quality": "CELLIMAGE_DEFAULT_QUALITY",
    "presets_file": "CELLIMAGE_PRESETS_FILE",
    "max_surface_side": "CELLIMAGE_MAX_SURFACE_SIDE",
    "max_surface_area": "CELLIMAGE_MAX_SURFACE_AREA",
}


@dataclass(frozen=True)
class EncoderConfig:
    """Effective encoder settings."""

    default_max_width: int = DEFAULT_MAX_WIDTH
    default_quality: float = DEFAULT_QUALITY
    presets_file: Optional[Path] = None
    max_surface_side: int = MAX_SURFACE_SIDE
    max_surface_area: int = MAX_SURFACE_AREA

    @property
    def surface_limits(self) -> SurfaceLimits:
        return SurfaceLimits(max_side=self.max_surface_side, max_area=self.max_surface_area)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "default_max_width": self.default_max_width,
            "default_quality": self.default_quality,
            "presets_file": str(self.presets_file) if self.presets_file else None,
            "max_surface_side": self.max_surface_side,
            "max_surface_area": self.max_surface_area,
        }


def load_config() -> EncoderConfig:
    """
    Load settings.

    Priority:
    1. Individual CELLIMAGE_* environment variables
    2. CELLIMAGE_CONFIG (master JSON)
    3. Built-in defaults

    Raises:
        ValidationError: If a provided value is out of range.
    """
    raw: Dict[str, Any] = {}

    master_config = os.environ.get(MASTER_ENV_VAR)
    if master_config:
        try:
            data = json.loads(master_config)
            if not isinstance(data, dict):
                raise ValueError("expected a JSON object")
            raw.update(_parse_master_config(data))
            logger.info(f"Loaded configuration from {MASTER_ENV_VAR}")
        except json.JSONDecodeError as e:
            logger.error(f"Invalid {MASTER_ENV_VAR} JSON: {e}")
        except ValueError as e:
            logger.error(f"Failed to parse {MASTER_ENV_VAR}: {e}")

    for key, env_var in ENV_VARS.items():
        value = os.environ.get(env_var)
        if value:
            raw[key] = value

    return _build_config(raw)


def _parse_master_config(data: Dict[str, Any]) -> Dict[str, Any]:
    """Accept both snake_case keys and env var names."""
    parsed = {}
    for key, env_var in ENV_VARS.items():
        value = data.get(key, data.get(env_var))
        if value is not None:
            parsed[key] = value
    return parsed


def _build_config(raw: Dict[str, Any]) -> EncoderConfig:
    defaults = EncoderConfig()

    max_width = defaults.default_max_width
    if "default_max_width" in raw:
        max_width = validate_positive_int(raw["default_max_width"], "default_max_width")

    quality = defaults.default_quality
    if "default_quality" in raw:
        try:
            quality = float(raw["default_quality"])
        except (TypeError, ValueError):
            raise ValidationError(
                f"must be a number, got {raw['default_quality']!r}",
                field="default_quality",
            )
        validate_quality(quality, "default_quality")

    presets_file = Path(raw["presets_file"]) if raw.get("presets_file") else None

    side = defaults.max_surface_side
    if "max_surface_side" in raw:
        side = validate_positive_int(raw["max_surface_side"], "max_surface_side")

    area = defaults.max_surface_area
    if "max_surface_area" in raw:
        area = validate_positive_int(raw["max_surface_area"], "max_surface_area")

    return EncoderConfig(
        default_max_width=max_width,
        default_quality=quality,
        presets_file=presets_file,
        max_surface_side=side,
        max_surface_area=area,
    )
