"""
Preset Loader — Built-in field presets plus an optional YAML override.

YAML format:

    version: 1
    presets:
      avatar:
        max_width: 96
        quality: 0.75
        description: Chat avatar
      photo:
        max_width: 240     # overrides the built-in photo preset
        quality: 0.6
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import ValidationError as PydanticValidationError

from ..validation import ValidationError
from .models import FieldPreset, PresetCatalog

logger = logging.getLogger(__name__)

# Widths and qualities used by the record forms
BUILTIN_PRESETS: Dict[str, Dict[str, Any]] = {
    "icon": {"max_width": 64, "quality": 0.8, "description": "Link and service icons"},
    "school-logo": {"max_width": 150, "quality": 0.7, "description": "School and agency logos"},
    "developer-photo": {"max_width": 200, "quality": 0.7, "description": "About page portrait"},
    "photo": {"max_width": 300, "quality": 0.6, "description": "Student and teacher photos"},
    "signature": {"max_width": 300, "quality": 0.6, "description": "Scanned signatures"},
    "background": {"max_width": 300, "quality": 0.6, "description": "Print template backgrounds"},
}


def load_yaml(path: Path) -> Dict[str, Any]:
    """Load a YAML file; an empty file yields an empty dict."""
    with path.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def builtin_catalog() -> PresetCatalog:
    """The presets that ship with the package."""
    return PresetCatalog(
        presets={
            name: FieldPreset(name=name, **values)
            for name, values in BUILTIN_PRESETS.items()
        }
    )


def load_presets(path: Optional[Path] = None) -> PresetCatalog:
    """
    Load presets, merging a YAML file over the built-ins.

    Args:
        path: Optional YAML file. Entries add new presets or replace
            built-in ones with the same name.

    Returns:
        PresetCatalog

    Raises:
        ValidationError: If the file is missing, not a mapping, or holds
            an invalid preset.
    """
    catalog = builtin_catalog()
    if path is None:
        return catalog

    path = Path(path)
    if not path.exists():
        raise ValidationError(f"Presets file does not exist: {path}", field="presets_file")

    try:
        data = load_yaml(path)
    except yaml.YAMLError as e:
        raise ValidationError(f"Invalid YAML in {path}: {e}", field="presets_file")

    if not isinstance(data, dict):
        raise ValidationError(f"Presets file must be a mapping: {path}", field="presets_file")

    entries = data.get("presets") or {}
    if not isinstance(entries, dict):
        raise ValidationError("'presets' must be a mapping of name → settings", field="presets")

    merged = dict(catalog.presets)
    for name, values in entries.items():
        if not isinstance(values, dict):
            raise ValidationError(f"Preset '{name}' must be a mapping", field=f"presets.{name}")
        try:
            merged[name] = FieldPreset(**{**values, "name": name})
        except PydanticValidationError as e:
            raise ValidationError(
                f"Invalid preset: {e.errors()[0]['msg']}",
                field=f"presets.{name}",
                details={"errors": e.errors()},
            )

    logger.info(f"Loaded {len(entries)} preset(s) from {path}")
    return PresetCatalog(version=data.get("version", 1), presets=merged)
