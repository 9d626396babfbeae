"""
Presets Module — Named (max_width, quality) pairs for image fields.
"""

from .loader import BUILTIN_PRESETS, builtin_catalog, load_presets
from .models import FieldPreset, PresetCatalog

__all__ = [
    "BUILTIN_PRESETS",
    "FieldPreset",
    "PresetCatalog",
    "builtin_catalog",
    "load_presets",
]
