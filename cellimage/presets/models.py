"""
Preset Models — Pydantic schemas for per-field encoding presets.

A preset is the (max_width, quality) pair a form passes to the encoder
for one kind of image field.
"""

from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class FieldPreset(BaseModel):
    """Encoding parameters for one kind of image field."""

    name: str
    max_width: int = Field(gt=0)
    quality: float = Field(ge=0.0, le=1.0)
    description: Optional[str] = None


class PresetCatalog(BaseModel):
    """All known presets, keyed by name."""

    version: int = 1
    presets: Dict[str, FieldPreset] = Field(default_factory=dict)

    def get(self, name: str) -> FieldPreset:
        """Look up a preset, listing the known names if it is missing."""
        try:
            return self.presets[name]
        except KeyError:
            known = ", ".join(self.names()) or "none"
            raise KeyError(f"Unknown preset '{name}' (known: {known})") from None

    def names(self) -> List[str]:
        return sorted(self.presets)
