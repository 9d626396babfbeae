"""
Scaler — Target dimensions for the encoder tiers.

The first scale step rounds to the nearest pixel (half up); the tier-2
shrink floors. Both rules fix the accepted output sizes at tier
boundaries.
"""

from __future__ import annotations

import math
from typing import Tuple

from ..validation import validate_max_width

SHRINK_RATIO = 0.6


def _round_half_up(value: float) -> int:
    # Python's round() is banker's rounding; 0.5 must always go up
    return int(math.floor(value + 0.5))


def scale_dimensions(width: int, height: int, max_width: int) -> Tuple[int, int]:
    """
    Fit (width, height) to max_width, preserving aspect ratio.

    Never upscales: images at or below max_width keep their native size.
    """
    validate_max_width(max_width)
    if width <= max_width:
        return width, height
    return max_width, _round_half_up(height * max_width / width)


def shrink_dimensions(
    width: int,
    height: int,
    ratio: float = SHRINK_RATIO,
) -> Tuple[int, int]:
    """Shrink already-scaled dimensions by ratio, flooring both sides."""
    return int(math.floor(width * ratio)), int(math.floor(height * ratio))
