"""
Budget Controller — Fit an image under a hard character ceiling.

The controller walks a fixed three-tier decision tree. Each tier fully
encodes the image before its length is checked:

    tier 0: scaled size, input format (PNG stays PNG, all else JPEG),
            caller quality
    tier 1: same size, JPEG, quality 0.5          (if tier 0 > soft limit)
    tier 2: floor(size * 0.6), JPEG, quality 0.5  (if tier 1 > soft limit)

Tier 0 under the soft limit is returned as is. Otherwise the last
attempt made is checked once against the hard limit: below it is
accepted, at or above it raises SizeExceeded. There is no tier 3 and
no search loop.

## Usage

    from cellimage.encoder.budget import encode_image

    result = await encode_image(data, "image/png", max_width=150, quality=0.7)
    record["logo"] = result.data_url
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple

from ..validation import validate_max_width, validate_quality
from .decoder import RasterImage, decode_image
from .errors import SizeExceeded
from .raster import JPEG, PNG, SurfaceLimits, render_data_url
from .scaler import SHRINK_RATIO, scale_dimensions, shrink_dimensions

logger = logging.getLogger(__name__)

SOFT_LIMIT = 45000
HARD_LIMIT = 49000
FALLBACK_QUALITY = 0.5

DEFAULT_MAX_WIDTH = 300
DEFAULT_QUALITY = 0.7

Rasterizer = Callable[[RasterImage, int, int, str, float, SurfaceLimits], str]


@dataclass(frozen=True)
class SizeBudget:
    """Soft limit triggers escalation; hard limit is the acceptance ceiling."""

    soft_limit: int = SOFT_LIMIT
    hard_limit: int = HARD_LIMIT


@dataclass(frozen=True)
class EncodingAttempt:
    """One materialized tier: its parameters and the string it produced."""

    tier: int
    format: str
    quality: float
    width: int
    height: int
    data_url: str = field(repr=False)

    @property
    def length(self) -> int:
        return len(self.data_url)


@dataclass(frozen=True)
class EncodedResult:
    """An accepted encoding, guaranteed to be under the hard limit."""

    data_url: str = field(repr=False)
    attempt: EncodingAttempt
    attempts: Tuple[EncodingAttempt, ...] = ()

    @property
    def tier(self) -> int:
        return self.attempt.tier

    @property
    def length(self) -> int:
        return len(self.data_url)

    def to_dict(self) -> dict:
        """Summary without the payload, for logs and CLI output."""
        return {
            "tier": self.attempt.tier,
            "format": self.attempt.format,
            "quality": self.attempt.quality,
            "width": self.attempt.width,
            "height": self.attempt.height,
            "length": self.length,
            "attempts": [
                {"tier": a.tier, "format": a.format, "length": a.length}
                for a in self.attempts
            ],
        }

    def __str__(self) -> str:
        return self.data_url


def tier0_format(content_type: str) -> str:
    """Keep PNG (the only lossless format), force everything else to JPEG."""
    return PNG if content_type == "image/png" else JPEG


class BudgetController:
    """
    Runs the tier policy for one or more independent encodes.

    Holds only immutable settings; every encode decodes into its own
    raster and draws on its own surfaces.
    """

    def __init__(
        self,
        budget: Optional[SizeBudget] = None,
        limits: Optional[SurfaceLimits] = None,
        rasterizer: Optional[Rasterizer] = None,
    ):
        self.budget = budget or SizeBudget()
        self.limits = limits or SurfaceLimits()
        self.rasterizer = rasterizer or render_data_url

    def _attempt(
        self,
        raster: RasterImage,
        tier: int,
        fmt: str,
        quality: float,
        width: int,
        height: int,
    ) -> EncodingAttempt:
        url = self.rasterizer(raster, width, height, fmt, quality, self.limits)
        attempt = EncodingAttempt(
            tier=tier, format=fmt, quality=quality,
            width=width, height=height, data_url=url,
        )
        logger.debug(
            f"Tier {tier}: {fmt} {width}x{height} q={quality} → {attempt.length:,} chars",
            extra={"tier": tier, "length": attempt.length},
        )
        return attempt

    def select_attempt(
        self,
        raster: RasterImage,
        max_width: int,
        quality: float,
    ) -> EncodedResult:
        """
        Run the decision tree on an already decoded image.

        Raises:
            CanvasError: If a surface cannot be allocated.
            SizeExceeded: If the final candidate is at or above the hard limit.
        """
        soft = self.budget.soft_limit
        hard = self.budget.hard_limit
        attempts: List[EncodingAttempt] = []

        width, height = scale_dimensions(raster.native_width, raster.native_height, max_width)
        first = self._attempt(raster, 0, tier0_format(raster.content_type), quality, width, height)
        attempts.append(first)

        if first.length <= soft:
            logger.info(
                f"Encoded {width}x{height} {first.format}: {first.length:,} chars (tier 0)",
                extra={"tier": 0, "length": first.length},
            )
            return EncodedResult(data_url=first.data_url, attempt=first, attempts=tuple(attempts))

        logger.warning(
            f"Image too large for a cell ({first.length:,} > {soft:,} chars), "
            f"retrying as JPEG q={FALLBACK_QUALITY}",
            extra={"tier": 1, "length": first.length},
        )
        candidate = self._attempt(raster, 1, JPEG, FALLBACK_QUALITY, width, height)
        attempts.append(candidate)

        if candidate.length > soft:
            small_w, small_h = shrink_dimensions(width, height, SHRINK_RATIO)
            logger.warning(
                f"Still too large ({candidate.length:,} chars), "
                f"shrinking {width}x{height} → {small_w}x{small_h}",
                extra={"tier": 2, "length": candidate.length},
            )
            candidate = self._attempt(raster, 2, JPEG, FALLBACK_QUALITY, small_w, small_h)
            attempts.append(candidate)

        if candidate.length >= hard:
            logger.warning(
                f"Giving up: {candidate.length:,} chars at tier {candidate.tier} "
                f"(limit {hard:,})",
                extra={"tier": candidate.tier, "length": candidate.length, "kind": SizeExceeded.kind},
            )
            raise SizeExceeded(candidate.length, hard, candidate.width, candidate.height)

        logger.info(
            f"Encoded {candidate.width}x{candidate.height} {candidate.format}: "
            f"{candidate.length:,} chars (tier {candidate.tier})",
            extra={"tier": candidate.tier, "length": candidate.length},
        )
        return EncodedResult(data_url=candidate.data_url, attempt=candidate, attempts=tuple(attempts))

    async def encode(
        self,
        data: bytes,
        content_type: Optional[str],
        max_width: int = DEFAULT_MAX_WIDTH,
        quality: float = DEFAULT_QUALITY,
    ) -> EncodedResult:
        """
        Decode data and fit it under the budget.

        Raises:
            ValidationError: If max_width or quality is out of range.
            DecodeError: If data is not a readable image.
            CanvasError: If a surface cannot be allocated.
            SizeExceeded: If no tier fits under the hard limit.
        """
        validate_max_width(max_width)
        quality = validate_quality(quality)

        raster = await decode_image(data, content_type)
        return self.select_attempt(raster, max_width, quality)


async def encode_image(
    data: bytes,
    content_type: Optional[str],
    max_width: int = DEFAULT_MAX_WIDTH,
    quality: float = DEFAULT_QUALITY,
    *,
    limits: Optional[SurfaceLimits] = None,
) -> EncodedResult:
    """Encode one image with a fresh controller. See BudgetController.encode."""
    controller = BudgetController(limits=limits)
    return await controller.encode(data, content_type, max_width, quality)
