"""
Rasterizer — Draw a raster image onto a fresh surface and serialize it.

Every call allocates its own surface at exactly the requested size and
throws it away afterwards. Output is a self-describing data URL:

    data:image/jpeg;base64,/9j/4AAQ...

JPEG surfaces start opaque white, so transparent pixels are flattened
onto white. PNG surfaces start fully transparent and keep alpha.
"""

from __future__ import annotations

import base64
import io
import logging
import math
from dataclasses import dataclass

from PIL import Image

from .decoder import RasterImage
from .errors import CanvasError

logger = logging.getLogger(__name__)

JPEG = "jpeg"
PNG = "png"
FORMATS = (JPEG, PNG)

# Largest surface a browser canvas will hand out
MAX_SURFACE_SIDE = 32767
MAX_SURFACE_AREA = 268_435_456


# ── Surfaces ─────────────────────────────────────────────────


@dataclass(frozen=True)
class SurfaceLimits:
    """Allocation limits for drawing surfaces."""

    max_side: int = MAX_SURFACE_SIDE
    max_area: int = MAX_SURFACE_AREA


def pillow_quality(quality: float) -> int:
    """Map a [0, 1] quality factor onto Pillow's 1-100 JPEG scale."""
    return max(1, int(math.floor(quality * 100 + 0.5)))


def data_url(payload: bytes, fmt: str) -> str:
    """Wrap encoded bytes in a base64 data URL."""
    encoded = base64.b64encode(payload).decode("ascii")
    return f"data:image/{fmt};base64,{encoded}"


def new_surface(
    width: int,
    height: int,
    fmt: str,
    limits: SurfaceLimits = SurfaceLimits(),
) -> Image.Image:
    """
    Allocate a blank drawing surface.

    Raises:
        CanvasError: If the size is empty, over the limits, or Pillow
            cannot allocate the buffer.
    """
    if width < 1 or height < 1:
        raise CanvasError(width, height, "surface has no pixels")
    if width > limits.max_side or height > limits.max_side:
        raise CanvasError(width, height, f"side exceeds {limits.max_side}px")
    if width * height > limits.max_area:
        raise CanvasError(width, height, f"area exceeds {limits.max_area:,} pixels")

    try:
        if fmt == JPEG:
            return Image.new("RGB", (width, height), (255, 255, 255))
        return Image.new("RGBA", (width, height), (0, 0, 0, 0))
    except (MemoryError, ValueError) as e:
        raise CanvasError(width, height, str(e) or type(e).__name__)


# ── Encoding ─────────────────────────────────────────────────


def render(
    raster: RasterImage,
    width: int,
    height: int,
    fmt: str,
    quality: float,
    limits: SurfaceLimits = SurfaceLimits(),
) -> bytes:
    """
    Draw raster at width x height and encode it as fmt.

    Args:
        raster: Decoded source image.
        width: Surface width in pixels.
        height: Surface height in pixels.
        fmt: "jpeg" or "png".
        quality: Quality factor in [0, 1]; ignored for PNG.
        limits: Surface allocation limits.

    Returns:
        Encoded image bytes.
    """
    if fmt not in FORMATS:
        raise ValueError(f"Unsupported output format: {fmt!r} (expected one of {FORMATS})")

    surface = new_surface(width, height, fmt, limits)

    drawn = raster.image
    if drawn.size != (width, height):
        drawn = drawn.resize((width, height), Image.LANCZOS)

    if fmt == JPEG and raster.has_alpha:
        surface.paste(drawn, mask=drawn.getchannel("A"))
    else:
        surface.paste(drawn)

    buf = io.BytesIO()
    if fmt == JPEG:
        surface.save(buf, format="JPEG", quality=pillow_quality(quality))
    else:
        surface.save(buf, format="PNG")
    return buf.getvalue()


def render_data_url(
    raster: RasterImage,
    width: int,
    height: int,
    fmt: str,
    quality: float,
    limits: SurfaceLimits = SurfaceLimits(),
) -> str:
    """Render raster and return it as a data URL."""
    url = data_url(render(raster, width, height, fmt, quality, limits), fmt)
    logger.debug(f"Rendered {fmt} {width}x{height} q={quality}: {len(url):,} chars")
    return url
