"""
Decoder — Raw bytes in, raster image out.

Decoding is the only asynchronous step of an encode. The blocking
Pillow work runs in the event loop's default executor and the rest of
the pipeline waits for it to finish. A failed decode ends the encode;
no fallback tier is tried for bytes that are not an image.
"""

from __future__ import annotations

import asyncio
import io
import logging
from dataclasses import dataclass
from typing import Optional

from PIL import Image, UnidentifiedImageError

from .errors import DecodeError

logger = logging.getLogger(__name__)

ALPHA_MODES = ("RGBA", "LA", "PA")


@dataclass
class RasterImage:
    """A decoded image owned by a single encode call."""

    image: Image.Image
    native_width: int
    native_height: int
    content_type: str
    source_format: Optional[str] = None

    @property
    def has_alpha(self) -> bool:
        return self.image.mode == "RGBA"


def normalize_content_type(content_type: Optional[str]) -> str:
    """Lower-case a MIME type and drop parameters ("; charset=...")."""
    if not content_type:
        return ""
    return content_type.split(";", 1)[0].strip().lower()


def _has_alpha(img: Image.Image) -> bool:
    if img.mode in ALPHA_MODES:
        return True
    return img.mode == "P" and "transparency" in img.info


def decode_bytes(data: bytes, content_type: Optional[str] = None) -> RasterImage:
    """
    Decode image bytes synchronously.

    Args:
        data: Raw image bytes.
        content_type: Declared MIME type. Only carried along for format
            selection; the bytes themselves decide how they are decoded.

    Returns:
        RasterImage in RGB or RGBA mode.

    Raises:
        DecodeError: If the bytes are empty, corrupt or not an image.
    """
    hint = normalize_content_type(content_type)
    if not data:
        raise DecodeError("empty payload", content_type=hint or None)

    try:
        with Image.open(io.BytesIO(data)) as img:
            source_format = img.format
            # First frame only for animated inputs
            img.load()
            if _has_alpha(img):
                decoded = img.convert("RGBA")
            else:
                decoded = img.convert("RGB")
    except Image.DecompressionBombError as e:
        raise DecodeError(f"image too large to decode safely: {e}", content_type=hint or None)
    except UnidentifiedImageError:
        raise DecodeError("unrecognized image data", content_type=hint or None)
    except (OSError, SyntaxError, ValueError) as e:
        raise DecodeError(str(e) or type(e).__name__, content_type=hint or None)

    width, height = decoded.size
    logger.debug(f"Decoded {source_format} {width}x{height} ({hint or 'no type hint'})")

    return RasterImage(
        image=decoded,
        native_width=width,
        native_height=height,
        content_type=hint,
        source_format=source_format,
    )


async def decode_image(data: bytes, content_type: Optional[str] = None) -> RasterImage:
    """Decode image bytes without blocking the event loop."""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, decode_bytes, data, content_type)
