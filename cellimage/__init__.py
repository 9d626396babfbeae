"""
Cell Image Encoder — Embeddable images that fit in a spreadsheet cell.

    from cellimage import encode_image, ENCODE_ERRORS, USER_MESSAGE

    try:
        result = await encode_image(data, "image/jpeg", max_width=300, quality=0.6)
    except ENCODE_ERRORS:
        show_error(USER_MESSAGE)
"""

from .encoder import (
    ENCODE_ERRORS,
    HARD_LIMIT,
    SOFT_LIMIT,
    USER_MESSAGE,
    CanvasError,
    DecodeError,
    EncodedResult,
    SizeBudget,
    SizeExceeded,
    encode_image,
)

__version__ = "0.1.0"

__all__ = [
    "encode_image",
    "EncodedResult",
    "SizeBudget",
    "SOFT_LIMIT",
    "HARD_LIMIT",
    "DecodeError",
    "CanvasError",
    "SizeExceeded",
    "ENCODE_ERRORS",
    "USER_MESSAGE",
]
