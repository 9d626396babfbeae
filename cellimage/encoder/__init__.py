"""
Encoder — Size-budgeted image encoding.

Decoder → Scaler → Rasterizer, orchestrated by the Budget Controller.
"""

from .budget import (
    HARD_LIMIT,
    SOFT_LIMIT,
    BudgetController,
    EncodedResult,
    EncodingAttempt,
    SizeBudget,
    encode_image,
)
from .decoder import RasterImage, decode_image
from .errors import ENCODE_ERRORS, USER_MESSAGE, CanvasError, DecodeError, SizeExceeded
from .raster import SurfaceLimits

__all__ = [
    "BudgetController",
    "EncodedResult",
    "EncodingAttempt",
    "SizeBudget",
    "SurfaceLimits",
    "RasterImage",
    "SOFT_LIMIT",
    "HARD_LIMIT",
    "encode_image",
    "decode_image",
    "DecodeError",
    "CanvasError",
    "SizeExceeded",
    "ENCODE_ERRORS",
    "USER_MESSAGE",
]
