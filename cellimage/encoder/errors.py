"""
Encoder Errors — The three ways an encode can fail.

Each kind is its own exception class so callers can tell them apart
without inspecting messages:

- DecodeError:  the bytes are not an image we can read
- CanvasError:  the drawing surface could not be allocated
- SizeExceeded: every tier was tried and the result is still too big

None of them is retried by the encoder. Collaborators catch
``ENCODE_ERRORS`` and show ``USER_MESSAGE``.
"""

from __future__ import annotations

from typing import Optional

USER_MESSAGE = (
    "The image is too detailed or too large. "
    "Try a simpler or smaller image."
)


class DecodeError(Exception):
    """Raised when input bytes cannot be decoded into a raster image."""

    kind = "decode_error"

    def __init__(self, reason: str, content_type: Optional[str] = None):
        self.reason = reason
        self.content_type = content_type
        super().__init__(f"Cannot decode image ({content_type or 'unknown type'}): {reason}")


class CanvasError(Exception):
    """Raised when a drawing surface cannot be allocated."""

    kind = "canvas_error"

    def __init__(self, width: int, height: int, reason: str):
        self.width = width
        self.height = height
        self.reason = reason
        super().__init__(f"Cannot allocate {width}x{height} surface: {reason}")


class SizeExceeded(Exception):
    """
    Raised when the final candidate is at or above the hard limit.

    Carries the measured length and the dimensions of the last attempt,
    never the encoded string itself.
    """

    kind = "size_exceeded"

    def __init__(self, length: int, limit: int, width: int, height: int):
        self.length = length
        self.limit = limit
        self.width = width
        self.height = height
        super().__init__(
            f"Encoded image is {length:,} chars at {width}x{height} "
            f"(limit {limit:,})"
        )


ENCODE_ERRORS = (DecodeError, CanvasError, SizeExceeded)
