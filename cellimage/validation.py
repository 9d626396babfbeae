"""
Validation — Parameter and input validation for the encoder.

Provides consistent validation patterns for the values callers hand to
the encoder, the CLI and the configuration loader.

## Usage

    from cellimage.validation import validate_max_width, validate_quality

    try:
        validate_max_width(max_width)
        validate_quality(quality)
    except ValidationError as e:
        print(f"Validation failed: {e}")
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional


class ValidationError(Exception):
    """Raised when validation fails."""

    def __init__(self, message: str, field: Optional[str] = None, details: Optional[Dict] = None):
        self.message = message
        self.field = field
        self.details = details or {}
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        if self.field:
            return f"{self.field}: {self.message}"
        return self.message


def validate_max_width(max_width: Any, field: str = "max_width") -> int:
    """Validate a maximum width: a positive integer pixel count."""
    if isinstance(max_width, bool) or not isinstance(max_width, int):
        raise ValidationError(
            f"must be a positive integer, got {max_width!r}",
            field=field,
        )
    if max_width <= 0:
        raise ValidationError(f"must be positive, got {max_width}", field=field)
    return max_width


def validate_quality(quality: Any, field: str = "quality") -> float:
    """Validate a quality factor in [0, 1]."""
    if isinstance(quality, bool) or not isinstance(quality, (int, float)):
        raise ValidationError(f"must be a number, got {quality!r}", field=field)
    if not 0.0 <= quality <= 1.0:
        raise ValidationError(f"must be between 0 and 1, got {quality}", field=field)
    return float(quality)


def validate_positive_int(value: Any, field: str) -> int:
    """Parse and validate a positive integer (env vars arrive as strings)."""
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"must be an integer, got {value!r}", field=field)
    if number <= 0:
        raise ValidationError(f"must be positive, got {number}", field=field)
    return number


def validate_image_file(path: Path) -> bytes:
    """
    Validate that an image file exists and read its bytes.

    Returns:
        The raw file content

    Raises:
        ValidationError: If the path is missing, not a file, or unreadable
    """
    if not path.exists():
        raise ValidationError(f"Image file does not exist: {path}")
    if not path.is_file():
        raise ValidationError(f"Image path is not a file: {path}")

    try:
        return path.read_bytes()
    except PermissionError:
        raise ValidationError(f"Image file is not readable: {path}")
    except OSError as e:
        raise ValidationError(f"Image file cannot be read: {e}")
