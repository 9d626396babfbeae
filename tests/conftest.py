"""
Shared fixtures for encoder tests.

Builds real images in memory with Pillow and provides a scripted
rasterizer that returns data URLs of exact lengths, so the tier policy
can be driven to any boundary without depending on encoder output sizes.
"""

from __future__ import annotations

import io
import random
from typing import Callable, List, Optional, Tuple

import pytest
from PIL import Image

from cellimage.encoder.decoder import RasterImage


def encode_pil(img: Image.Image, fmt: str, **kwargs) -> bytes:
    buf = io.BytesIO()
    img.save(buf, format=fmt, **kwargs)
    return buf.getvalue()


def noise_image(width: int, height: int, seed: int = 0) -> Image.Image:
    """Random RGB noise: close to incompressible."""
    rng = random.Random(seed)
    return Image.frombytes("RGB", (width, height), rng.randbytes(width * height * 3))


class ScriptedRasterizer:
    """
    Stands in for render_data_url.

    Returns data URLs whose total lengths follow the given script, one
    entry per call, and records the parameters of each call.
    """

    def __init__(self, lengths: List[int]):
        self.lengths = list(lengths)
        self.calls: List[Tuple[str, float, int, int]] = []

    def __call__(self, raster, width, height, fmt, quality, limits) -> str:
        self.calls.append((fmt, quality, width, height))
        length = self.lengths[len(self.calls) - 1]
        prefix = f"data:image/{fmt};base64,"
        return prefix + "A" * (length - len(prefix))


@pytest.fixture
def make_png() -> Callable[..., bytes]:
    def _make(width: int, height: int, color=(255, 0, 0)) -> bytes:
        return encode_pil(Image.new("RGB", (width, height), color), "PNG")
    return _make


@pytest.fixture
def make_jpeg() -> Callable[..., bytes]:
    def _make(width: int, height: int, color=(0, 128, 255)) -> bytes:
        return encode_pil(Image.new("RGB", (width, height), color), "JPEG", quality=95)
    return _make


@pytest.fixture
def make_rgba_png() -> Callable[..., bytes]:
    """PNG whose left half is fully transparent."""
    def _make(width: int, height: int) -> bytes:
        img = Image.new("RGBA", (width, height), (255, 0, 0, 255))
        img.paste((0, 0, 0, 0), (0, 0, width // 2, height))
        return encode_pil(img, "PNG")
    return _make


@pytest.fixture
def make_noise_png() -> Callable[..., bytes]:
    def _make(width: int, height: int, seed: int = 0) -> bytes:
        return encode_pil(noise_image(width, height, seed), "PNG")
    return _make


@pytest.fixture
def make_raster() -> Callable[..., RasterImage]:
    """A RasterImage with arbitrary native dimensions and a tiny pixel buffer."""
    def _make(
        native_width: int,
        native_height: int,
        content_type: str = "image/jpeg",
        image: Optional[Image.Image] = None,
    ) -> RasterImage:
        return RasterImage(
            image=image or Image.new("RGB", (4, 3), (10, 20, 30)),
            native_width=native_width,
            native_height=native_height,
            content_type=content_type,
        )
    return _make
