"""
Tests for the budget controller.

The tier policy is driven with a scripted rasterizer so every boundary
(exactly at / one over the soft and hard limits) can be hit precisely.
Real-image tests then check the same invariants end to end.

Covers:
- Tier 0 pass-through
- Tier 1 escalation (forced JPEG, fixed quality 0.5, same size)
- Tier 2 escalation (floor-shrunk size, JPEG, 0.5)
- Hard ceiling and SizeExceeded
- Format selection from the content-type hint
- Validation, decode and canvas failures
- Determinism and independent concurrent encodes
"""

import asyncio

import pytest

from cellimage.encoder.budget import (
    FALLBACK_QUALITY,
    HARD_LIMIT,
    SOFT_LIMIT,
    BudgetController,
    SizeBudget,
    encode_image,
    tier0_format,
)
from cellimage.encoder.decoder import decode_bytes
from cellimage.encoder.errors import ENCODE_ERRORS, CanvasError, DecodeError, SizeExceeded
from cellimage.encoder.raster import SurfaceLimits, render_data_url
from cellimage.validation import ValidationError

from conftest import ScriptedRasterizer


def _run(lengths, raster, max_width=300, quality=0.7):
    rasterizer = ScriptedRasterizer(lengths)
    controller = BudgetController(rasterizer=rasterizer)
    return controller.select_attempt(raster, max_width, quality), rasterizer


class TestConstants:
    def test_budget(self):
        assert SOFT_LIMIT == 45000
        assert HARD_LIMIT == 49000
        assert SizeBudget() == SizeBudget(soft_limit=45000, hard_limit=49000)

    def test_fallback_quality(self):
        assert FALLBACK_QUALITY == 0.5


# ═══════════════════════════════════════════════════════════════════
# Decision tree (scripted lengths)
# ═══════════════════════════════════════════════════════════════════


class TestTierZero:
    """Pass-through when the first attempt fits."""

    def test_photo_accepted_at_tier0(self, make_raster):
        """4000x3000 photo at max width 300 → 300x225 JPEG, returned unchanged."""
        result, rasterizer = _run([30000], make_raster(4000, 3000), quality=0.9)

        assert rasterizer.calls == [("jpeg", 0.9, 300, 225)]
        assert result.tier == 0
        assert result.length == 30000
        assert (result.attempt.width, result.attempt.height) == (300, 225)
        assert result.attempt.quality == 0.9

    def test_exactly_soft_limit_is_accepted(self, make_raster):
        result, rasterizer = _run([SOFT_LIMIT], make_raster(4000, 3000))
        assert result.tier == 0
        assert len(rasterizer.calls) == 1

    def test_icon_not_upscaled(self, make_raster):
        result, rasterizer = _run([2000], make_raster(64, 48, "image/png"), max_width=64)
        assert rasterizer.calls == [("png", 0.7, 64, 48)]
        assert result.attempt.format == "png"

    def test_result_is_the_tier0_string(self, make_raster):
        result, _ = _run([1234], make_raster(100, 100))
        assert result.data_url == result.attempts[0].data_url
        assert str(result) == result.data_url


class TestTierOne:
    """Forced JPEG at quality 0.5, same dimensions."""

    def test_escalates_over_soft_limit(self, make_raster):
        result, rasterizer = _run([46000, 40000], make_raster(4000, 3000), quality=0.9)

        assert rasterizer.calls == [
            ("jpeg", 0.9, 300, 225),
            ("jpeg", 0.5, 300, 225),
        ]
        assert result.tier == 1
        assert result.length == 40000
        assert result.attempt.quality == 0.5

    def test_one_over_soft_limit_escalates(self, make_raster):
        result, rasterizer = _run([SOFT_LIMIT + 1, 100], make_raster(4000, 3000))
        assert result.tier == 1
        assert len(rasterizer.calls) == 2

    def test_png_forced_to_jpeg(self, make_raster):
        """Transparency is only kept at tier 0."""
        result, rasterizer = _run([60000, 20000], make_raster(150, 150, "image/png"))

        assert rasterizer.calls[0][0] == "png"
        assert rasterizer.calls[1] == ("jpeg", 0.5, 150, 150)
        assert result.attempt.format == "jpeg"
        assert result.data_url.startswith("data:image/jpeg;base64,")

    def test_ignores_requested_quality(self, make_raster):
        _, rasterizer = _run([50000, 100], make_raster(4000, 3000), quality=0.1)
        assert rasterizer.calls[1][1] == 0.5

    def test_exactly_soft_limit_accepted_at_tier1(self, make_raster):
        result, rasterizer = _run([50000, SOFT_LIMIT], make_raster(4000, 3000))
        assert result.tier == 1
        assert len(rasterizer.calls) == 2


class TestTierTwo:
    """Floor-shrunk dimensions, JPEG, quality 0.5."""

    def test_detailed_logo_shrunk(self, make_raster):
        """300x225 still 47000 chars at tier 1 → 180x135 at tier 2."""
        result, rasterizer = _run([60000, 47000, 30000], make_raster(300, 225, "image/png"))

        assert rasterizer.calls == [
            ("png", 0.7, 300, 225),
            ("jpeg", 0.5, 300, 225),
            ("jpeg", 0.5, 180, 135),
        ]
        assert result.tier == 2
        assert (result.attempt.width, result.attempt.height) == (180, 135)
        assert result.length == 30000

    def test_shrink_applies_to_scaled_not_native_size(self, make_raster):
        _, rasterizer = _run([60000, 60000, 100], make_raster(4000, 3000))
        assert rasterizer.calls[2][2:] == (180, 135)

    def test_shrink_floors(self, make_raster):
        # 1600x1000 → 300x188 (rounded); 188 * 0.6 = 112.8 → 112 (floored)
        _, rasterizer = _run([60000, 60000, 100], make_raster(1600, 1000))
        assert rasterizer.calls[0][2:] == (300, 188)
        assert rasterizer.calls[2][2:] == (180, 112)

    def test_tier1_between_limits_still_escalates(self, make_raster):
        """A tier-1 result over the soft limit is never accepted, even under the hard one."""
        result, rasterizer = _run([60000, 46000, 40000], make_raster(4000, 3000))
        assert result.tier == 2
        assert len(rasterizer.calls) == 3

    def test_tier2_between_limits_accepted(self, make_raster):
        result, _ = _run([60000, 60000, HARD_LIMIT - 1], make_raster(4000, 3000))
        assert result.tier == 2
        assert result.length == HARD_LIMIT - 1

    def test_attempts_recorded_in_order(self, make_raster):
        result, _ = _run([60000, 50000, 30000], make_raster(4000, 3000))
        assert [a.tier for a in result.attempts] == [0, 1, 2]
        assert [a.length for a in result.attempts] == [60000, 50000, 30000]


class TestSizeExceeded:
    """The single failure gate after the decision tree."""

    def test_fails_over_hard_limit(self, make_raster):
        with pytest.raises(SizeExceeded) as exc_info:
            _run([80000, 60000, 49500], make_raster(4000, 3000))

        err = exc_info.value
        assert err.length == 49500
        assert err.limit == HARD_LIMIT
        assert (err.width, err.height) == (180, 135)
        assert not hasattr(err, "data_url")

    def test_exactly_hard_limit_fails(self, make_raster):
        with pytest.raises(SizeExceeded):
            _run([80000, 60000, HARD_LIMIT], make_raster(4000, 3000))

    def test_no_fourth_tier(self, make_raster):
        rasterizer = ScriptedRasterizer([80000, 80000, 80000, 10])
        controller = BudgetController(rasterizer=rasterizer)
        with pytest.raises(SizeExceeded):
            controller.select_attempt(make_raster(4000, 3000), 300, 0.7)
        assert len(rasterizer.calls) == 3

    def test_error_kinds_are_distinct(self):
        kinds = [DecodeError, CanvasError, SizeExceeded]
        for kind in kinds:
            others = tuple(k for k in kinds if k is not kind)
            assert not issubclass(kind, others)
        assert set(ENCODE_ERRORS) == set(kinds)


class TestFormatSelection:
    @pytest.mark.parametrize("content_type,expected", [
        ("image/png", "png"),
        ("image/jpeg", "jpeg"),
        ("image/webp", "jpeg"),
        ("image/gif", "jpeg"),
        ("image/bmp", "jpeg"),
        ("", "jpeg"),
    ])
    def test_tier0_format(self, content_type, expected):
        assert tier0_format(content_type) == expected


# ═══════════════════════════════════════════════════════════════════
# Full pipeline (real Pillow encoding)
# ═══════════════════════════════════════════════════════════════════


class TestEncodeImage:
    """End to end with real Pillow encoding."""

    def test_solid_photo_passes_through(self, make_jpeg):
        data = make_jpeg(2000, 1500)
        result = asyncio.run(encode_image(data, "image/jpeg", max_width=300, quality=0.6))

        assert result.tier == 0
        assert result.data_url.startswith("data:image/jpeg;base64,")
        assert (result.attempt.width, result.attempt.height) == (300, 225)
        assert result.length <= SOFT_LIMIT

    def test_tier0_output_is_byte_identical_to_direct_render(self, make_png):
        data = make_png(640, 480)
        result = asyncio.run(encode_image(data, "image/png", max_width=150, quality=0.7))

        raster = decode_bytes(data, "image/png")
        assert result.data_url == render_data_url(raster, 150, 113, "png", 0.7)

    def test_small_icon_keeps_png(self, make_rgba_png):
        result = asyncio.run(encode_image(make_rgba_png(64, 48), "image/png", max_width=64, quality=0.8))
        assert result.tier == 0
        assert result.attempt.format == "png"
        assert (result.attempt.width, result.attempt.height) == (64, 48)

    def test_noisy_image_stays_under_hard_limit(self, make_noise_png):
        """Whatever path is taken, a returned result is always under the hard limit."""
        data = make_noise_png(300, 225)
        try:
            result = asyncio.run(encode_image(data, "image/png", max_width=300, quality=0.9))
        except SizeExceeded as e:
            assert e.length >= HARD_LIMIT
        else:
            assert result.tier >= 1
            assert result.length < HARD_LIMIT
            assert result.attempt.format == "jpeg"

    def test_incompressible_image_fails(self, make_noise_png):
        data = make_noise_png(2000, 1500)
        with pytest.raises(SizeExceeded) as exc_info:
            asyncio.run(encode_image(data, "image/png", max_width=2000, quality=1.0))
        assert (exc_info.value.width, exc_info.value.height) == (1200, 900)

    def test_deterministic(self, make_noise_png):
        data = make_noise_png(200, 150, seed=7)
        first = asyncio.run(encode_image(data, "image/png", max_width=120, quality=0.7))
        second = asyncio.run(encode_image(data, "image/png", max_width=120, quality=0.7))
        assert first.data_url == second.data_url
        assert first.to_dict() == second.to_dict()

    def test_concurrent_encodes_are_independent(self, make_png, make_jpeg):
        async def both():
            return await asyncio.gather(
                encode_image(make_png(400, 200, (0, 255, 0)), "image/png", 100, 0.7),
                encode_image(make_jpeg(90, 60), "image/jpeg", 300, 0.7),
            )

        png_result, jpeg_result = asyncio.run(both())
        assert (png_result.attempt.format, png_result.attempt.width, png_result.attempt.height) == ("png", 100, 50)
        assert (jpeg_result.attempt.format, jpeg_result.attempt.width, jpeg_result.attempt.height) == ("jpeg", 90, 60)

    def test_decode_error_stops_before_any_tier(self):
        rasterizer = ScriptedRasterizer([10])
        controller = BudgetController(rasterizer=rasterizer)
        with pytest.raises(DecodeError):
            asyncio.run(controller.encode(b"not an image", "image/png", 300, 0.7))
        assert rasterizer.calls == []

    def test_canvas_error_propagates(self, make_png):
        data = make_png(200, 50)
        with pytest.raises(CanvasError):
            asyncio.run(encode_image(data, "image/png", 300, 0.7, limits=SurfaceLimits(max_side=100)))

    def test_zero_sized_tier2_surface_is_canvas_error(self, make_raster):
        """A 1px-wide image shrinks to width 0 at tier 2."""
        from PIL import Image

        raster = make_raster(1, 100, image=Image.new("RGB", (1, 100)))
        controller = BudgetController(budget=SizeBudget(soft_limit=10, hard_limit=20))
        with pytest.raises(CanvasError) as exc_info:
            controller.select_attempt(raster, 300, 0.7)
        assert exc_info.value.width == 0

    @pytest.mark.parametrize("max_width,quality", [(0, 0.7), (-5, 0.7), (300, 1.5), (300, -0.1)])
    def test_invalid_parameters_rejected_before_decode(self, max_width, quality):
        with pytest.raises(ValidationError):
            asyncio.run(encode_image(b"not an image", "image/png", max_width, quality))
