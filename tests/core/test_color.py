"""
Unit Tests for Colour Conversion and the Correction Filter
"""

import pytest

from cvd_toolkit.core.models import FilterParameters, Hsl, Rgb
from cvd_toolkit.core.utils.color import (
    hsl_to_rgb,
    rgb_hue,
    rgb_to_hsl,
    rotate_hue,
    to_rgb8,
)
from cvd_toolkit.core.utils.color_filter import apply_to_color, selective_hue_factor


class TestColorConversion:
    """Tests for the HSL/sRGB helpers."""

    @pytest.mark.parametrize("hsl,expected", [
        (Hsl(0, 100, 50), Rgb(255, 0, 0)),
        (Hsl(120, 100, 50), Rgb(0, 255, 0)),
        (Hsl(240, 100, 50), Rgb(0, 0, 255)),
        (Hsl(0, 0, 100), Rgb(255, 255, 255)),
        (Hsl(0, 0, 0), Rgb(0, 0, 0)),
    ])
    def test_hsl_to_rgb_when_primary_then_exact(self, hsl, expected):
        assert hsl_to_rgb(hsl) == expected

    def test_hsl_to_rgb_when_hue_out_of_range_then_wrapped(self):
        assert hsl_to_rgb(Hsl(480, 100, 50)) == hsl_to_rgb(Hsl(120, 100, 50))
        assert hsl_to_rgb(Hsl(-240, 100, 50)) == hsl_to_rgb(Hsl(120, 100, 50))

    def test_hsl_to_rgb_when_jitter_past_limits_then_clamped(self):
        assert hsl_to_rgb(Hsl(0, 130, 50)) == Rgb(255, 0, 0)
        assert hsl_to_rgb(Hsl(0, 50, 110)) == Rgb(255, 255, 255)

    def test_rgb_to_hsl_when_pure_green_then_hue_120(self):
        hsl = rgb_to_hsl(Rgb(0, 255, 0))
        assert hsl.h == pytest.approx(120)
        assert hsl.s == pytest.approx(100)
        assert hsl.l == pytest.approx(50)

    def test_rgb_to_hsl_when_grey_then_hue_zero_not_nan(self):
        hsl = rgb_to_hsl(Rgb(128, 128, 128))
        assert hsl.h == 0
        assert hsl.s == pytest.approx(0)
        assert hsl.l == pytest.approx(128 / 255 * 100)

    @pytest.mark.parametrize("rgb", [Rgb(200, 60, 40), Rgb(60, 140, 70), Rgb(12, 34, 250)])
    def test_rgb_to_hsl_when_converted_back_then_same_channels(self, rgb):
        assert hsl_to_rgb(rgb_to_hsl(rgb)) == rgb

    def test_rgb_hue_when_grey_then_none(self):
        assert rgb_hue((128, 128, 128)) is None

    def test_rgb_hue_when_float_channels_then_degrees(self):
        assert rgb_hue([255.0, 127.5, 0.0]) == pytest.approx(30, abs=0.01)

    def test_rotate_hue_when_past_360_then_wrapped(self):
        assert to_rgb8(rotate_hue((0, 0, 255), 240)) == Rgb(0, 255, 0)

    def test_rotate_hue_when_red_by_120_then_green(self):
        assert to_rgb8(rotate_hue((255, 0, 0), 120)) == Rgb(0, 255, 0)

    def test_rotate_hue_when_grey_then_unchanged(self):
        assert to_rgb8(rotate_hue((90, 90, 90), 45)) == Rgb(90, 90, 90)

    def test_to_rgb8_when_out_of_range_then_clamped(self):
        assert to_rgb8([-10.0, 127.6, 300.0]) == Rgb(0, 128, 255)

    def test_hex_when_called_then_lowercase_six_digits(self):
        assert Rgb(255, 0, 16).hex == "#ff0010"


class TestSelectiveHueFactor:
    """Tests for selective_hue_factor()."""

    @pytest.mark.parametrize("hue,expected", [
        (0, 1.0), (40, 0.5), (90, 1.0), (150, 0.5), (200, 0.2), (320, 0.5), (359.9, pytest.approx(1.0, abs=0.01)),
    ])
    def test_factor_when_hue_then_piecewise(self, hue, expected):
        assert selective_hue_factor(hue) == expected

    def test_factor_when_any_hue_then_between_0_2_and_1(self):
        assert all(0.2 <= selective_hue_factor(h) <= 1.0 for h in range(0, 360, 3))


class TestApplyToColor:
    """Tests for apply_to_color()."""

    def test_apply_when_identity_params_then_same_object(self):
        color = Rgb(200, 40, 40)
        assert apply_to_color(color, FilterParameters()) is color

    def test_apply_when_zero_intensity_then_unchanged(self):
        color = Rgb(200, 40, 40)
        params = FilterParameters(hue_shift=30, intensity=0, saturation_boost=20)
        assert apply_to_color(color, params) == color

    def test_apply_when_only_intensity_then_unchanged(self):
        color = Rgb(12, 200, 99)
        assert apply_to_color(color, FilterParameters(intensity=1.0)) == color

    def test_apply_when_green_gain_then_green_raised(self):
        result = apply_to_color(Rgb(100, 100, 100), FilterParameters(intensity=1.0, green_gain=0.2))
        assert result == Rgb(100, 120, 100)

    def test_apply_when_brightness_then_scaled(self):
        result = apply_to_color(Rgb(100, 50, 20), FilterParameters(intensity=1.0, brightness=10))
        assert result == Rgb(110, 55, 22)

    def test_apply_when_hue_shift_then_red_moves_towards_yellow(self):
        result = apply_to_color(Rgb(255, 0, 0), FilterParameters(intensity=1.0, hue_shift=30))
        hue = rgb_hue(result)
        assert hue == pytest.approx(30, abs=1)

    def test_apply_when_hue_shift_on_grey_then_unchanged(self):
        grey = Rgb(120, 120, 120)
        assert apply_to_color(grey, FilterParameters(intensity=1.0, hue_shift=45)) == grey

    def test_apply_when_contrast_then_spread_from_mid_grey(self):
        result = apply_to_color(Rgb(200, 55, 128), FilterParameters(intensity=1.0, contrast=20))
        assert result.r > 200
        assert result.g < 55

    def test_apply_when_saturation_negative_then_towards_grey(self):
        original = Rgb(220, 40, 40)
        result = apply_to_color(original, FilterParameters(intensity=1.0, saturation_boost=-50))
        assert max(result) - min(result) < max(original) - min(original)

    def test_apply_when_hsl_input_then_hsl_output(self):
        result = apply_to_color(Hsl(0, 100, 50), FilterParameters(intensity=1.0, brightness=-20))
        assert isinstance(result, Hsl)
        assert result.l < 50

    def test_apply_when_extreme_values_then_channels_stay_in_range(self):
        params = FilterParameters(
            hue_shift=60, intensity=1.5, saturation_boost=50, brightness=20,
            contrast=30, red_gain=0.3, green_gain=0.3, blue_gain=0.3,
        )
        result = apply_to_color(Rgb(250, 250, 5), params)
        assert all(0 <= c <= 255 for c in result)
