"""
Module: core.utils.color

Purpose:
    HSL/sRGB conversion helpers working in the units used by palettes
    (degrees, percent) and tiles (0-255).

Key Functions:
    - hsl_to_rgb(hsl): Palette colour to 8-bit sRGB
    - rgb_to_hsl(rgb): 0-255 channels to Hsl
    - rgb_hue(rgb): Hue angle of an sRGB colour (None when achromatic)
    - rotate_hue(rgb, degrees): Rotate hue keeping HSL saturation/lightness
    - to_rgb8(values): Clamp and round float channels

Dependencies:
    - coloraide: Colour space conversion
    - numpy: Vectorised clamping

Used By:
    - generation.generator
    - core.utils.color_filter
"""

from __future__ import annotations

import math
from typing import Optional, Sequence

import numpy as np
from coloraide import Color

from ..models.color import Hsl, Rgb


def normalize_hue(h: float) -> float:
    """Wrap a hue angle into [0, 360)."""
    return h % 360.0


def to_rgb8(values: Sequence[float]) -> Rgb:
    """Clamp float channels (0-255 scale) and round to an Rgb."""
    u8 = np.round(np.clip(np.asarray(values, dtype=np.float64), 0.0, 255.0)).astype(np.uint8)
    return Rgb(int(u8[0]), int(u8[1]), int(u8[2]))


def _srgb(rgb: Sequence[float]) -> Color:
    r, g, b = np.clip(np.asarray(rgb, dtype=np.float64), 0.0, 255.0) / 255.0
    return Color("srgb", [float(r), float(g), float(b)])


def _channels(color: Color) -> list[float]:
    srgb = color.convert("srgb").clip()
    return [srgb["red"] * 255.0, srgb["green"] * 255.0, srgb["blue"] * 255.0]


def _hsl(rgb: Sequence[float]) -> Color:
    return _srgb(rgb).convert("hsl")


def hsl_to_rgb(hsl: Hsl) -> Rgb:
    """
    Convert a palette HSL colour to 8-bit sRGB.

    Hue is wrapped, saturation and lightness are clamped to 0-100 first.

    Example:
        >>> hsl_to_rgb(Hsl(120, 100, 50))
        Rgb(r=0, g=255, b=0)
    """
    s = min(100.0, max(0.0, hsl.s)) / 100.0
    l = min(100.0, max(0.0, hsl.l)) / 100.0
    return to_rgb8(_channels(Color("hsl", [normalize_hue(hsl.h), s, l])))


def rgb_to_hsl(rgb: Sequence[float]) -> Hsl:
    """Convert 0-255 channels to Hsl (hue 0 for achromatic colours)."""
    color = _hsl(rgb)
    hue = color["hue"]
    return Hsl(
        0.0 if math.isnan(hue) else normalize_hue(hue),
        color["saturation"] * 100.0,
        color["lightness"] * 100.0,
    )


def rgb_hue(rgb: Sequence[float]) -> Optional[float]:
    """Hue angle in degrees, or None for greys."""
    if max(rgb) == min(rgb):
        return None
    hue = _hsl(rgb)["hue"]
    return None if math.isnan(hue) else normalize_hue(hue)


def rotate_hue(rgb: Sequence[float], degrees: float) -> list[float]:
    """
    Rotate the HSL hue of a 0-255 colour by ``degrees``.

    Saturation and lightness are preserved, greys are returned unchanged.
    Returns float channels on the 0-255 scale.
    """
    hue = rgb_hue(rgb)
    if hue is None:
        return [float(c) for c in np.clip(np.asarray(rgb, dtype=np.float64), 0.0, 255.0)]
    color = _hsl(rgb)
    color["hue"] = normalize_hue(hue + degrees)
    return _channels(color)
