"""
Module: core.utils.color_filter

Purpose:
    Pure colour-correction transform driven by FilterParameters. Used to
    pre-filter plate tiles during tuning rounds and by any rendering
    layer that previews a filter.

Key Functions:
    - apply_to_color(color, params, intensity): Filter one Rgb or Hsl colour
    - selective_hue_factor(hue): Weight of the hue rotation at ``hue``

Dependencies:
    - numpy: Channel arithmetic and clamping
    - core.utils.color: Hue rotation

Used By:
    - generation.generator
    - tuning (re-exported)
"""

from __future__ import annotations

from typing import Union

import numpy as np

from ..models.color import Hsl, Rgb
from ..models.filters import FilterParameters
from .color import hsl_to_rgb, rgb_hue, rgb_to_hsl, rotate_hue, to_rgb8

# Rec. 601 luma weights
LUMA_WEIGHTS = np.array([0.299, 0.587, 0.114])


def selective_hue_factor(hue: float) -> float:
    """
    Weight in [0.2, 1] applied to the hue rotation at ``hue`` degrees.

    Reds and greens on the confusion axis are rotated most; hues far
    from it (blues, purples) get a flat 0.2.
    """
    h = hue % 360.0
    if h <= 40:
        return 1.0 - (h / 40.0) * 0.5
    if h <= 90:
        return 0.5 + (h - 40.0) / 50.0 * 0.5
    if h <= 150:
        return 1.0 - (h - 90.0) / 60.0 * 0.5
    if h >= 320:
        return (h - 320.0) / 40.0 * 0.5 + 0.5
    return 0.2


def _is_noop(params: FilterParameters, k: float) -> bool:
    if k == 0:
        return True
    return all(
        getattr(params, name) == 0
        for name in FilterParameters.names()
        if name != "intensity"
    )


def apply_to_color(
    color: Union[Rgb, Hsl],
    params: FilterParameters,
    intensity: float = 1.0,
) -> Union[Rgb, Hsl]:
    """
    Apply the correction filter to one colour.

    Strength is ``k = intensity * params.intensity``. Steps, in order:
    channel gains and brightness, selective hue rotation, saturation
    scaling around luma, contrast around mid-grey. Channels are clamped
    and rounded to 0-255 at the end.

    Args:
        color: Rgb (0-255) or Hsl (degrees, percent)
        params: Filter settings
        intensity: Extra multiplier on params.intensity

    Returns:
        Colour of the same type as ``color``; the input itself when the
        filter has no effect.

    Example:
        >>> apply_to_color(Rgb(200, 40, 40), FilterParameters())
        Rgb(r=200, g=40, b=40)
    """
    k = intensity * params.intensity
    if _is_noop(params, k):
        return color

    is_hsl = isinstance(color, Hsl)
    rgb = hsl_to_rgb(color) if is_hsl else color

    channels = np.asarray(rgb, dtype=np.float64)

    gains = 1.0 + np.array([params.red_gain, params.green_gain, params.blue_gain]) * k
    channels = channels * gains * (1.0 + params.brightness * k / 100.0)
    channels = np.clip(channels, 0.0, 255.0)

    if params.hue_shift:
        hue = rgb_hue(channels)
        if hue is not None:
            rotation = params.hue_shift * k * selective_hue_factor(hue)
            channels = np.clip(np.asarray(rotate_hue(channels, rotation)), 0.0, 255.0)

    if params.saturation_boost:
        luma = float(channels @ LUMA_WEIGHTS)
        factor = 1.0 + params.saturation_boost * k / 100.0
        channels = np.clip(luma + (channels - luma) * factor, 0.0, 255.0)

    if params.contrast:
        factor = 1.0 + params.contrast * k / 100.0
        channels = ((channels / 255.0 - 0.5) * factor + 0.5) * 255.0

    result = to_rgb8(channels)
    return rgb_to_hsl(result) if is_hsl else result
