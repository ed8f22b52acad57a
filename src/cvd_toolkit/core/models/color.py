"""
Module: color

Purpose:
    Plain colour triples shared by palettes, tiles and the correction
    filter.

Key Classes:
    - Hsl: Hue in degrees, saturation and lightness in percent
    - Rgb: 8-bit sRGB channels

Used By:
    - generation.palettes, generation.generator
    - core.utils.color_filter
    - core.utils.color
"""

from __future__ import annotations

from typing import NamedTuple


class Hsl(NamedTuple):
    """HSL colour: h in degrees, s and l in percent (0-100)."""
    h: float
    s: float
    l: float

    def offset(self, dh: float = 0.0, ds: float = 0.0, dl: float = 0.0) -> Hsl:
        """Return a copy shifted by the given amounts (no clamping)."""
        return Hsl(self.h + dh, self.s + ds, self.l + dl)

    def to_dict(self) -> dict:
        return {"h": self.h, "s": self.s, "l": self.l}


class Rgb(NamedTuple):
    """sRGB colour with 0-255 integer channels."""
    r: int
    g: int
    b: int

    @property
    def hex(self) -> str:
        return f"#{self.r:02x}{self.g:02x}{self.b:02x}"

    def to_list(self) -> list[int]:
        return [self.r, self.g, self.b]
