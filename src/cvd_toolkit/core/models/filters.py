"""
Module: filters

Purpose:
    Provides FilterParameters - the immutable record of correction filter
    settings explored by the tuner - and ParameterRange, the per-parameter
    bounds used to clamp and step through them.

Key Classes:
    - ParameterRange: {min, max, step} for one parameter
    - FilterParameters: Fixed-shape record of named continuous values

Dependencies:
    - dataclasses (std)

Used By:
    - tuning.parameter_space: Neighbour generation and similarity
    - tuning.color_filter: Colour transform
    - generation.generator: Pre-filtered plates
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, fields
from typing import Any, Mapping

from ..errors import InvalidArgumentError


@dataclass(frozen=True, slots=True)
class ParameterRange:
    """
    Bounds and step size for a single filter parameter.

    Attributes:
        min: Smallest allowed value
        max: Largest allowed value
        step: Neighbour step size used by the tuner

    Invariants:
        - min <= max
        - step > 0

    Example:
        >>> ParameterRange(-60, 60, 5).clamp(75)
        60
    """

    min: float
    max: float
    step: float

    def __post_init__(self) -> None:
        """Validate range on construction."""
        if self.min > self.max:
            raise InvalidArgumentError(
                f"range min ({self.min}) must be <= max ({self.max})"
            )
        if self.step <= 0:
            raise InvalidArgumentError(f"range step must be positive: {self.step}")

    @property
    def span(self) -> float:
        return self.max - self.min

    def clamp(self, value: float) -> float:
        return max(self.min, min(self.max, value))

    def contains(self, value: float) -> bool:
        return self.min <= value <= self.max


@dataclass(frozen=True, slots=True)
class FilterParameters:
    """
    Correction filter settings (immutable).

    Every field is 0 in the identity filter. Gains are stored as fractional
    offsets so that the applied channel multiplier is ``1 + gain``.

    Attributes:
        hue_shift: Selective hue rotation in degrees
        intensity: Overall filter strength (0-1)
        saturation_boost: Saturation change in percent
        brightness: Brightness change in percent
        contrast: Contrast change in percent
        red_gain: Red channel gain offset
        green_gain: Green channel gain offset
        blue_gain: Blue channel gain offset

    Example:
        >>> p = FilterParameters(hue_shift=25, intensity=0.5)
        >>> p.replace(hue_shift=30).hue_shift
        30
    """

    hue_shift: float = 0.0
    intensity: float = 0.0
    saturation_boost: float = 0.0
    brightness: float = 0.0
    contrast: float = 0.0
    red_gain: float = 0.0
    green_gain: float = 0.0
    blue_gain: float = 0.0

    @classmethod
    def names(cls) -> tuple[str, ...]:
        """Parameter names in declaration order."""
        return tuple(f.name for f in fields(cls))

    @property
    def is_identity(self) -> bool:
        return all(getattr(self, name) == 0 for name in self.names())

    def get(self, name: str) -> float:
        if name not in self.names():
            raise InvalidArgumentError(f"Unknown filter parameter: {name!r}")
        return getattr(self, name)

    def replace(self, **changes: float) -> FilterParameters:
        """Return a new instance with ``changes`` applied."""
        unknown = set(changes) - set(self.names())
        if unknown:
            raise InvalidArgumentError(f"Unknown filter parameters: {sorted(unknown)}")
        return dataclasses.replace(self, **changes)

    def to_dict(self) -> dict[str, float]:
        return {name: getattr(self, name) for name in self.names()}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> FilterParameters:
        """
        Build from a mapping; missing keys default to 0.

        Raises:
            InvalidArgumentError: On unknown keys or non-numeric values
        """
        unknown = set(data) - set(cls.names())
        if unknown:
            raise InvalidArgumentError(f"Unknown filter parameters: {sorted(unknown)}")
        values = {}
        for name, value in data.items():
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise InvalidArgumentError(
                    f"Filter parameter {name!r} must be numeric: {value!r}"
                )
            values[name] = float(value)
        return cls(**values)
