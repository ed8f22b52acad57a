"""
Module: tuning.parameter_space

Purpose:
    The bounded search space over FilterParameters: per-parameter ranges,
    neighbour generation, similarity, clamping and random perturbation.

Key Classes:
    - FilterParameterSpace: Ranges plus the operations the tuner needs

Key Constants:
    - DEFAULT_RANGES: Range and step per parameter
    - DEFAULT_SPACE: FilterParameterSpace over DEFAULT_RANGES

Dependencies:
    - numpy: Similarity arithmetic

Used By:
    - tuning.tuner: Next-parameter selection
    - tuning.presets: Clamping presets
"""

from __future__ import annotations

from typing import Any, Mapping, Optional, Tuple

import numpy as np

from cvd_toolkit.core.errors import InvalidArgumentError
from cvd_toolkit.core.models import FilterParameters, ParameterRange
from cvd_toolkit.core.utils.seeded_random import SeededRandom

# Candidate values are rounded to this many decimals to avoid float drift
NEIGHBOR_PRECISION = 4

DEFAULT_RANGES: Mapping[str, ParameterRange] = {
    "hue_shift": ParameterRange(-60, 60, 5),
    "intensity": ParameterRange(0, 1, 0.1),
    "saturation_boost": ParameterRange(-20, 40, 5),
    "brightness": ParameterRange(-20, 20, 5),
    "contrast": ParameterRange(-20, 20, 5),
    "red_gain": ParameterRange(-0.1, 0.4, 0.05),
    "green_gain": ParameterRange(-0.1, 0.8, 0.05),
    "blue_gain": ParameterRange(-0.2, 0.2, 0.05),
}


class FilterParameterSpace:
    """
    Per-parameter ranges and the operations defined over them.

    Every FilterParameters field must have a range. Instances are
    immutable after construction and may be shared.

    Example:
        >>> space = FilterParameterSpace()
        >>> space.similarity(FilterParameters(), FilterParameters())
        1.0
    """

    def __init__(self, ranges: Optional[Mapping[str, ParameterRange]] = None) -> None:
        ranges = dict(ranges if ranges is not None else DEFAULT_RANGES)
        names = FilterParameters.names()
        missing = [n for n in names if n not in ranges]
        unknown = [n for n in ranges if n not in names]
        if missing or unknown:
            raise InvalidArgumentError(
                f"Parameter ranges must cover exactly {list(names)}; "
                f"missing={missing} unknown={unknown}"
            )
        # Declaration order drives neighbour order
        self._ranges: Tuple[Tuple[str, ParameterRange], ...] = tuple((n, ranges[n]) for n in names)

    @property
    def ranges(self) -> dict[str, ParameterRange]:
        return dict(self._ranges)

    def range_for(self, name: str) -> ParameterRange:
        for key, rng in self._ranges:
            if key == name:
                return rng
        raise InvalidArgumentError(f"Unknown filter parameter: {name!r}")

    def contains(self, params: FilterParameters) -> bool:
        return all(r.contains(params.get(name)) for name, r in self._ranges)

    # ─────────────────────────────────────────────────────────────────────
    # Search operations
    # ─────────────────────────────────────────────────────────────────────

    def neighbors(self, params: FilterParameters, step_multiplier: float = 1.0) -> Tuple[FilterParameters, ...]:
        """
        One-parameter-at-a-time variants of ``params``.

        For each parameter, in declaration order, emits ``value - step * m``
        when it is >= min and ``value + step * m`` when it is <= max, all
        other parameters held fixed. At most 2 * len(ranges) candidates.

        Raises:
            InvalidArgumentError: If step_multiplier <= 0
        """
        if step_multiplier <= 0:
            raise InvalidArgumentError(f"step_multiplier must be positive: {step_multiplier}")
        result = []
        for name, r in self._ranges:
            value = params.get(name)
            delta = r.step * step_multiplier
            lower = round(value - delta, NEIGHBOR_PRECISION)
            upper = round(value + delta, NEIGHBOR_PRECISION)
            if lower >= r.min:
                result.append(params.replace(**{name: lower}))
            if upper <= r.max:
                result.append(params.replace(**{name: upper}))
        return tuple(result)

    def similarity(self, a: FilterParameters, b: FilterParameters) -> float:
        """
        1 minus the mean range-normalised distance between ``a`` and ``b``.

        Symmetric, 1.0 when ``a == b``, within [0, 1]. Zero-span parameters
        contribute no distance.
        """
        diffs = np.array([abs(a.get(n) - b.get(n)) for n, _ in self._ranges], dtype=np.float64)
        spans = np.array([r.span for _, r in self._ranges], dtype=np.float64)
        normalized = np.divide(diffs, spans, out=np.zeros_like(diffs), where=spans > 0)
        return float(1.0 - np.clip(normalized, 0.0, 1.0).mean())

    def normalize(self, params: FilterParameters) -> FilterParameters:
        """Clamp every value into its range."""
        return FilterParameters(**{name: float(r.clamp(params.get(name))) for name, r in self._ranges})

    def coerce(self, data: Mapping[str, Any]) -> FilterParameters:
        """Normalised parameters from a partial mapping (missing keys are 0)."""
        return self.normalize(FilterParameters.from_dict(data))

    def interpolate(self, a: FilterParameters, b: FilterParameters, t: float) -> FilterParameters:
        """
        Linear blend from ``a`` (t=0) to ``b`` (t=1), normalised.

        Raises:
            InvalidArgumentError: If t is outside [0, 1]
        """
        if not 0.0 <= t <= 1.0:
            raise InvalidArgumentError(f"t must be in [0, 1]: {t}")
        return self.normalize(FilterParameters(**{
            name: a.get(name) + (b.get(name) - a.get(name)) * t
            for name, _ in self._ranges
        }))

    def random_perturbation(self, params: FilterParameters, rng: SeededRandom) -> FilterParameters:
        """Offset every parameter by up to one step in either direction, clamped."""
        values = {}
        for name, r in self._ranges:
            offset = (rng() - 0.5) * r.step * 2
            values[name] = float(r.clamp(params.get(name) + offset))
        return FilterParameters(**values)


DEFAULT_SPACE = FilterParameterSpace()
