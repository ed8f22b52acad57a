"""
Module: generation.config

Purpose:
    Configuration dataclass for the plate generator. Immutable
    configuration with validation on construction.

Key Classes:
    - GeneratorConfig: Grid resolutions, jitter amplitudes, outlier layout

Dependencies:
    - dataclasses (std)

Used By:
    - generation.generator: PlateGenerator
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Tuple

from cvd_toolkit.core.errors import InvalidArgumentError
from cvd_toolkit.core.models import Difficulty, TargetKind


@dataclass(frozen=True)
class GeneratorConfig:
    """
    Configuration for plate generation (immutable).

    Attributes:
        tile_counts: Grid cells per side for static plates, per difficulty
        reference_grid: Grid size at which glyph bitmaps are drawn 1:1
        shape_radius_ratio: Geometric target radius as a fraction of grid size
        hue_jitter: Full width of per-cell hue jitter (degrees)
        saturation_jitter: Full width of per-cell saturation jitter (percent)
        lightness_jitter: Full width of per-cell lightness jitter (percent)
        animated_grid_size: Cells per side for animated outlier plates
        outlier_size: Side of the square outlier region
        target_cycle: Target kinds cycled through by generate_sequence()

    Invariants:
        - every tile count >= outlier_size + 2
        - jitter widths >= 0

    Example:
        >>> GeneratorConfig().tile_counts[Difficulty.HARD]
        18
    """

    tile_counts: Dict[Difficulty, int] = field(default_factory=lambda: {
        Difficulty.EASY: 10,
        Difficulty.MEDIUM: 14,
        Difficulty.HARD: 18,
    })
    reference_grid: int = 14
    shape_radius_ratio: float = 0.35

    # Jitter is drawn as (rng() - 0.5) * width
    hue_jitter: float = 8.0
    saturation_jitter: float = 6.0
    lightness_jitter: float = 6.0

    # Animated outlier plates
    animated_grid_size: int = 18
    outlier_size: int = 3
    speed_jitter: float = 0.1

    target_cycle: Tuple[TargetKind, ...] = (
        TargetKind.NUMBER,
        TargetKind.NUMBER,
        TargetKind.LETTER,
        TargetKind.SHAPE,
    )

    def __post_init__(self) -> None:
        """Validate configuration on construction."""
        missing = set(Difficulty) - set(self.tile_counts)
        if missing:
            raise InvalidArgumentError(f"tile_counts missing difficulties: {sorted(d.value for d in missing)}")
        for difficulty, count in self.tile_counts.items():
            if count < 5:
                raise InvalidArgumentError(f"tile count for {difficulty.value} too small: {count}")
        if self.reference_grid <= 0:
            raise InvalidArgumentError(f"reference_grid must be positive: {self.reference_grid}")
        if not 0 < self.shape_radius_ratio <= 0.5:
            raise InvalidArgumentError(f"shape_radius_ratio must be in (0, 0.5]: {self.shape_radius_ratio}")
        if min(self.hue_jitter, self.saturation_jitter, self.lightness_jitter) < 0:
            raise InvalidArgumentError("jitter widths must be non-negative")
        if self.outlier_size < 1 or self.animated_grid_size < self.outlier_size + 2:
            raise InvalidArgumentError(
                f"animated_grid_size ({self.animated_grid_size}) must leave a border "
                f"around outlier_size ({self.outlier_size})"
            )
        if not self.target_cycle:
            raise InvalidArgumentError("target_cycle must not be empty")

    def grid_size_for(self, difficulty: Difficulty, kind: TargetKind) -> int:
        if kind is TargetKind.OUTLIER:
            return self.animated_grid_size
        return self.tile_counts[difficulty]
