"""
Module: generation.generator

Purpose:
    Deterministic procedural plate generation. One parameterised generator
    covers static symbol plates and animated outlier plates; palettes come
    from a table keyed by (style, category).

Key Classes:
    - PlateGenerator: generate() one plate, generate_sequence() a session,
      generate_level() / generate_calibration() for the staircase test

Algorithm (static plates):
    1. Grid size from difficulty
    2. Pick palette, then target value, from the plate's seeded stream
    3. Build the target mask (glyph bitmap or shape inequality)
    4. Per cell, row-major: pick a swatch for its role, jitter h/s/l
    5. Convert to sRGB, applying the correction filter when supplied

Algorithm (outlier plates):
    1. Fixed grid, pick animated palette
    2. Place the outlier square away from the border
    3. Per cell: base colour for its role plus phase/speed/flow

Dependencies:
    - numpy: Masks
    - cvd_toolkit.core.utils.seeded_random: All randomness
    - cvd_toolkit.core.utils.color / color_filter: Colour output

Used By:
    - session.controller: Session plate sequences
    - tuning.tuner: Per-round plate sequences
    - session.staircase: One plate per staircase step
"""

from __future__ import annotations

import logging
import math
from typing import List, Optional, Sequence, Tuple

from cvd_toolkit.core.errors import InvalidArgumentError
from cvd_toolkit.core.models import (
    Category,
    ConfusionAxis,
    Difficulty,
    FilterParameters,
    Hsl,
    PaletteDescriptor,
    PaletteStyle,
    Plate,
    PlateRequest,
    Target,
    TargetBounds,
    TargetKind,
    Tile,
    TileAnimation,
    round_half_up,
)
from cvd_toolkit.core.utils.color import hsl_to_rgb
from cvd_toolkit.core.utils.color_filter import apply_to_color
from cvd_toolkit.core.utils.seeded_random import Seed, SeededRandom, derive_seed

from .config import GeneratorConfig
from .palettes import CALIBRATION_PALETTE, STAIRCASE_LEVELS, level_palette, palettes_for
from .patterns import outlier_mask, target_mask, values_for

logger = logging.getLogger(__name__)


def difficulty_for_position(index: int, total: int) -> Difficulty:
    """Progressive difficulty: first quarter easy, up to 60% medium, rest hard."""
    progress = index / total
    if progress < 0.25:
        return Difficulty.EASY
    if progress < 0.6:
        return Difficulty.MEDIUM
    return Difficulty.HARD


def subtlety_for_position(index: int, total: int) -> float:
    return 1.0 + 0.5 * index / total


class PlateGenerator:
    """
    Deterministic plate generator.

    Holds only immutable configuration, so one instance can be shared by
    any number of sessions. Every random decision for a plate is drawn
    from a SeededRandom built from the request seed.

    Example:
        >>> gen = PlateGenerator()
        >>> a = gen.generate(PlateRequest(seed="s-plate-0"))
        >>> b = gen.generate(PlateRequest(seed="s-plate-0"))
        >>> a == b
        True
    """

    def __init__(self, config: Optional[GeneratorConfig] = None) -> None:
        self.config = config or GeneratorConfig()

    # ─────────────────────────────────────────────────────────────────────
    # Single plates
    # ─────────────────────────────────────────────────────────────────────

    def generate(self, request: PlateRequest) -> Plate:
        """
        Generate one plate.

        Args:
            request: Seed, category, difficulty, target kind, optional filter

        Returns:
            Plate whose content depends only on ``request``
        """
        rng = SeededRandom(request.seed)
        if request.target_kind is TargetKind.OUTLIER:
            plate = self._generate_outlier(request, rng)
        else:
            plate = self._generate_static(request, rng)
        logger.debug(
            f"Generated {plate!r} palette={plate.palette.name} "
            f"target_cells={plate.target_cell_count}"
        )
        return plate

    def _generate_static(self, request: PlateRequest, rng: SeededRandom) -> Plate:
        cfg = self.config
        grid_size = cfg.grid_size_for(request.difficulty, request.target_kind)
        palette = rng.pick(palettes_for(request.category, PaletteStyle.STATIC))
        value = rng.pick(values_for(request.target_kind))
        mask = target_mask(
            request.target_kind,
            value,
            grid_size,
            reference_grid=cfg.reference_grid,
            radius_ratio=cfg.shape_radius_ratio,
        )

        tiles: List[Tile] = []
        for row in range(grid_size):
            for col in range(grid_size):
                is_target = bool(mask[row, col])
                base = rng.pick(palette.target if is_target else palette.background)
                hsl = Hsl(
                    base.h + (rng() - 0.5) * cfg.hue_jitter,
                    base.s + (rng() - 0.5) * cfg.saturation_jitter,
                    base.l + (rng() - 0.5) * cfg.lightness_jitter,
                )
                tiles.append(Tile(
                    row=row,
                    col=col,
                    is_target=is_target,
                    hsl=hsl,
                    rgb=self._render(hsl, request.filter_parameters),
                ))

        return Plate(
            seed=request.seed,
            category=request.category,
            difficulty=request.difficulty,
            target=Target(kind=request.target_kind, value=value),
            grid_size=grid_size,
            tiles=tuple(tiles),
            palette=palette,
            filter_parameters=request.filter_parameters,
            subtlety=request.subtlety,
        )

    def _generate_outlier(self, request: PlateRequest, rng: SeededRandom) -> Plate:
        palette = rng.pick(palettes_for(request.category, PaletteStyle.ANIMATED))
        return self._outlier_plate(request, palette, rng)

    def _outlier_plate(self, request: PlateRequest, palette: PaletteDescriptor, rng: SeededRandom) -> Plate:
        cfg = self.config
        grid_size = cfg.animated_grid_size
        size = cfg.outlier_size

        # Top-left corner in [1, grid - size - 1], never touching the border
        max_start = grid_size - size
        row0 = int(rng() * (max_start - 1)) + 1
        col0 = int(rng() * (max_start - 1)) + 1
        bounds = TargetBounds(row=row0, col=col0, size=size)
        mask = outlier_mask(bounds, grid_size)

        background_rgb = self._render(palette.background[0], request.filter_parameters)
        outlier_rgb = self._render(palette.target[0], request.filter_parameters)

        tiles: List[Tile] = []
        for row in range(grid_size):
            for col in range(grid_size):
                is_target = bool(mask[row, col])
                animation = TileAnimation(
                    phase=rng() * 2 * math.pi,
                    speed=1 + (rng() - 0.5) * cfg.speed_jitter,
                    flow_direction=rng() * 2 * math.pi,
                )
                tiles.append(Tile(
                    row=row,
                    col=col,
                    is_target=is_target,
                    hsl=palette.target[0] if is_target else palette.background[0],
                    rgb=outlier_rgb if is_target else background_rgb,
                    animation=animation,
                ))

        return Plate(
            seed=request.seed,
            category=request.category,
            difficulty=request.difficulty,
            target=Target(kind=TargetKind.OUTLIER, value=f"{row0},{col0}", bounds=bounds),
            grid_size=grid_size,
            tiles=tuple(tiles),
            palette=palette,
            filter_parameters=request.filter_parameters,
            subtlety=request.subtlety,
        )

    # ─────────────────────────────────────────────────────────────────────
    # Staircase plates
    # ─────────────────────────────────────────────────────────────────────

    def generate_level(
        self,
        axis: ConfusionAxis,
        level: int,
        seed: Seed,
        filter_parameters: Optional[FilterParameters] = None,
    ) -> Plate:
        """
        Generate one staircase step: an outlier plate whose target colour
        is the axis's ``level``-th graded swatch.

        Difficulty and subtlety follow the level's position in the staircase.

        Raises:
            InvalidArgumentError: If axis or level is unknown
        """
        palette = level_palette(axis, level)
        request = PlateRequest(
            seed=seed,
            category=palette.category,
            difficulty=difficulty_for_position(level, STAIRCASE_LEVELS),
            target_kind=TargetKind.OUTLIER,
            filter_parameters=filter_parameters,
            subtlety=subtlety_for_position(level, STAIRCASE_LEVELS),
        )
        plate = self._outlier_plate(request, palette, SeededRandom(seed))
        logger.debug(f"Generated {plate!r} palette={palette.name}")
        return plate

    def generate_calibration(self, seed: Seed, filter_parameters: Optional[FilterParameters] = None) -> Plate:
        """Grey-on-grey outlier plate every observer should find."""
        request = PlateRequest(
            seed=seed,
            category=CALIBRATION_PALETTE.category,
            difficulty=Difficulty.EASY,
            target_kind=TargetKind.OUTLIER,
            filter_parameters=filter_parameters,
        )
        return self._outlier_plate(request, CALIBRATION_PALETTE, SeededRandom(seed))

    @staticmethod
    def _render(hsl: Hsl, params: Optional[FilterParameters]):
        rgb = hsl_to_rgb(hsl)
        if params is None:
            return rgb
        return apply_to_color(rgb, params)

    # ─────────────────────────────────────────────────────────────────────
    # Sequences
    # ─────────────────────────────────────────────────────────────────────

    def generate_sequence(
        self,
        total_count: int,
        category_ratio: float,
        seed: Seed,
        progressive_difficulty: bool = False,
        *,
        difficulty: Difficulty = Difficulty.MEDIUM,
        target_kinds: Optional[Sequence[TargetKind]] = None,
        filter_parameters: Optional[FilterParameters] = None,
    ) -> Tuple[Plate, ...]:
        """
        Generate an ordered session of plates.

        ``round_half_up(total_count * category_ratio)`` plates are deutan and
        the rest control; the category order is shuffled with the session
        seed. Plate ``i`` is generated from ``f"{seed}-plate-{i}"``.

        Args:
            total_count: Number of plates (>= 1)
            category_ratio: Deutan fraction in [0, 1]
            seed: Session seed
            progressive_difficulty: Ramp easy -> medium -> hard by position
            difficulty: Difficulty when not progressive
            target_kinds: Target kind cycle (defaults to config.target_cycle)
            filter_parameters: Filter applied to every plate

        Returns:
            Tuple of ``total_count`` plates

        Raises:
            InvalidArgumentError: If total_count < 1 or ratio outside [0, 1]
        """
        if isinstance(total_count, bool) or not isinstance(total_count, int) or total_count < 1:
            raise InvalidArgumentError(f"total_count must be a positive integer: {total_count!r}")
        if not 0.0 <= category_ratio <= 1.0:
            raise InvalidArgumentError(f"category_ratio must be in [0, 1]: {category_ratio}")
        kinds = tuple(target_kinds) if target_kinds else self.config.target_cycle

        deutan_count = min(total_count, round_half_up(total_count * category_ratio))
        categories = (
            [Category.DEUTAN] * deutan_count
            + [Category.CONTROL] * (total_count - deutan_count)
        )
        order = SeededRandom(seed).shuffle(categories)

        plates = []
        for index, category in enumerate(order):
            request = PlateRequest(
                seed=derive_seed(seed, "plate", index),
                category=category,
                difficulty=(
                    difficulty_for_position(index, total_count)
                    if progressive_difficulty else difficulty
                ),
                target_kind=kinds[index % len(kinds)],
                filter_parameters=filter_parameters,
                subtlety=subtlety_for_position(index, total_count),
            )
            plates.append(self.generate(request))

        logger.info(
            f"Generated sequence seed={seed!r}: {total_count} plates "
            f"({deutan_count} deutan, {total_count - deutan_count} control)"
        )
        return tuple(plates)
