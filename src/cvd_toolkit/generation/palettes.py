"""
Module: generation.palettes

Purpose:
    Palette table for every (style, category) pair. Deutan palettes pair
    hues that collapse onto each other along the red-green confusion axis;
    control palettes pair blue/purple against yellow/orange, which stay
    distinct under red-green deficiency. Staircase palettes hold one
    background per confusion axis and a target graded towards it.

Key Functions:
    - palettes_for(category, style): Palette pool for a plate
    - level_palette(axis, level): Staircase step palette

Used By:
    - generation.generator
"""

from __future__ import annotations

from typing import Dict, Tuple

from cvd_toolkit.core.errors import InvalidArgumentError
from cvd_toolkit.core.models import Category, ConfusionAxis, Hsl, PaletteDescriptor, PaletteStyle


def _static(name: str, category: Category, background, target) -> PaletteDescriptor:
    return PaletteDescriptor(
        name=name,
        category=category,
        style=PaletteStyle.STATIC,
        background=tuple(Hsl(*c) for c in background),
        target=tuple(Hsl(*c) for c in target),
    )


def _animated(name: str, category: Category, background, outlier, variance) -> PaletteDescriptor:
    return PaletteDescriptor(
        name=name,
        category=category,
        style=PaletteStyle.ANIMATED,
        background=(Hsl(*background),),
        target=(Hsl(*outlier),),
        variance=Hsl(*variance),
    )


# ─────────────────────────────────────────────────────────────────────────────
# Static palettes (several swatches per role, jittered per cell)
# ─────────────────────────────────────────────────────────────────────────────

STATIC_DEUTAN: Tuple[PaletteDescriptor, ...] = (
    _static(
        "green-red", Category.DEUTAN,
        [(120, 45, 45), (125, 40, 50), (115, 50, 40), (130, 42, 48)],
        [(0, 50, 45), (5, 45, 48), (355, 48, 42)],
    ),
    _static(
        "olive-lime", Category.DEUTAN,
        [(45, 35, 40), (50, 38, 42), (40, 32, 45), (55, 36, 38)],
        [(85, 45, 42), (90, 42, 45), (80, 48, 40)],
    ),
    _static(
        "brown-green", Category.DEUTAN,
        [(15, 40, 42), (20, 38, 45), (10, 42, 40), (25, 36, 44)],
        [(140, 48, 40), (145, 45, 42), (135, 50, 38)],
    ),
    _static(
        "teal-pink", Category.DEUTAN,
        [(165, 35, 45), (170, 38, 42), (160, 32, 48), (175, 36, 44)],
        [(340, 45, 50), (345, 42, 48), (335, 48, 52)],
    ),
    _static(
        "cyan-orange", Category.DEUTAN,
        [(150, 42, 48), (155, 38, 45), (145, 45, 50), (160, 40, 46)],
        [(25, 55, 50), (30, 52, 48), (20, 58, 52)],
    ),
)

STATIC_CONTROL: Tuple[PaletteDescriptor, ...] = (
    _static(
        "blue-yellow", Category.CONTROL,
        [(220, 50, 50), (225, 48, 52), (215, 52, 48), (230, 46, 54)],
        [(55, 70, 55), (60, 68, 52), (50, 72, 58)],
    ),
    _static(
        "purple-yellow", Category.CONTROL,
        [(270, 45, 45), (275, 42, 48), (265, 48, 42), (280, 44, 46)],
        [(48, 65, 55), (52, 62, 58), (44, 68, 52)],
    ),
    _static(
        "navy-orange", Category.CONTROL,
        [(235, 55, 35), (240, 52, 38), (230, 58, 32), (245, 50, 36)],
        [(35, 80, 65), (40, 78, 62), (30, 82, 68)],
    ),
)

# ─────────────────────────────────────────────────────────────────────────────
# Animated palettes (one base colour per role plus modulation variance)
# ─────────────────────────────────────────────────────────────────────────────

ANIMATED_DEUTAN: Tuple[PaletteDescriptor, ...] = (
    _animated("green-red", Category.DEUTAN, (120, 45, 45), (0, 50, 45), (15, 10, 8)),
    _animated("olive-lime", Category.DEUTAN, (50, 40, 42), (85, 45, 42), (12, 8, 6)),
    _animated("brown-green", Category.DEUTAN, (20, 42, 44), (140, 48, 42), (10, 8, 7)),
    _animated("teal-pink", Category.DEUTAN, (165, 38, 46), (340, 45, 50), (14, 10, 8)),
    _animated("cyan-orange", Category.DEUTAN, (155, 42, 48), (25, 55, 50), (12, 10, 7)),
    _animated("sage-coral", Category.DEUTAN, (100, 35, 50), (10, 60, 52), (15, 10, 8)),
)

ANIMATED_CONTROL: Tuple[PaletteDescriptor, ...] = (
    _animated("blue-yellow", Category.CONTROL, (220, 55, 48), (55, 75, 55), (12, 10, 8)),
    _animated("purple-yellow", Category.CONTROL, (275, 50, 45), (50, 70, 55), (14, 10, 7)),
    _animated("navy-orange", Category.CONTROL, (235, 55, 35), (35, 80, 60), (10, 10, 8)),
)

PALETTE_TABLE: Dict[Tuple[PaletteStyle, Category], Tuple[PaletteDescriptor, ...]] = {
    (PaletteStyle.STATIC, Category.DEUTAN): STATIC_DEUTAN,
    (PaletteStyle.STATIC, Category.CONTROL): STATIC_CONTROL,
    (PaletteStyle.ANIMATED, Category.DEUTAN): ANIMATED_DEUTAN,
    (PaletteStyle.ANIMATED, Category.CONTROL): ANIMATED_CONTROL,
}


def palettes_for(category: Category, style: PaletteStyle) -> Tuple[PaletteDescriptor, ...]:
    """
    Palette pool for a category and style.

    Raises:
        InvalidArgumentError: If the pair has no palettes
    """
    pool = PALETTE_TABLE.get((style, category))
    if not pool:
        raise InvalidArgumentError(f"No palettes for {style.value}/{category.value}")
    return pool

# ─────────────────────────────────────────────────────────────────────────────
# Staircase palettes (one background per axis, target steps towards it)
# ─────────────────────────────────────────────────────────────────────────────

STAIRCASE_LEVELS = 20

# Luminance-only shimmer, ±3 lightness
STAIRCASE_VARIANCE = (0, 0, 3)

CALIBRATION_PALETTE = _animated(
    "calibration", Category.CONTROL, (0, 0, 20), (0, 0, 60), STAIRCASE_VARIANCE,
)

_STAIRCASE_COLOURS: Dict[ConfusionAxis, Tuple[tuple, Tuple[tuple, ...]]] = {
    ConfusionAxis.RED_GREEN: (
        (111, 78, 20),
        (
            (0, 100, 28), (6, 98, 28), (11, 95, 28), (15, 93, 28), (19, 90, 27),
            (27, 87, 26), (34, 84, 25), (40, 82, 26), (46, 80, 26), (59, 79, 26),
            (72, 77, 25), (72, 76, 24), (72, 75, 22), (78, 76, 23), (83, 76, 23),
            (89, 76, 23), (95, 76, 22), (99, 77, 21), (103, 77, 19), (106, 78, 20),
        ),
    ),
    ConfusionAxis.PURPLE_BLUE: (
        (300, 100, 16),
        (
            (240, 100, 29), (243, 100, 29), (246, 100, 28), (249, 100, 27), (252, 100, 26),
            (255, 100, 26), (258, 100, 25), (261, 100, 25), (264, 100, 24), (267, 100, 24),
            (270, 100, 23), (273, 100, 22), (276, 100, 21), (279, 100, 21), (282, 100, 20),
            (285, 100, 20), (288, 100, 19), (291, 100, 18), (294, 100, 17), (297, 100, 17),
        ),
    ),
    ConfusionAxis.PURPLE_GREEN: (
        (323, 87, 34),
        (
            (173, 37, 25), (176, 29, 27), (178, 23, 28), (183, 16, 29), (191, 10, 31),
            (213, 7, 32), (260, 5, 32), (295, 8, 32), (311, 13, 33), (320, 18, 33),
            (324, 22, 34), (324, 25, 34), (324, 28, 35), (327, 35, 35), (327, 42, 36),
            (327, 45, 36), (327, 48, 36), (327, 50, 36), (325, 62, 35), (324, 74, 35),
        ),
    ),
}

# All three axes sit on red-green deficiency confusion lines
LEVEL_PALETTE_TABLE: Dict[ConfusionAxis, Tuple[PaletteDescriptor, ...]] = {
    axis: tuple(
        _animated(
            f"{axis.value.replace('_', '-')}-level-{level}",
            Category.DEUTAN,
            background,
            target,
            STAIRCASE_VARIANCE,
        )
        for level, target in enumerate(levels)
    )
    for axis, (background, levels) in _STAIRCASE_COLOURS.items()
}


def level_palette(axis: ConfusionAxis, level: int) -> PaletteDescriptor:
    """
    Palette for one staircase step; level 0 is the most visible.

    Raises:
        InvalidArgumentError: If level is outside [0, STAIRCASE_LEVELS)
    """
    try:
        levels = LEVEL_PALETTE_TABLE[ConfusionAxis(axis)]
    except ValueError as e:
        raise InvalidArgumentError(f"Unknown confusion axis: {axis!r}") from e
    if isinstance(level, bool) or not isinstance(level, int) or not 0 <= level < len(levels):
        raise InvalidArgumentError(f"{axis} level out of range: {level!r}")
    return levels[level]
