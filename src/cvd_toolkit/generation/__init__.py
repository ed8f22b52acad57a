"""
Plate Generation Package

Seed-reproducible procedural screening plates: static number, letter and
shape plates drawn from jittered swatch palettes, and animated outlier
plates for spatial responses.

Example:
    >>> from cvd_toolkit.generation import PlateGenerator
    >>> plates = PlateGenerator().generate_sequence(16, 0.625, "abc", True)
    >>> len(plates)
    16
"""

from .answers import answer_options
from .config import GeneratorConfig
from .generator import PlateGenerator, difficulty_for_position, subtlety_for_position
from .palettes import LEVEL_PALETTE_TABLE, STAIRCASE_LEVELS, level_palette, palettes_for
from .patterns import LETTERS, NUMBERS, SHAPES, values_for

__all__ = [
    "answer_options",
    "GeneratorConfig",
    "PlateGenerator",
    "difficulty_for_position",
    "subtlety_for_position",
    "palettes_for",
    "level_palette",
    "LEVEL_PALETTE_TABLE",
    "STAIRCASE_LEVELS",
    "LETTERS",
    "NUMBERS",
    "SHAPES",
    "values_for",
]
