"""
Module: generation.patterns

Purpose:
    Target vocabularies and boolean target masks. Numbers and letters are
    drawn from 5x7 bitmaps scaled to the grid; geometric shapes are
    rasterised from inequalities on cell-centre offsets.

Key Functions:
    - values_for(kind): Target vocabulary for a symbolic kind
    - glyph_mask(value, grid_size, reference_grid): Mask for a number/letter
    - shape_mask(shape, grid_size, radius_ratio): Mask for a shape
    - outlier_mask(bounds, grid_size): Mask for an animated outlier region

Dependencies:
    - numpy: Vectorised mask construction

Used By:
    - generation.generator
    - generation.answers
"""

from __future__ import annotations

from typing import Dict, Tuple

import numpy as np

from cvd_toolkit.core.errors import InvalidArgumentError
from cvd_toolkit.core.models import TargetBounds, TargetKind

NUMBERS: Tuple[str, ...] = ("2", "3", "5", "6", "7", "8", "9")
LETTERS: Tuple[str, ...] = ("A", "C", "E", "H", "K", "N", "O", "P", "S", "X")
SHAPES: Tuple[str, ...] = ("circle", "square", "triangle", "diamond")

_VOCABULARY: Dict[TargetKind, Tuple[str, ...]] = {
    TargetKind.NUMBER: NUMBERS,
    TargetKind.LETTER: LETTERS,
    TargetKind.SHAPE: SHAPES,
}


def values_for(kind: TargetKind) -> Tuple[str, ...]:
    """
    Target vocabulary for a symbolic target kind.

    Raises:
        InvalidArgumentError: For OUTLIER, which has no vocabulary
    """
    try:
        return _VOCABULARY[kind]
    except KeyError:
        raise InvalidArgumentError(f"Target kind {kind.value!r} has no symbol vocabulary") from None


def _bitmap(*rows: str) -> np.ndarray:
    return np.array([[ch == "#" for ch in row] for row in rows], dtype=bool)


# 5 wide x 7 tall
GLYPHS: Dict[str, np.ndarray] = {
    "2": _bitmap(".###.", "#...#", "....#", "..##.", ".#...", "#....", "#####"),
    "3": _bitmap(".###.", "#...#", "....#", "..##.", "....#", "#...#", ".###."),
    "5": _bitmap("#####", "#....", "####.", "....#", "....#", "#...#", ".###."),
    "6": _bitmap("..##.", ".#...", "#....", "####.", "#...#", "#...#", ".###."),
    "7": _bitmap("#####", "....#", "...#.", "..#..", ".#...", ".#...", ".#..."),
    "8": _bitmap(".###.", "#...#", "#...#", ".###.", "#...#", "#...#", ".###."),
    "9": _bitmap(".###.", "#...#", "#...#", ".####", "....#", "...#.", ".##.."),
    "A": _bitmap("..#..", ".#.#.", "#...#", "#...#", "#####", "#...#", "#...#"),
    "C": _bitmap(".###.", "#...#", "#....", "#....", "#....", "#...#", ".###."),
    "E": _bitmap("#####", "#....", "#....", "####.", "#....", "#....", "#####"),
    "H": _bitmap("#...#", "#...#", "#...#", "#####", "#...#", "#...#", "#...#"),
    "K": _bitmap("#...#", "#..#.", "#.#..", "##...", "#.#..", "#..#.", "#...#"),
    "N": _bitmap("#...#", "##..#", "#.#.#", "#..##", "#...#", "#...#", "#...#"),
    "O": _bitmap(".###.", "#...#", "#...#", "#...#", "#...#", "#...#", ".###."),
    "P": _bitmap("####.", "#...#", "#...#", "####.", "#....", "#....", "#...."),
    "S": _bitmap(".###.", "#...#", "#....", ".###.", "....#", "#...#", ".###."),
    "X": _bitmap("#...#", ".#.#.", "..#..", "..#..", "..#..", ".#.#.", "#...#"),
}


def glyph_mask(value: str, grid_size: int, reference_grid: int = 14) -> np.ndarray:
    """
    Scale a glyph bitmap onto a ``grid_size`` square grid, centred.

    The bitmap is drawn 1:1 on a ``reference_grid`` grid. Each lit bitmap
    cell covers ``ceil(scale)`` rows and columns starting at
    ``floor(start + index * scale)``; cells falling outside the grid are
    dropped.

    Raises:
        InvalidArgumentError: If value has no glyph
    """
    glyph = GLYPHS.get(value)
    if glyph is None:
        raise InvalidArgumentError(f"No glyph for target value {value!r}")

    scale = grid_size / reference_grid
    height, width = glyph.shape
    start_row = int(np.floor((grid_size - height * scale) / 2))
    start_col = int(np.floor((grid_size - width * scale) / 2))
    # Sub-cell offsets 0, 1, ... while offset < scale
    offsets = np.arange(int(np.ceil(scale)))

    mask = np.zeros((grid_size, grid_size), dtype=bool)
    for py, px in zip(*np.nonzero(glyph)):
        rows = np.floor(start_row + py * scale + offsets).astype(int)
        cols = np.floor(start_col + px * scale + offsets).astype(int)
        rows = rows[(rows >= 0) & (rows < grid_size)]
        cols = cols[(cols >= 0) & (cols < grid_size)]
        mask[np.ix_(rows, cols)] = True
    return mask


def shape_mask(shape: str, grid_size: int, radius_ratio: float = 0.35) -> np.ndarray:
    """
    Rasterise a geometric shape centred on the grid.

    Raises:
        InvalidArgumentError: If shape is unknown
    """
    r = grid_size * radius_ratio
    centre = grid_size / 2
    rows, cols = np.indices((grid_size, grid_size))
    dx = cols - centre + 0.5
    dy = rows - centre + 0.5

    if shape == "circle":
        return np.sqrt(dx * dx + dy * dy) < r
    if shape == "square":
        return (np.abs(dx) < r * 0.7) & (np.abs(dy) < r * 0.7)
    if shape == "triangle":
        return (dy > -r * 0.6) & (dy < r * 0.6) & (np.abs(dx) < r * 0.6 - dy * 0.5)
    if shape == "diamond":
        return (np.abs(dx) + np.abs(dy)) < r * 0.8
    raise InvalidArgumentError(f"Unknown shape: {shape!r}")


def outlier_mask(bounds: TargetBounds, grid_size: int) -> np.ndarray:
    mask = np.zeros((grid_size, grid_size), dtype=bool)
    mask[bounds.row:bounds.row + bounds.size, bounds.col:bounds.col + bounds.size] = True
    return mask


def target_mask(kind: TargetKind, value: str, grid_size: int, *, reference_grid: int = 14,
                radius_ratio: float = 0.35) -> np.ndarray:
    """Mask for a symbolic target of ``kind``."""
    if kind is TargetKind.SHAPE:
        return shape_mask(value, grid_size, radius_ratio)
    if kind in (TargetKind.NUMBER, TargetKind.LETTER):
        return glyph_mask(value, grid_size, reference_grid)
    raise InvalidArgumentError("Outlier targets need bounds, use outlier_mask()")
