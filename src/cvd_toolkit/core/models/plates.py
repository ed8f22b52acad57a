"""
Module: plates

Purpose:
    Immutable records describing one screening trial ("plate"): the
    request that produced it, its palette, target, tile grid and mask.

Key Classes:
    - Category: Confusion-axis (deutan) or control palette family
    - Difficulty: easy / medium / hard
    - TargetKind: number, letter, shape or animated outlier
    - PaletteStyle: static swatch palettes vs animated base+variance palettes
    - PaletteDescriptor: Tagged palette variant
    - Target / TargetBounds: What the subject must identify
    - TileAnimation / Tile: One grid cell
    - PlateRequest: Generation input
    - Plate: Generation output

Dependencies:
    - dataclasses (std)
    - .color, .filters

Used By:
    - generation.generator: Produces Plate from PlateRequest
    - session.sequencer: Scores responses against Plate.target
    - core.utils.serialization
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from functools import cached_property
from typing import Any, Mapping, Optional, Tuple, Union

from ..errors import InvalidArgumentError
from .color import Hsl, Rgb
from .filters import FilterParameters


class Category(str, Enum):
    """Palette family a plate is drawn from."""
    DEUTAN = "deutan"    # Red-green confusion axis
    CONTROL = "control"  # Unaffected by red-green deficiency

    def __str__(self) -> str:
        return self.value


class Difficulty(str, Enum):
    """Plate difficulty; drives grid resolution for static plates."""
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"

    def __str__(self) -> str:
        return self.value


class TargetKind(str, Enum):
    """Kind of target embedded in a plate."""
    NUMBER = "number"
    LETTER = "letter"
    SHAPE = "shape"
    OUTLIER = "outlier"  # Animated plate, answered by clicking a region

    def __str__(self) -> str:
        return self.value

    @property
    def is_symbolic(self) -> bool:
        return self is not TargetKind.OUTLIER


class PaletteStyle(str, Enum):
    """Variant tag for PaletteDescriptor."""
    STATIC = "static"
    ANIMATED = "animated"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class PaletteDescriptor:
    """
    Background/target colour set for one category.

    Static palettes list several swatches per role and are jittered per
    cell. Animated palettes carry a single swatch per role plus the
    variance the renderer modulates over time.

    Attributes:
        name: Stable palette identifier, e.g. "green-red"
        category: Palette family
        style: STATIC or ANIMATED
        background: Background swatches
        target: Target swatches
        variance: Per-channel modulation amplitude (animated only)
    """

    name: str
    category: Category
    style: PaletteStyle
    background: Tuple[Hsl, ...]
    target: Tuple[Hsl, ...]
    variance: Optional[Hsl] = None

    def __post_init__(self) -> None:
        if not self.background or not self.target:
            raise InvalidArgumentError(f"Palette {self.name!r} needs background and target swatches")
        if self.style is PaletteStyle.ANIMATED and self.variance is None:
            raise InvalidArgumentError(f"Animated palette {self.name!r} needs a variance")

    def to_dict(self) -> dict:
        d = {
            "name": self.name,
            "category": self.category.value,
            "style": self.style.value,
            "background": [c.to_dict() for c in self.background],
            "target": [c.to_dict() for c in self.target],
        }
        if self.variance is not None:
            d["variance"] = self.variance.to_dict()
        return d


@dataclass(frozen=True, slots=True)
class TargetBounds:
    """Square grid region occupied by an outlier target."""
    row: int
    col: int
    size: int

    def contains(self, row: int, col: int) -> bool:
        return (
            self.row <= row < self.row + self.size
            and self.col <= col < self.col + self.size
        )

    def to_dict(self) -> dict:
        return {"row": self.row, "col": self.col, "size": self.size}


@dataclass(frozen=True, slots=True)
class Target:
    """
    What the subject must identify.

    Attributes:
        kind: TargetKind
        value: Symbol, letter, shape name, or "row,col" for outliers
        bounds: Grid region (outlier plates only)
    """

    kind: TargetKind
    value: str
    bounds: Optional[TargetBounds] = None

    def to_dict(self) -> dict:
        d: dict[str, Any] = {"kind": self.kind.value, "value": self.value}
        if self.bounds is not None:
            d["bounds"] = self.bounds.to_dict()
        return d


@dataclass(frozen=True, slots=True)
class TileAnimation:
    """Noise-field parameters the renderer uses to animate one tile."""
    phase: float
    speed: float
    flow_direction: float


@dataclass(frozen=True, slots=True)
class Tile:
    """
    One grid cell of a plate.

    Attributes:
        row, col: Grid position
        is_target: Mask membership
        hsl: Base colour after jitter, before filtering
        rgb: Renderable colour (filtered when the plate has parameters)
        animation: Noise-field parameters (animated plates only)
    """

    row: int
    col: int
    is_target: bool
    hsl: Hsl
    rgb: Rgb
    animation: Optional[TileAnimation] = None

    @property
    def hex(self) -> str:
        return self.rgb.hex


@dataclass(frozen=True)
class PlateRequest:
    """
    Input to PlateGenerator.generate().

    Attributes:
        seed: Plate seed (int or str)
        category: Palette family
        difficulty: Difficulty level
        target_kind: Kind of target to embed
        filter_parameters: Optional correction filter to pre-apply
        subtlety: Renderer hint, 1.0 = normal, higher = more subtle

    Example:
        >>> PlateRequest(seed="abc-plate-0", category=Category.DEUTAN)
    """

    seed: Union[int, str]
    category: Category = Category.DEUTAN
    difficulty: Difficulty = Difficulty.MEDIUM
    target_kind: TargetKind = TargetKind.NUMBER
    filter_parameters: Optional[FilterParameters] = None
    subtlety: float = 1.0

    def __post_init__(self) -> None:
        """Validate request shape on construction."""
        if isinstance(self.seed, bool) or not isinstance(self.seed, (int, str)):
            raise InvalidArgumentError(f"seed must be int or str: {self.seed!r}")
        if not isinstance(self.category, Category):
            raise InvalidArgumentError(f"Invalid category: {self.category!r}")
        if not isinstance(self.difficulty, Difficulty):
            raise InvalidArgumentError(f"Invalid difficulty: {self.difficulty!r}")
        if not isinstance(self.target_kind, TargetKind):
            raise InvalidArgumentError(f"Invalid target kind: {self.target_kind!r}")
        if self.subtlety <= 0:
            raise InvalidArgumentError(f"subtlety must be positive: {self.subtlety}")

    def to_dict(self) -> dict:
        d: dict[str, Any] = {
            "seed": self.seed,
            "category": self.category.value,
            "difficulty": self.difficulty.value,
            "target_kind": self.target_kind.value,
            "subtlety": self.subtlety,
        }
        if self.filter_parameters is not None:
            d["filter_parameters"] = self.filter_parameters.to_dict()
        return d

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> PlateRequest:
        """
        Build a request from a plain mapping (no schema validation).

        Raises:
            InvalidArgumentError: If enum values are unknown
        """
        try:
            params = data.get("filter_parameters")
            return cls(
                seed=data["seed"],
                category=Category(data.get("category", Category.DEUTAN.value)),
                difficulty=Difficulty(data.get("difficulty", Difficulty.MEDIUM.value)),
                target_kind=TargetKind(data.get("target_kind", TargetKind.NUMBER.value)),
                filter_parameters=FilterParameters.from_dict(params) if params is not None else None,
                subtlety=float(data.get("subtlety", 1.0)),
            )
        except KeyError as e:
            raise InvalidArgumentError(f"Plate request missing field: {e}") from e
        except InvalidArgumentError:
            raise
        except (TypeError, ValueError) as e:
            raise InvalidArgumentError(f"Malformed plate request: {e}") from e


@dataclass(frozen=True)
class Plate:
    """
    One generated trial (immutable).

    Attributes:
        seed: Seed the plate was generated from
        category: Palette family
        difficulty: Difficulty level
        target: Target descriptor
        grid_size: Cells per row/column
        tiles: Row-major tuple of grid_size * grid_size tiles
        palette: Palette the tiles were drawn from
        filter_parameters: Filter applied to tile colours, if any
        subtlety: Renderer hint

    Invariants:
        - len(tiles) == grid_size ** 2
        - tiles are row-major

    Example:
        >>> plate = PlateGenerator().generate(PlateRequest(seed=1))
        >>> plate.mask[7][7]
        True
    """

    seed: Union[int, str]
    category: Category
    difficulty: Difficulty
    target: Target
    grid_size: int
    tiles: Tuple[Tile, ...]
    palette: PaletteDescriptor
    filter_parameters: Optional[FilterParameters] = None
    subtlety: float = 1.0

    def __post_init__(self) -> None:
        if len(self.tiles) != self.grid_size * self.grid_size:
            raise InvalidArgumentError(
                f"Plate has {len(self.tiles)} tiles for a {self.grid_size}x{self.grid_size} grid"
            )

    @cached_property
    def mask(self) -> Tuple[Tuple[bool, ...], ...]:
        """Target membership per cell, indexed [row][col]."""
        n = self.grid_size
        return tuple(
            tuple(self.tiles[row * n + col].is_target for col in range(n))
            for row in range(n)
        )

    @property
    def is_animated(self) -> bool:
        return self.target.kind is TargetKind.OUTLIER

    @property
    def target_cell_count(self) -> int:
        return sum(1 for t in self.tiles if t.is_target)

    def tile_at(self, row: int, col: int) -> Tile:
        if not (0 <= row < self.grid_size and 0 <= col < self.grid_size):
            raise InvalidArgumentError(f"Cell ({row}, {col}) outside {self.grid_size}x{self.grid_size} grid")
        return self.tiles[row * self.grid_size + col]

    def __repr__(self) -> str:
        """Concise representation for debugging."""
        return (
            f"Plate(seed={self.seed!r}, {self.category.value}, {self.difficulty.value}, "
            f"target={self.target.kind.value}:{self.target.value}, grid={self.grid_size})"
        )
