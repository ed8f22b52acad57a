"""
Core Models Package

Immutable, validated data models shared by generation, session scoring
and tuning.

All models are frozen dataclasses (or NamedTuples for colour triples).
New rounds and sessions create new instances; nothing is edited in place,
so a record handed to a rendering or export layer cannot change under it.
"""

from .color import Hsl, Rgb
from .filters import FilterParameters, ParameterRange
from .plates import (
    Category,
    Difficulty,
    PaletteDescriptor,
    PaletteStyle,
    Plate,
    PlateRequest,
    Target,
    TargetBounds,
    TargetKind,
    Tile,
    TileAnimation,
)
from .responses import Click, Response, ResponseRecord
from .results import (
    SEVERITY_RANK,
    CategoryStats,
    Confidence,
    SessionMode,
    SessionResult,
    SessionSummary,
    SeverityAssessment,
    SeverityBucket,
    TimingStats,
    round_half_up,
)
from .staircase import (
    AXIS_ORDER,
    AxisDiagnosis,
    ConfusionAxis,
    DeficiencySeverity,
    DeficiencyType,
    StaircaseResult,
)
from .tuning import TuningOutcome, TuningRound

__all__ = [
    "Hsl",
    "Rgb",
    "FilterParameters",
    "ParameterRange",
    "Category",
    "Difficulty",
    "PaletteDescriptor",
    "PaletteStyle",
    "Plate",
    "PlateRequest",
    "Target",
    "TargetBounds",
    "TargetKind",
    "Tile",
    "TileAnimation",
    "Click",
    "Response",
    "ResponseRecord",
    "SEVERITY_RANK",
    "CategoryStats",
    "Confidence",
    "SessionMode",
    "SessionResult",
    "SessionSummary",
    "SeverityAssessment",
    "SeverityBucket",
    "TimingStats",
    "round_half_up",
    "AXIS_ORDER",
    "AxisDiagnosis",
    "ConfusionAxis",
    "DeficiencySeverity",
    "DeficiencyType",
    "StaircaseResult",
    "TuningOutcome",
    "TuningRound",
]
