"""
Colour Vision Toolkit Core Package

Shared data models, error types, seeded randomness and serialisation
used by the generation, session and tuning packages.

**DESIGN NOTES:**

1. **Per-session state**
   - Every sequencer and tuner owns its response log and random stream.
   - No module-level mutable state influences plate content or scoring.

2. **Immutable records**
   - Plates, results and tuning rounds are frozen dataclasses.
   - Derived values (mask, percentages) are calculated, never edited.
"""

from .errors import CvdToolkitError, InvalidArgumentError, InvalidStateError
from .models import (
    Category,
    Difficulty,
    FilterParameters,
    ParameterRange,
    Plate,
    PlateRequest,
    Response,
    ResponseRecord,
    SessionMode,
    SessionResult,
    SeverityAssessment,
    SeverityBucket,
    TargetKind,
    TuningOutcome,
    TuningRound,
)
from .utils.seeded_random import SeededRandom

__all__ = [
    "CvdToolkitError",
    "InvalidArgumentError",
    "InvalidStateError",
    "Category",
    "Difficulty",
    "FilterParameters",
    "ParameterRange",
    "Plate",
    "PlateRequest",
    "Response",
    "ResponseRecord",
    "SessionMode",
    "SessionResult",
    "SeverityAssessment",
    "SeverityBucket",
    "TargetKind",
    "TuningOutcome",
    "TuningRound",
    "SeededRandom",
]
