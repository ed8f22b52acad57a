"""
Module: results

Purpose:
    Aggregate records produced when a session is scored: per-category
    statistics, timing, severity assessment and the SessionResult that
    bundles them.

Key Functions:
    - round_half_up(x): Integer rounding with .5 rounded up
    - CategoryStats.from_counts(correct, total): Percentage with 0 for empty

Key Classes:
    - SessionMode, SeverityBucket, Confidence
    - CategoryStats, TimingStats, SessionSummary
    - SeverityAssessment
    - SessionResult

Used By:
    - session.scoring, session.severity, session.sequencer
    - tuning.tuner
    - core.utils.serialization
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Optional, Tuple, Union

from ..errors import InvalidArgumentError
from .filters import FilterParameters
from .plates import Difficulty
from .responses import ResponseRecord


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives."""
    return int(math.floor(value + 0.5))


class SessionMode(str, Enum):
    """Purpose of a session; selects plate count and category mix."""
    BASELINE = "baseline"
    TUNING = "tuning"
    VALIDATION = "validation"

    def __str__(self) -> str:
        return self.value


class SeverityBucket(str, Enum):
    """Diagnostic bucket derived from session scores."""
    NONE = "none"
    MILD = "mild"
    MODERATE = "moderate"
    STRONG = "strong"
    INCONCLUSIVE = "inconclusive"

    def __str__(self) -> str:
        return self.value


# Ordering used for monotonicity checks; INCONCLUSIVE is unranked.
SEVERITY_RANK: Mapping[SeverityBucket, int] = {
    SeverityBucket.NONE: 0,
    SeverityBucket.MILD: 1,
    SeverityBucket.MODERATE: 2,
    SeverityBucket.STRONG: 3,
}


class Confidence(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class CategoryStats:
    """
    Correct/total counts with an integer percentage.

    Invariants:
        - 0 <= correct <= total
        - 0 <= percentage <= 100, and percentage == 0 when total == 0
    """

    correct: int
    total: int
    percentage: int

    def __post_init__(self) -> None:
        if not 0 <= self.correct <= self.total:
            raise InvalidArgumentError(
                f"correct ({self.correct}) must be within [0, total={self.total}]"
            )
        if not 0 <= self.percentage <= 100:
            raise InvalidArgumentError(f"percentage out of range: {self.percentage}")

    @classmethod
    def from_counts(cls, correct: int, total: int) -> CategoryStats:
        if total == 0:
            return cls(correct=0, total=0, percentage=0)
        return cls(correct=correct, total=total, percentage=round_half_up(100 * correct / total))

    @classmethod
    def empty(cls) -> CategoryStats:
        return cls(correct=0, total=0, percentage=0)

    def to_dict(self) -> dict[str, int]:
        return {"correct": self.correct, "total": self.total, "percentage": self.percentage}


@dataclass(frozen=True, slots=True)
class TimingStats:
    """
    Response timing over answered (non-skipped, non-timed-out) trials.

    Attributes:
        mean_response_ms: Mean response time, 0 when nothing was answered
        total_response_ms: Sum of answered response times
        session_seconds: Wall time from start to scoring
    """

    mean_response_ms: float
    total_response_ms: float
    session_seconds: float

    def to_dict(self) -> dict[str, float]:
        return {
            "mean_response_ms": self.mean_response_ms,
            "total_response_ms": self.total_response_ms,
            "session_seconds": self.session_seconds,
        }


@dataclass(frozen=True, slots=True)
class SessionSummary:
    answered: int
    skipped: int
    timed_out: int

    def to_dict(self) -> dict[str, int]:
        return {"answered": self.answered, "skipped": self.skipped, "timed_out": self.timed_out}


@dataclass(frozen=True, slots=True)
class SeverityAssessment:
    """
    Diagnostic severity derived from category scores.

    Attributes:
        value: Numeric severity 0-100 (higher = more severe)
        bucket: SeverityBucket
        confidence: Confidence in the assessment
        description: Human-readable summary
        deutan_score: Confusion-axis percentage
        control_score: Control percentage
        performance_gap: control_score - deutan_score
    """

    value: int
    bucket: SeverityBucket
    confidence: Confidence
    description: str
    deutan_score: int
    control_score: int
    performance_gap: int

    def __post_init__(self) -> None:
        if not 0 <= self.value <= 100:
            raise InvalidArgumentError(f"severity value out of range: {self.value}")

    @property
    def rank(self) -> Optional[int]:
        return SEVERITY_RANK.get(self.bucket)

    def to_dict(self) -> dict[str, Any]:
        return {
            "value": self.value,
            "bucket": self.bucket.value,
            "confidence": self.confidence.value,
            "description": self.description,
            "deutan_score": self.deutan_score,
            "control_score": self.control_score,
            "performance_gap": self.performance_gap,
        }


@dataclass(frozen=True)
class SessionResult:
    """
    Scored session (immutable).

    Attributes:
        mode: Session mode
        seed: Session seed
        overall: Stats over every trial
        deutan: Confusion-axis stats
        control: Control stats
        timing: TimingStats
        severity: SeverityAssessment
        difficulty_breakdown: Stats per difficulty present in the session
        summary: Answered/skipped/timed-out counts
        responses: Every ResponseRecord in trial order
        plate_count: Plates in the session (may exceed len(responses) if aborted)
        filter_parameters: Filter the plates were generated with
        aborted: True when scored before the last plate
    """

    mode: SessionMode
    seed: Union[int, str, None]
    overall: CategoryStats
    deutan: CategoryStats
    control: CategoryStats
    timing: TimingStats
    severity: SeverityAssessment
    summary: SessionSummary
    responses: Tuple[ResponseRecord, ...]
    plate_count: int
    difficulty_breakdown: Mapping[Difficulty, CategoryStats] = field(default_factory=dict)
    filter_parameters: Optional[FilterParameters] = None
    aborted: bool = False

    @property
    def score(self) -> int:
        """Overall percentage; the tuner's round score."""
        return self.overall.percentage

    @property
    def is_complete(self) -> bool:
        return not self.aborted and len(self.responses) == self.plate_count
