"""
Module: staircase

Purpose:
    Records for the level-progression (staircase) test: three confusion
    axes, each stepped through graded levels where the target colour
    approaches the background, ending after two consecutive misses.

Key Classes:
    - ConfusionAxis: red-green, purple-blue, purple-green
    - DeficiencyType / DeficiencySeverity: Diagnosis labels
    - AxisDiagnosis: Type and severity derived from the three axis scores
    - StaircaseResult: Scores, diagnosis and the trial log

Used By:
    - generation.palettes, generation.generator
    - session.staircase, session.diagnosis
    - core.utils.serialization
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Optional, Tuple, Union

from ..errors import InvalidArgumentError
from .filters import FilterParameters
from .responses import ResponseRecord


class ConfusionAxis(str, Enum):
    """Colour confusion axis tested by one staircase."""
    RED_GREEN = "red_green"
    PURPLE_BLUE = "purple_blue"
    PURPLE_GREEN = "purple_green"  # Protan indicator

    def __str__(self) -> str:
        return self.value


# Presentation order; red-green first so a perfect score can end the test.
AXIS_ORDER: Tuple[ConfusionAxis, ...] = (
    ConfusionAxis.RED_GREEN,
    ConfusionAxis.PURPLE_BLUE,
    ConfusionAxis.PURPLE_GREEN,
)


class DeficiencyType(str, Enum):
    NORMAL = "normal"
    DEUTAN = "deutan"
    PROTAN = "protan"

    def __str__(self) -> str:
        return self.value


class DeficiencySeverity(str, Enum):
    NONE = "none"
    VERY_MILD = "very_mild"
    MILD = "mild"
    MODERATE = "moderate"
    SEVERE = "severe"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class AxisDiagnosis:
    """
    Deficiency type and severity read off the three axis scores.

    Attributes:
        type: normal, deutan or protan
        severity: none for normal vision, else very mild to severe
        description: Fixed human-readable summary for the type
        scores: Axis -> percentage of levels passed
    """

    type: DeficiencyType
    severity: DeficiencySeverity
    description: str
    scores: Mapping[ConfusionAxis, int]

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type.value,
            "severity": self.severity.value,
            "description": self.description,
            "scores": {axis.value: score for axis, score in self.scores.items()},
        }


@dataclass(frozen=True)
class StaircaseResult:
    """
    Outcome of one staircase run.

    Attributes:
        seed: Run seed
        scores: Axis -> round(levels passed / levels * 100); 0 for axes
            never reached
        levels_passed: Axis -> highest level cleared
        diagnosis: Type and severity
        calibration_passed: Grey calibration plate was found
        stopped_early: Ended before every axis ran, after a perfect
            red-green axis or a "can't see" once red-green scored above 80
        aborted: Stopped by the caller
        responses: Every recorded trial, retries included
        filter_parameters: Filter the plates were generated with
    """

    seed: Union[int, str, None]
    scores: Mapping[ConfusionAxis, int]
    levels_passed: Mapping[ConfusionAxis, int]
    diagnosis: AxisDiagnosis
    calibration_passed: bool
    stopped_early: bool = False
    aborted: bool = False
    responses: Tuple[ResponseRecord, ...] = field(default_factory=tuple)
    filter_parameters: Optional[FilterParameters] = None

    def __post_init__(self) -> None:
        for axis, score in self.scores.items():
            if not 0 <= score <= 100:
                raise InvalidArgumentError(f"{axis.value} score out of range: {score}")

    def score_for(self, axis: ConfusionAxis) -> int:
        return self.scores.get(axis, 0)

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "seed": self.seed,
            "scores": {axis.value: self.score_for(axis) for axis in AXIS_ORDER},
            "levels_passed": {axis.value: self.levels_passed.get(axis, 0) for axis in AXIS_ORDER},
            "diagnosis": self.diagnosis.to_dict(),
            "calibration_passed": self.calibration_passed,
            "stopped_early": self.stopped_early,
            "aborted": self.aborted,
            "trials": len(self.responses),
            "responses": [r.to_dict() for r in self.responses],
        }
        if self.filter_parameters is not None:
            d["filter_parameters"] = self.filter_parameters.to_dict()
        return d
