"""
Serialization Utilities

Converts core records to and from plain dictionaries so that storage and
export layers can persist them verbatim.

- `serialize_*` functions produce JSON-compatible dicts.
- `deserialize_*` functions validate first, then rebuild frozen models.
- Calculated values (mask, improvement) are never stored.
"""

from __future__ import annotations

import json
from typing import Any, Union

from ..errors import InvalidArgumentError
from ..models.filters import FilterParameters
from ..models.plates import Difficulty, Plate, PlateRequest
from ..models.responses import ResponseRecord
from ..models.results import (
    CategoryStats,
    Confidence,
    SessionMode,
    SessionResult,
    SessionSummary,
    SeverityAssessment,
    SeverityBucket,
    TimingStats,
)
from ..models.staircase import StaircaseResult
from ..models.tuning import TuningOutcome, TuningRound
from ..schemas.validator import (
    SESSION_RESULT_SCHEMA_VERSION,
    validate_plate_request,
    validate_session_result,
)


# ─────────────────────────────────────────────────────────────────────────────
# Requests and Parameters
# ─────────────────────────────────────────────────────────────────────────────

def deserialize_plate_request(data: dict[str, Any], *, strict: bool = True) -> PlateRequest:
    """
    Build a PlateRequest from a dict supplied by the UI layer.

    Args:
        data: Request dictionary
        strict: Run full JSON Schema validation before parsing

    Raises:
        ValidationError: If the request shape is malformed
    """
    validate_plate_request(data, strict=strict)
    return PlateRequest.from_dict(data)


def deserialize_filter_parameters(data: Union[dict[str, Any], str]) -> FilterParameters:
    """
    Parse stored filter parameters (dict or JSON string).

    Raises:
        InvalidArgumentError: If the payload is not valid JSON or has unknown keys
    """
    if isinstance(data, str):
        try:
            data = json.loads(data)
        except json.JSONDecodeError as e:
            raise InvalidArgumentError(f"Filter parameters are not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise InvalidArgumentError(f"Filter parameters must be an object, got {type(data).__name__}")
    return FilterParameters.from_dict(data)


# ─────────────────────────────────────────────────────────────────────────────
# Plates
# ─────────────────────────────────────────────────────────────────────────────

def serialize_plate(plate: Plate) -> dict[str, Any]:
    """
    Serialize a Plate for a rendering layer.

    Tiles are emitted row-major with hex colours; animated plates include
    each tile's noise-field parameters.
    """
    tiles = []
    for tile in plate.tiles:
        entry: dict[str, Any] = {
            "row": tile.row,
            "col": tile.col,
            "is_target": tile.is_target,
            "hsl": tile.hsl.to_dict(),
            "rgb": tile.rgb.to_list(),
            "color": tile.hex,
        }
        if tile.animation is not None:
            entry["animation"] = {
                "phase": tile.animation.phase,
                "speed": tile.animation.speed,
                "flow_direction": tile.animation.flow_direction,
            }
        tiles.append(entry)

    return {
        "seed": plate.seed,
        "category": plate.category.value,
        "difficulty": plate.difficulty.value,
        "target": plate.target.to_dict(),
        "grid_size": plate.grid_size,
        "palette": plate.palette.to_dict(),
        "filter_parameters": plate.filter_parameters.to_dict() if plate.filter_parameters else None,
        "subtlety": plate.subtlety,
        "animated": plate.is_animated,
        "tiles": tiles,
    }


# ─────────────────────────────────────────────────────────────────────────────
# Session Results
# ─────────────────────────────────────────────────────────────────────────────

def serialize_session_result(result: SessionResult) -> dict[str, Any]:
    """Serialize a SessionResult; output passes validate_session_result()."""
    return {
        "schema_version": SESSION_RESULT_SCHEMA_VERSION,
        "mode": result.mode.value,
        "seed": result.seed,
        "overall": result.overall.to_dict(),
        "deutan": result.deutan.to_dict(),
        "control": result.control.to_dict(),
        "timing": result.timing.to_dict(),
        "severity": result.severity.to_dict(),
        "summary": result.summary.to_dict(),
        "difficulty_breakdown": {
            d.value: stats.to_dict() for d, stats in result.difficulty_breakdown.items()
        },
        "responses": [r.to_dict() for r in result.responses],
        "plate_count": result.plate_count,
        "filter_parameters": result.filter_parameters.to_dict() if result.filter_parameters else None,
        "aborted": result.aborted,
    }


def deserialize_session_result(data: dict[str, Any], *, validate: bool = True) -> SessionResult:
    """
    Rebuild a SessionResult from a stored dict.

    Raises:
        ValidationError: If validate=True and data is invalid
    """
    if validate:
        validate_session_result(data, strict=False)

    sev = data["severity"]
    severity = SeverityAssessment(
        value=sev["value"],
        bucket=SeverityBucket(sev["bucket"]),
        confidence=Confidence(sev["confidence"]),
        description=sev["description"],
        deutan_score=sev.get("deutan_score", data["deutan"]["percentage"]),
        control_score=sev.get("control_score", data["control"]["percentage"]),
        performance_gap=sev.get("performance_gap", 0),
    )
    params = data.get("filter_parameters")
    return SessionResult(
        mode=SessionMode(data["mode"]),
        seed=data.get("seed"),
        overall=CategoryStats(**data["overall"]),
        deutan=CategoryStats(**data["deutan"]),
        control=CategoryStats(**data["control"]),
        timing=TimingStats(**data["timing"]),
        severity=severity,
        summary=SessionSummary(**data.get("summary", {"answered": 0, "skipped": 0, "timed_out": 0})),
        responses=tuple(ResponseRecord.from_dict(r) for r in data["responses"]),
        plate_count=data["plate_count"],
        difficulty_breakdown={
            Difficulty(k): CategoryStats(**v)
            for k, v in data.get("difficulty_breakdown", {}).items()
        },
        filter_parameters=FilterParameters.from_dict(params) if params else None,
        aborted=data.get("aborted", False),
    )


# ─────────────────────────────────────────────────────────────────────────────
# Staircase
# ─────────────────────────────────────────────────────────────────────────────

def serialize_staircase_result(result: StaircaseResult) -> dict[str, Any]:
    """Serialize a StaircaseResult with every axis present, in test order."""
    return result.to_dict()


# ─────────────────────────────────────────────────────────────────────────────
# Tuning
# ─────────────────────────────────────────────────────────────────────────────

def serialize_tuning_round(round_: TuningRound) -> dict[str, Any]:
    return {
        "round": round_.round_number,
        "params": round_.params.to_dict(),
        "score": round_.score,
        "correct": round_.correct,
        "total": round_.total,
        "partial": round_.partial,
        "responses": [r.to_dict() for r in round_.responses],
    }


def serialize_tuning_outcome(outcome: TuningOutcome) -> dict[str, Any]:
    """Serialize a TuningOutcome, including the derived improvement for display."""
    return {
        "best_params": outcome.best_params.to_dict(),
        "best_score": outcome.best_score,
        "baseline_score": outcome.baseline_score,
        "improvement": outcome.improvement,
        "rounds": outcome.rounds,
        "aborted": outcome.aborted,
        "stop_reason": outcome.stop_reason,
        "history": [serialize_tuning_round(r) for r in outcome.history],
    }


def to_json(data: dict[str, Any], *, indent: int | None = 2) -> str:
    """Dump a serialised record to a JSON string."""
    return json.dumps(data, indent=indent, sort_keys=False)
