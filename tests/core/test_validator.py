"""
Unit Tests for Schema Validation

Tests for plate request and session result validation, in both the quick
structural mode and strict JSON Schema mode.
"""

import pytest

from cvd_toolkit.core.schemas.validator import (
    SESSION_RESULT_SCHEMA_VERSION,
    ValidationError,
    validate_plate_request,
    validate_session_result,
)


def _stats(correct=1, total=2, percentage=50):
    return {"correct": correct, "total": total, "percentage": percentage}


def _valid_result() -> dict:
    return {
        "schema_version": SESSION_RESULT_SCHEMA_VERSION,
        "mode": "baseline",
        "seed": "abc",
        "overall": _stats(),
        "deutan": _stats(0, 1, 0),
        "control": _stats(1, 1, 100),
        "timing": {"mean_response_ms": 1000.0, "total_response_ms": 2000.0, "session_seconds": 4.0},
        "severity": {"value": 100, "bucket": "strong", "confidence": "low", "description": "x"},
        "summary": {"answered": 2, "skipped": 0, "timed_out": 0},
        "responses": [],
        "plate_count": 2,
        "aborted": False,
    }


class TestValidatePlateRequest:
    """Tests for validate_plate_request()."""

    def test_validate_when_minimal_then_passes(self):
        validate_plate_request({"seed": "abc"}, strict=True)

    def test_validate_when_int_seed_then_passes(self):
        validate_plate_request({"seed": 42, "category": "control"}, strict=True)

    def test_validate_when_not_dict_then_raises(self):
        with pytest.raises(ValidationError, match="must be a dict"):
            validate_plate_request(["seed"])

    def test_validate_when_seed_missing_then_raises(self):
        with pytest.raises(ValidationError) as exc:
            validate_plate_request({"category": "deutan"})
        assert "Missing field: seed" in exc.value.errors

    def test_validate_when_bool_seed_then_raises(self):
        with pytest.raises(ValidationError) as exc:
            validate_plate_request({"seed": True})
        assert exc.value.path == "seed"

    def test_validate_when_filter_not_dict_then_raises(self):
        with pytest.raises(ValidationError, match="filter_parameters"):
            validate_plate_request({"seed": 1, "filter_parameters": [1, 2]})

    def test_validate_when_strict_unknown_category_then_raises(self):
        with pytest.raises(ValidationError) as exc:
            validate_plate_request({"seed": 1, "category": "tritan"}, strict=True)
        assert exc.value.path == "category"

    def test_validate_when_strict_unknown_filter_key_then_raises(self):
        with pytest.raises(ValidationError):
            validate_plate_request({"seed": 1, "filter_parameters": {"gamma": 2}}, strict=True)

    def test_validate_when_not_strict_unknown_category_then_passes(self):
        # Quick mode checks structure only
        validate_plate_request({"seed": 1, "category": "tritan"})


class TestValidateSessionResult:
    """Tests for validate_session_result()."""

    def test_validate_when_valid_then_passes(self):
        validate_session_result(_valid_result(), strict=True)

    def test_validate_when_missing_fields_then_lists_them(self):
        data = _valid_result()
        del data["overall"]
        del data["plate_count"]
        with pytest.raises(ValidationError) as exc:
            validate_session_result(data)
        assert "Missing field: overall" in exc.value.errors
        assert "Missing field: plate_count" in exc.value.errors

    def test_validate_when_old_version_then_raises(self):
        data = _valid_result()
        data["schema_version"] = 0
        with pytest.raises(ValidationError, match="schema version"):
            validate_session_result(data)

    def test_validate_when_percentage_over_100_then_raises(self):
        data = _valid_result()
        data["deutan"] = _stats(1, 1, 101)
        with pytest.raises(ValidationError) as exc:
            validate_session_result(data)
        assert exc.value.path == "deutan.percentage"

    def test_validate_when_correct_exceeds_total_then_raises(self):
        data = _valid_result()
        data["control"] = _stats(3, 2, 100)
        with pytest.raises(ValidationError, match="exceeds"):
            validate_session_result(data)

    def test_validate_when_negative_count_then_raises(self):
        data = _valid_result()
        data["overall"] = _stats(-1, 2, 0)
        with pytest.raises(ValidationError, match="non-negative"):
            validate_session_result(data)

    def test_validate_when_strict_bad_bucket_then_raises(self):
        data = _valid_result()
        data["severity"]["bucket"] = "severe"
        with pytest.raises(ValidationError) as exc:
            validate_session_result(data, strict=True)
        assert exc.value.path == "severity.bucket"
