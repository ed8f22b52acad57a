"""
Schema Validation Utilities

Validates plain-dict records crossing the boundary to the UI and export
layers: generation requests coming in, session results going out.

Basic structural checks always run and fail fast with a precise path.
With ``strict=True`` the record is additionally validated against the
JSON Schema files that ship next to this module.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import jsonschema

from ..errors import InvalidArgumentError


SESSION_RESULT_SCHEMA_VERSION = 1

# Loaded lazily, keyed by schema name
_SCHEMAS: dict[str, dict] = {}


def _load_schema(name: str) -> dict:
    """Load a schema from the schemas directory."""
    if name not in _SCHEMAS:
        schema_path = Path(__file__).parent / f"{name}.schema.json"
        if not schema_path.exists():
            raise FileNotFoundError(f"Schema not found: {schema_path}")
        with open(schema_path, "r", encoding="utf-8") as f:
            _SCHEMAS[name] = json.load(f)
    return _SCHEMAS[name]


class ValidationError(InvalidArgumentError):
    """Raised when data fails schema validation."""

    def __init__(self, message: str, path: str = "", errors: list[str] | None = None):
        super().__init__(message)
        self.path = path
        self.errors = errors or []


def _validate_against(name: str, data: dict[str, Any]) -> None:
    schema = _load_schema(name)
    try:
        jsonschema.validate(data, schema)
    except jsonschema.ValidationError as e:
        raise ValidationError(
            f"Schema validation failed: {e.message}",
            path=".".join(str(p) for p in e.absolute_path),
            errors=[e.message],
        ) from e


def validate_plate_request(data: dict[str, Any], *, strict: bool = False) -> None:
    """
    Validate a generation request dict.

    Args:
        data: Request dictionary (see plate_request.schema.json)
        strict: If True, also run full JSON Schema validation

    Raises:
        ValidationError: If data is invalid
    """
    if not isinstance(data, dict):
        raise ValidationError(f"Plate request must be a dict, got {type(data).__name__}")

    if "seed" not in data:
        raise ValidationError("Missing required fields: ['seed']", errors=["Missing field: seed"])

    seed = data["seed"]
    if isinstance(seed, bool) or not isinstance(seed, (int, str)):
        raise ValidationError(f"Invalid seed: {seed!r} (must be int or str)", path="seed")

    params = data.get("filter_parameters")
    if params is not None and not isinstance(params, dict):
        raise ValidationError("filter_parameters must be a dict", path="filter_parameters")

    if strict:
        _validate_against("plate_request", data)


def validate_session_result(data: dict[str, Any], *, strict: bool = False) -> None:
    """
    Validate a serialised SessionResult.

    Args:
        data: Output of serialize_session_result()
        strict: If True, also run full JSON Schema validation

    Raises:
        ValidationError: If data is invalid
    """
    required = [
        "schema_version", "mode", "overall", "deutan", "control",
        "timing", "severity", "responses", "plate_count",
    ]
    missing = [f for f in required if f not in data]
    if missing:
        raise ValidationError(
            f"Missing required fields: {missing}",
            errors=[f"Missing field: {f}" for f in missing],
        )

    version = data.get("schema_version")
    if version != SESSION_RESULT_SCHEMA_VERSION:
        raise ValidationError(
            f"Unsupported session result schema version: {version} "
            f"(expected {SESSION_RESULT_SCHEMA_VERSION})",
            path="schema_version",
        )

    for key in ("overall", "deutan", "control"):
        _validate_stats(data[key], key)

    if strict:
        _validate_against("session_result", data)


def _validate_stats(data: Any, path: str) -> None:
    """Validate a {correct, total, percentage} block."""
    if not isinstance(data, dict):
        raise ValidationError(f"{path} must be a dict", path=path)
    for field in ("correct", "total", "percentage"):
        value = data.get(field)
        if not isinstance(value, int) or value < 0:
            raise ValidationError(
                f"Invalid {field}: {value!r} (must be non-negative integer)",
                path=f"{path}.{field}",
            )
    if data["percentage"] > 100:
        raise ValidationError(
            f"Invalid percentage: {data['percentage']} (must be <= 100)",
            path=f"{path}.percentage",
        )
    if data["correct"] > data["total"]:
        raise ValidationError(
            f"correct ({data['correct']}) exceeds total ({data['total']})",
            path=path,
        )
