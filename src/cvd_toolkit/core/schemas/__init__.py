"""
Schemas Package

JSON Schema definitions and validators for request and result records.
"""

from .validator import (
    SESSION_RESULT_SCHEMA_VERSION,
    ValidationError,
    validate_plate_request,
    validate_session_result,
)

__all__ = [
    "SESSION_RESULT_SCHEMA_VERSION",
    "ValidationError",
    "validate_plate_request",
    "validate_session_result",
]
