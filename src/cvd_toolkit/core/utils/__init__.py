"""
Utils Package

Seeded randomness, colour conversion and serialisation helpers.
"""

from .color_filter import apply_to_color, selective_hue_factor
from .seeded_random import SeededRandom, create, derive_seed, pick, shuffle
from .serialization import (
    deserialize_filter_parameters,
    deserialize_plate_request,
    deserialize_session_result,
    serialize_plate,
    serialize_session_result,
    serialize_tuning_outcome,
    to_json,
)

__all__ = [
    "apply_to_color",
    "selective_hue_factor",
    "SeededRandom",
    "create",
    "derive_seed",
    "pick",
    "shuffle",
    "deserialize_filter_parameters",
    "deserialize_plate_request",
    "deserialize_session_result",
    "serialize_plate",
    "serialize_session_result",
    "serialize_tuning_outcome",
    "to_json",
]
