"""
Filter Tuning Package

Bounded local search over colour-correction filter parameters, scored by
human responses to freshly generated plates.

Example:
    >>> from cvd_toolkit.tuning import AdaptiveTuner
    >>> tuner = AdaptiveTuner()
    >>> tuner.init("moderate", baseline_score=50, seed="abc")
    >>> plate = tuner.start()
"""

from cvd_toolkit.core.utils.color_filter import apply_to_color, selective_hue_factor

from .config import TuningConfig
from .parameter_space import DEFAULT_RANGES, DEFAULT_SPACE, FilterParameterSpace
from .presets import PRESETS, initial_parameters, tune_from_severity
from .tuner import AdaptiveTuner, TunerState, next_parameters, stop_reason, validation_session

__all__ = [
    "apply_to_color",
    "selective_hue_factor",
    "TuningConfig",
    "DEFAULT_RANGES",
    "DEFAULT_SPACE",
    "FilterParameterSpace",
    "PRESETS",
    "initial_parameters",
    "tune_from_severity",
    "AdaptiveTuner",
    "TunerState",
    "next_parameters",
    "stop_reason",
    "validation_session",
]
