"""
Starting filter parameters per severity bucket.

Hue, intensity, saturation and contrast follow the colour-filter presets;
channel gains are offsets calibrated so that the strong preset roughly
equalises perceived red and green against blue (about 1.27x red and
1.69x green at full strength).
"""

from __future__ import annotations

import logging
from typing import Mapping, Union

from cvd_toolkit.core.models import FilterParameters, SeverityAssessment, SeverityBucket

from .parameter_space import DEFAULT_SPACE, FilterParameterSpace

logger = logging.getLogger(__name__)

PRESETS: Mapping[SeverityBucket, FilterParameters] = {
    SeverityBucket.NONE: FilterParameters(),
    SeverityBucket.MILD: FilterParameters(
        hue_shift=15, intensity=0.3, saturation_boost=10, contrast=5,
        red_gain=0.07, green_gain=0.17,
    ),
    SeverityBucket.MODERATE: FilterParameters(
        hue_shift=25, intensity=0.5, saturation_boost=15, contrast=8,
        red_gain=0.17, green_gain=0.43,
    ),
    SeverityBucket.STRONG: FilterParameters(
        hue_shift=40, intensity=0.7, saturation_boost=20, contrast=10,
        red_gain=0.27, green_gain=0.69,
    ),
    SeverityBucket.INCONCLUSIVE: FilterParameters(
        hue_shift=25, intensity=0.5, saturation_boost=15, contrast=8,
        red_gain=0.12, green_gain=0.30,
    ),
}

# Saturation boost grows by up to this fraction as the performance gap
# approaches GAP_SATURATION_SCALE points
GAP_SATURATION_GAIN = 0.15
GAP_SATURATION_SCALE = 50


def initial_parameters(bucket: Union[SeverityBucket, str]) -> FilterParameters:
    """
    Preset for a severity bucket; unknown buckets fall back to moderate.

    Example:
        >>> initial_parameters("strong").hue_shift
        40
    """
    try:
        key = SeverityBucket(bucket)
    except ValueError:
        logger.warning(f"Unknown severity bucket {bucket!r}, using moderate preset")
        key = SeverityBucket.MODERATE
    return PRESETS[key]


def tune_from_severity(
    severity: SeverityAssessment,
    space: FilterParameterSpace = DEFAULT_SPACE,
) -> FilterParameters:
    """
    Preset for the assessment's bucket, with saturation scaled by the gap
    between control and deutan performance.
    """
    params = initial_parameters(severity.bucket)
    gap_factor = min(max(severity.performance_gap, 0) / GAP_SATURATION_SCALE, 1.0)
    boosted = params.saturation_boost * (1 + gap_factor * GAP_SATURATION_GAIN)
    return space.normalize(params.replace(saturation_boost=boosted))
