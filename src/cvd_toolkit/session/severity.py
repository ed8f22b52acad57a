"""
Module: session.severity

Purpose:
    Map deutan and control category scores to a severity value, bucket,
    confidence level and description.

Key Functions:
    - estimate_severity(deutan, control): SeverityAssessment

Algorithm:
    1. Control below 50% -> inconclusive (value 0, low confidence)
    2. Deutan score relative to control, capped at 100
    3. Severity value = 100 - relative score
    4. Bucket by value: <=15 none, <=35 mild, <=60 moderate, else strong
    5. Confidence from control sample size and score

Used By:
    - session.scoring
"""

from __future__ import annotations

from typing import Mapping

from cvd_toolkit.core.models import (
    CategoryStats,
    Confidence,
    SeverityAssessment,
    SeverityBucket,
    round_half_up,
)

INCONCLUSIVE_CONTROL_BELOW = 50

# Upper bound (inclusive) of each bucket's severity value
BUCKET_THRESHOLDS = (
    (15, SeverityBucket.NONE),
    (35, SeverityBucket.MILD),
    (60, SeverityBucket.MODERATE),
)

DESCRIPTIONS: Mapping[SeverityBucket, str] = {
    SeverityBucket.NONE: (
        "No significant red-green color confusion detected. Color vision "
        "appears normal for the tested range."
    ),
    SeverityBucket.MILD: (
        "Mild red-green color confusion detected. Some shades of red and "
        "green may be subtly harder to tell apart."
    ),
    SeverityBucket.MODERATE: (
        "Moderate red-green color confusion detected, consistent with "
        "deuteranomaly."
    ),
    SeverityBucket.STRONG: (
        "Strong red-green color confusion detected, consistent with "
        "deuteranopia or strong deuteranomaly."
    ),
    SeverityBucket.INCONCLUSIVE: (
        "Control plate performance was too low for a reliable assessment."
    ),
}


def bucket_for_value(value: int) -> SeverityBucket:
    for upper, bucket in BUCKET_THRESHOLDS:
        if value <= upper:
            return bucket
    return SeverityBucket.STRONG


def confidence_for(control: CategoryStats) -> Confidence:
    if control.total >= 5 and control.percentage >= 80:
        return Confidence.HIGH
    if control.total < 3 or control.percentage < 60:
        return Confidence.LOW
    return Confidence.MEDIUM


def estimate_severity(deutan: CategoryStats, control: CategoryStats) -> SeverityAssessment:
    """
    Estimate severity from category statistics.

    Control performance calibrates the deutan score: a subject who misses
    control plates too is not penalised again on deutan plates. With a
    fixed control score, a lower deutan score never gives a lower bucket.

    Args:
        deutan: Confusion-axis stats
        control: Control stats

    Returns:
        SeverityAssessment; bucket INCONCLUSIVE when control < 50%
        (including sessions with no control plates)

    Example:
        >>> estimate_severity(
        ...     CategoryStats.from_counts(3, 10), CategoryStats.from_counts(6, 6)
        ... ).bucket
        <SeverityBucket.STRONG: 'strong'>
    """
    gap = control.percentage - deutan.percentage

    if control.percentage < INCONCLUSIVE_CONTROL_BELOW:
        return SeverityAssessment(
            value=0,
            bucket=SeverityBucket.INCONCLUSIVE,
            confidence=Confidence.LOW,
            description=DESCRIPTIONS[SeverityBucket.INCONCLUSIVE],
            deutan_score=deutan.percentage,
            control_score=control.percentage,
            performance_gap=gap,
        )

    if control.percentage == 100:
        adjusted = float(deutan.percentage)
    else:
        adjusted = min(100.0, deutan.percentage / control.percentage * 100)

    value = round_half_up(100 - adjusted)
    bucket = bucket_for_value(value)
    return SeverityAssessment(
        value=value,
        bucket=bucket,
        confidence=confidence_for(control),
        description=DESCRIPTIONS[bucket],
        deutan_score=deutan.percentage,
        control_score=control.percentage,
        performance_gap=gap,
    )
