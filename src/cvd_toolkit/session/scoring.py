"""
Session scoring.

Turns the append-only response log into a SessionResult: category and
overall statistics, timing over answered trials, a per-difficulty
breakdown and the severity assessment.
"""

from __future__ import annotations

import logging
from typing import Dict, Optional, Sequence, Union

from cvd_toolkit.core.models import (
    Category,
    CategoryStats,
    Difficulty,
    FilterParameters,
    ResponseRecord,
    SessionMode,
    SessionResult,
    SessionSummary,
    TimingStats,
)

from .severity import estimate_severity

logger = logging.getLogger(__name__)


def category_stats(records: Sequence[ResponseRecord]) -> CategoryStats:
    correct = sum(1 for r in records if r.is_correct)
    return CategoryStats.from_counts(correct, len(records))


def timing_stats(records: Sequence[ResponseRecord], session_seconds: float) -> TimingStats:
    """Mean and total response time over trials that were actually answered."""
    times = [r.response_time_ms for r in records if r.is_answered]
    total = float(sum(times))
    return TimingStats(
        mean_response_ms=total / len(times) if times else 0.0,
        total_response_ms=total,
        session_seconds=session_seconds,
    )


def difficulty_breakdown(records: Sequence[ResponseRecord]) -> Dict[Difficulty, CategoryStats]:
    """Stats per difficulty, for difficulties that occur in ``records`` only."""
    breakdown = {}
    for difficulty in Difficulty:
        subset = [r for r in records if r.difficulty is difficulty]
        if subset:
            breakdown[difficulty] = category_stats(subset)
    return breakdown


def score_responses(
    records: Sequence[ResponseRecord],
    *,
    mode: SessionMode,
    seed: Union[int, str, None],
    plate_count: int,
    session_seconds: float = 0.0,
    filter_parameters: Optional[FilterParameters] = None,
    aborted: bool = False,
) -> SessionResult:
    """
    Score a response log.

    Empty categories score 0% and are logged, never raised.

    Args:
        records: Responses in trial order
        mode: Session mode
        seed: Session seed
        plate_count: Plates in the session
        session_seconds: Elapsed session time
        filter_parameters: Filter the plates were generated with
        aborted: True for a partial (aborted) session

    Returns:
        SessionResult
    """
    deutan_records = [r for r in records if r.category is Category.DEUTAN]
    control_records = [r for r in records if r.category is Category.CONTROL]

    deutan = category_stats(deutan_records)
    control = category_stats(control_records)
    if not deutan_records:
        logger.warning("Session has no deutan responses; deutan score is 0")
    if not control_records:
        logger.warning("Session has no control responses; severity will be inconclusive")

    summary = SessionSummary(
        answered=sum(1 for r in records if r.is_answered),
        skipped=sum(1 for r in records if r.skipped),
        timed_out=sum(1 for r in records if r.timed_out),
    )

    return SessionResult(
        mode=mode,
        seed=seed,
        overall=category_stats(records),
        deutan=deutan,
        control=control,
        timing=timing_stats(records, session_seconds),
        severity=estimate_severity(deutan, control),
        summary=summary,
        responses=tuple(records),
        plate_count=plate_count,
        difficulty_breakdown=difficulty_breakdown(records),
        filter_parameters=filter_parameters,
        aborted=aborted,
    )
