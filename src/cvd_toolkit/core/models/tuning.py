"""
Module: tuning

Purpose:
    History records produced by the adaptive tuner.

Key Classes:
    - TuningRound: One evaluated parameter set
    - TuningOutcome: Final (or partial, when aborted) tuning artifact

Used By:
    - tuning.tuner
    - core.utils.serialization
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from .filters import FilterParameters
from .responses import ResponseRecord


@dataclass(frozen=True)
class TuningRound:
    """
    One tuning round.

    Attributes:
        round_number: 1-based round index
        params: Filter parameters the round's plates were generated with
        score: Overall percentage for the round
        correct: Correct answers in the round
        total: Answers recorded in the round
        responses: The round's ResponseRecords
        partial: True when the round was cut short by an abort; partial
            rounds never update the best score
    """

    round_number: int
    params: FilterParameters
    score: int
    correct: int
    total: int
    responses: Tuple[ResponseRecord, ...] = ()
    partial: bool = False


@dataclass(frozen=True)
class TuningOutcome:
    """
    Result of a tuning run (immutable).

    Attributes:
        best_params: Best parameters found
        best_score: Score achieved by best_params (baseline if never beaten)
        baseline_score: Score the run started from
        rounds: Number of completed rounds
        history: Every round in order, including a trailing partial round
            when aborted mid-round
        aborted: True when stopped by the caller
        stop_reason: Why the search ended
    """

    best_params: FilterParameters
    best_score: int
    baseline_score: int
    rounds: int
    history: Tuple[TuningRound, ...]
    aborted: bool = False
    stop_reason: Optional[str] = None

    @property
    def improvement(self) -> int:
        return self.best_score - self.baseline_score

    @property
    def completed_rounds(self) -> Tuple[TuningRound, ...]:
        return tuple(r for r in self.history if not r.partial)
