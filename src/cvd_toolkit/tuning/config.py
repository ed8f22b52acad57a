"""
Module: tuning.config

Purpose:
    Configuration dataclass for the adaptive filter tuner. Immutable
    configuration with validation on construction.

Key Classes:
    - TuningConfig: Round limit, stall limit and neighbour thresholds

Dependencies:
    - dataclasses (std)

Used By:
    - tuning.tuner: AdaptiveTuner
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from cvd_toolkit.core.errors import InvalidArgumentError
from cvd_toolkit.core.models import TargetKind


@dataclass(frozen=True)
class TuningConfig:
    """
    Configuration for a tuning run (immutable).

    Attributes:
        max_rounds: Round limit R; the search never runs longer
        plates_per_round: Plates N evaluated per round
        stall_limit: Stop after K consecutive rounds without a new best
        category_ratio: Deutan fraction of each round's plates
        local_similarity: Dedupe threshold when searching around the best
        outward_similarity: Dedupe threshold when searching outward
        fine_step_multiplier: Step multiplier for the local fallback
        target_kinds: Target kind cycle for round plates (None = generator default)

    Example:
        >>> TuningConfig(max_rounds=3).plates_per_round
        5
    """

    max_rounds: int = 5
    plates_per_round: int = 5
    stall_limit: int = 2
    category_ratio: float = 0.8
    local_similarity: float = 0.95
    outward_similarity: float = 0.9
    fine_step_multiplier: float = 0.5
    target_kinds: Optional[Tuple[TargetKind, ...]] = None

    def __post_init__(self) -> None:
        """Validate configuration on construction."""
        if self.max_rounds < 1:
            raise InvalidArgumentError(f"max_rounds must be >= 1: {self.max_rounds}")
        if self.plates_per_round < 1:
            raise InvalidArgumentError(f"plates_per_round must be >= 1: {self.plates_per_round}")
        if self.stall_limit < 1:
            raise InvalidArgumentError(f"stall_limit must be >= 1: {self.stall_limit}")
        if not 0.0 <= self.category_ratio <= 1.0:
            raise InvalidArgumentError(f"category_ratio must be in [0, 1]: {self.category_ratio}")
        for name in ("local_similarity", "outward_similarity"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise InvalidArgumentError(f"{name} must be in [0, 1]: {value}")
        if self.fine_step_multiplier <= 0:
            raise InvalidArgumentError(
                f"fine_step_multiplier must be positive: {self.fine_step_multiplier}"
            )
        if self.target_kinds is not None and not self.target_kinds:
            raise InvalidArgumentError("target_kinds must not be empty")
