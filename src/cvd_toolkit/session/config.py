"""
Module: session.config

Purpose:
    Configuration dataclass for screening sessions. Immutable
    configuration with validation on construction.

Key Classes:
    - SessionConfig: Plate count, category mix and difficulty for a session

Dependencies:
    - dataclasses (std)

Used By:
    - session.controller: build_session()
    - tuning.tuner: validation_session()
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional, Tuple, Union

from cvd_toolkit.core.errors import InvalidArgumentError
from cvd_toolkit.core.models import Difficulty, FilterParameters, SessionMode, TargetKind

# (plate_count, category_ratio, progressive_difficulty) per mode
MODE_DEFAULTS: Mapping[SessionMode, Tuple[int, float, bool]] = {
    SessionMode.BASELINE: (16, 0.625, True),
    SessionMode.TUNING: (8, 0.875, False),
    SessionMode.VALIDATION: (12, 0.667, False),
}


@dataclass(frozen=True)
class SessionConfig:
    """
    Configuration for one screening session (immutable).

    Attributes:
        seed: Session seed; plate i uses f"{seed}-plate-{i}"
        mode: Session mode
        plate_count: Number of plates (>= 1)
        category_ratio: Fraction of deutan plates in [0, 1]
        progressive_difficulty: Ramp difficulty by position
        difficulty: Difficulty when not progressive
        filter_parameters: Filter applied to every plate
        target_kinds: Target kind cycle; None uses the generator default

    Example:
        >>> config = SessionConfig.for_mode(SessionMode.BASELINE, seed="abc")
        >>> config.plate_count
        16
    """

    seed: Union[int, str]
    mode: SessionMode = SessionMode.BASELINE
    plate_count: int = 16
    category_ratio: float = 0.625
    progressive_difficulty: bool = True
    difficulty: Difficulty = Difficulty.MEDIUM
    filter_parameters: Optional[FilterParameters] = None
    target_kinds: Optional[Tuple[TargetKind, ...]] = None

    def __post_init__(self) -> None:
        """Validate configuration on construction."""
        if isinstance(self.seed, bool) or not isinstance(self.seed, (int, str)):
            raise InvalidArgumentError(f"seed must be int or str: {self.seed!r}")
        if self.plate_count < 1:
            raise InvalidArgumentError(f"plate_count must be >= 1: {self.plate_count}")
        if not 0.0 <= self.category_ratio <= 1.0:
            raise InvalidArgumentError(f"category_ratio must be in [0, 1]: {self.category_ratio}")
        if self.target_kinds is not None and not self.target_kinds:
            raise InvalidArgumentError("target_kinds must not be empty")

    @classmethod
    def for_mode(cls, mode: SessionMode, seed: Union[int, str], **overrides) -> SessionConfig:
        """Config with the standard plate count and category mix for ``mode``."""
        plate_count, ratio, progressive = MODE_DEFAULTS[mode]
        values = {
            "plate_count": plate_count,
            "category_ratio": ratio,
            "progressive_difficulty": progressive,
        }
        values.update(overrides)
        return cls(seed=seed, mode=mode, **values)
