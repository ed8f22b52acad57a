"""
Module: session.controller

Purpose:
    Assemble a ready-to-start session: generate the plate sequence for a
    SessionConfig and pair it with a fresh TrialSequencer.

Key Functions:
    - build_session(): Entry point for baseline/validation sessions

Key Classes:
    - PreparedSession: Plates plus an unstarted sequencer

Dependencies:
    - generation.generator: Plate sequences
    - session.sequencer: TrialSequencer

Used By:
    - tuning.tuner: validation_session()
    - cli: simulate command
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Optional, Tuple

from cvd_toolkit.core.models import Plate
from cvd_toolkit.generation import PlateGenerator

from .config import SessionConfig
from .sequencer import Clock, TrialSequencer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PreparedSession:
    """
    A generated session waiting to be started.

    Attributes:
        config: Configuration the plates were generated from
        plates: Plate sequence in presentation order
        sequencer: Fresh sequencer in IDLE state

    Example:
        >>> session = build_session(SessionConfig.for_mode(SessionMode.BASELINE, "abc"))
        >>> plate = session.start()
    """

    config: SessionConfig
    plates: Tuple[Plate, ...]
    sequencer: TrialSequencer

    def start(self) -> Plate:
        """Start the sequencer on the prepared plates."""
        return self.sequencer.start(self.plates)


def build_session(
    config: SessionConfig,
    generator: Optional[PlateGenerator] = None,
    clock: Clock = time.monotonic,
) -> PreparedSession:
    """
    Generate the plates for ``config`` and wrap them in a new sequencer.

    Args:
        config: Session configuration
        generator: Plate generator (default configuration if None)
        clock: Monotonic clock in seconds for response timing

    Returns:
        PreparedSession
    """
    generator = generator or PlateGenerator()
    logger.info(
        f"Building {config.mode.value} session seed={config.seed!r}: "
        f"{config.plate_count} plates, ratio={config.category_ratio}"
    )
    plates = generator.generate_sequence(
        config.plate_count,
        config.category_ratio,
        config.seed,
        config.progressive_difficulty,
        difficulty=config.difficulty,
        target_kinds=config.target_kinds,
        filter_parameters=config.filter_parameters,
    )
    sequencer = TrialSequencer(
        mode=config.mode,
        seed=config.seed,
        filter_parameters=config.filter_parameters,
        clock=clock,
    )
    return PreparedSession(config=config, plates=plates, sequencer=sequencer)
