"""
Module: session.staircase

Purpose:
    Level-progression test over three confusion axes. A grey calibration
    plate comes first; then each axis steps through graded levels whose
    target colour approaches the background. Two consecutive misses end an
    axis, and its score is the fraction of levels cleared.

Key Classes:
    - StaircaseSequencer: The state machine

Algorithm:
    1. Calibration: a hit (or two misses) moves on to the first axis
    2. Per axis, starting at level 0:
       - hit: clear the level, reset the miss count, present the next level
       - miss: first miss re-presents the same plate, second ends the axis
       - "can't see": ends the axis, or the whole test once red-green
         has already scored above 80
    3. Axis score = round(levels cleared / levels * 100)
    4. A perfect red-green axis ends the test early
    5. Diagnose type and severity from the three scores

Dependencies:
    - generation.PlateGenerator: generate_level(), generate_calibration()
    - session.diagnosis: diagnose_axes()
    - session.sequencer: evaluate_response()

Used By:
    - cli: ``cvd-toolkit staircase``
"""

from __future__ import annotations

import logging
import time
from typing import Dict, List, Optional, Union

from cvd_toolkit.core.errors import InvalidStateError
from cvd_toolkit.core.models import (
    AXIS_ORDER,
    ConfusionAxis,
    FilterParameters,
    Plate,
    Response,
    ResponseRecord,
    StaircaseResult,
    round_half_up,
)
from cvd_toolkit.core.utils.seeded_random import derive_seed
from cvd_toolkit.generation import STAIRCASE_LEVELS, PlateGenerator

from .diagnosis import diagnose_axes
from .sequencer import Clock, SequencerState, evaluate_response

logger = logging.getLogger(__name__)

MISS_LIMIT = 2

# A "can't see" after a red-green score above this ends the test
EARLY_EXIT_SCORE = 80


def axis_score(levels_cleared: int, levels: int = STAIRCASE_LEVELS) -> int:
    return round_half_up(levels_cleared / levels * 100)


class StaircaseSequencer:
    """
    Drives one staircase run.

    Plates are generated on presentation from ``derive_seed(seed, axis,
    "level", level)`` so the run is reproducible for a given seed and
    response sequence. A retry after a first miss re-presents the same
    plate.

    Attributes:
        seed: Run seed
        filter_parameters: Filter applied to every plate
        generator: Plate source

    Example:
        >>> seq = StaircaseSequencer(seed="abc")
        >>> plate = seq.start()          # calibration plate
        >>> seq.in_calibration
        True
    """

    def __init__(
        self,
        seed: Union[int, str] = "staircase",
        generator: Optional[PlateGenerator] = None,
        filter_parameters: Optional[FilterParameters] = None,
        clock: Clock = time.monotonic,
    ) -> None:
        self.seed = seed
        self.generator = generator or PlateGenerator()
        self.filter_parameters = filter_parameters
        self._clock = clock
        self._state = SequencerState.IDLE
        self._reset()

    def _reset(self) -> None:
        self._axis_index = -1  # -1 while calibrating
        self._level = 0
        self._misses = 0
        self._calibration_passed = False
        self._scores: Dict[ConfusionAxis, int] = {}
        self._levels_passed: Dict[ConfusionAxis, int] = {}
        self._records: List[ResponseRecord] = []
        self._plate: Optional[Plate] = None
        self._presented_at = 0.0
        self._result: Optional[StaircaseResult] = None

    # ─────────────────────────────────────────────────────────────────────
    # State
    # ─────────────────────────────────────────────────────────────────────

    @property
    def state(self) -> SequencerState:
        return self._state

    @property
    def in_calibration(self) -> bool:
        return self._axis_index < 0

    @property
    def current_axis(self) -> Optional[ConfusionAxis]:
        if self.in_calibration or self._axis_index >= len(AXIS_ORDER):
            return None
        return AXIS_ORDER[self._axis_index]

    @property
    def current_level(self) -> int:
        return self._level

    @property
    def misses(self) -> int:
        return self._misses

    @property
    def current_plate(self) -> Optional[Plate]:
        if self._state is not SequencerState.AWAITING_RESPONSE:
            return None
        return self._plate

    @property
    def scores(self) -> Dict[ConfusionAxis, int]:
        """Scores of the axes finished so far."""
        return dict(self._scores)

    @property
    def responses(self) -> tuple[ResponseRecord, ...]:
        return tuple(self._records)

    @property
    def is_complete(self) -> bool:
        return self._state is SequencerState.COMPLETED

    @property
    def result(self) -> StaircaseResult:
        if self._state is not SequencerState.COMPLETED or self._result is None:
            raise InvalidStateError(f"No result available in state {self._state}")
        return self._result

    # ─────────────────────────────────────────────────────────────────────
    # Transitions
    # ─────────────────────────────────────────────────────────────────────

    def start(self) -> Plate:
        """
        Begin a run with the calibration plate.

        Raises:
            InvalidStateError: If a run is in progress
        """
        if self._state not in (SequencerState.IDLE, SequencerState.COMPLETED):
            raise InvalidStateError(f"Cannot start a staircase in state {self._state}")
        self._reset()
        self._state = SequencerState.RUNNING
        logger.info(f"Staircase started: seed={self.seed!r}")
        plate = self.generator.generate_calibration(
            derive_seed(self.seed, "calibration"), self.filter_parameters
        )
        return self._present(plate)

    def record_response(self, response: Response) -> ResponseRecord:
        """
        Score a response to the current plate and step the staircase.

        "none" or an empty answer is treated as "can't see", like skip().

        Raises:
            InvalidStateError: If no plate is awaiting a response
        """
        self._require_awaiting("record a response")
        elapsed_ms = self._elapsed_ms(response.response_time_ms)
        if response.is_skip:
            record = self._commit(None, False, elapsed_ms, skipped=True)
            self._on_cant_see()
            return record

        user_response, is_correct = evaluate_response(self._plate, response)
        record = self._commit(user_response, is_correct, elapsed_ms)
        if is_correct:
            self._on_hit()
        else:
            self._on_miss()
        return record

    def skip(self) -> ResponseRecord:
        """Record "can't see it" for the current plate."""
        self._require_awaiting("skip")
        record = self._commit(None, False, self._elapsed_ms(None), skipped=True)
        self._on_cant_see()
        return record

    def timeout(self) -> ResponseRecord:
        """Record a missed deadline; counts as a miss."""
        self._require_awaiting("time out")
        record = self._commit(None, False, self._elapsed_ms(None), timed_out=True)
        self._on_miss()
        return record

    def abort(self) -> StaircaseResult:
        """
        Stop early. The axis in progress is scored at the level reached;
        axes never started score 0.

        Raises:
            InvalidStateError: If no run is in progress
        """
        self._require_awaiting("abort")
        if not self.in_calibration:
            self._store_axis()
        logger.info(f"Staircase aborted after {len(self._records)} trials")
        return self._complete(aborted=True)

    # ─────────────────────────────────────────────────────────────────────
    # Staircase steps
    # ─────────────────────────────────────────────────────────────────────

    def _on_hit(self) -> None:
        self._misses = 0
        if self.in_calibration:
            self._calibration_passed = True
            self._next_axis()
            return
        self._level += 1
        if self._level >= STAIRCASE_LEVELS:
            self._finish_axis()
        else:
            self._present_level()

    def _on_miss(self) -> None:
        self._misses += 1
        if self._misses >= MISS_LIMIT:
            self._finish_axis()
        else:
            self._present(self._plate)

    def _on_cant_see(self) -> None:
        if self._scores.get(ConfusionAxis.RED_GREEN, 0) > EARLY_EXIT_SCORE:
            logger.info("Staircase ended on 'can't see' after a strong red-green score")
            self._complete(stopped_early=True)
            return
        self._finish_axis()

    def _finish_axis(self) -> None:
        if self.in_calibration:
            self._next_axis()
            return
        axis = self._store_axis()
        if axis is ConfusionAxis.RED_GREEN and self._scores[axis] == 100:
            logger.info("Perfect red-green axis, ending staircase early")
            self._complete(stopped_early=True)
            return
        self._next_axis()

    def _store_axis(self) -> ConfusionAxis:
        axis = AXIS_ORDER[self._axis_index]
        self._scores[axis] = axis_score(self._level)
        self._levels_passed[axis] = self._level
        logger.info(f"Axis {axis.value}: {self._level}/{STAIRCASE_LEVELS} levels, score {self._scores[axis]}")
        return axis

    def _next_axis(self) -> None:
        self._axis_index += 1
        self._level = 0
        self._misses = 0
        if self._axis_index >= len(AXIS_ORDER):
            self._complete()
        else:
            self._present_level()

    # ─────────────────────────────────────────────────────────────────────
    # Internals
    # ─────────────────────────────────────────────────────────────────────

    def _require_awaiting(self, action: str) -> None:
        if self._state is not SequencerState.AWAITING_RESPONSE:
            raise InvalidStateError(f"Cannot {action} in state {self._state}")

    def _present_level(self) -> None:
        axis = AXIS_ORDER[self._axis_index]
        plate = self.generator.generate_level(
            axis,
            self._level,
            derive_seed(self.seed, axis.value, "level", self._level),
            self.filter_parameters,
        )
        self._present(plate)

    def _present(self, plate: Plate) -> Plate:
        self._plate = plate
        self._state = SequencerState.AWAITING_RESPONSE
        self._presented_at = self._clock()
        return plate

    def _elapsed_ms(self, supplied: Optional[float]) -> float:
        if supplied is not None:
            return float(supplied)
        return (self._clock() - self._presented_at) * 1000.0

    def _commit(
        self,
        user_response: Optional[str],
        is_correct: bool,
        response_time_ms: float,
        *,
        skipped: bool = False,
        timed_out: bool = False,
    ) -> ResponseRecord:
        plate = self._plate
        self._state = SequencerState.SCORING
        record = ResponseRecord(
            trial_index=len(self._records),
            category=plate.category,
            difficulty=plate.difficulty,
            target_value=plate.target.value,
            user_response=user_response,
            is_correct=is_correct,
            response_time_ms=response_time_ms,
            skipped=skipped,
            timed_out=timed_out,
            plate_seed=plate.seed,
            palette_name=plate.palette.name,
        )
        self._records.append(record)
        logger.debug(
            f"Staircase trial {record.trial_index}: {plate.palette.name} "
            f"response={user_response!r} correct={is_correct}"
        )
        return record

    def _complete(self, *, stopped_early: bool = False, aborted: bool = False) -> StaircaseResult:
        diagnosis = diagnose_axes(self._scores)
        self._result = StaircaseResult(
            seed=self.seed,
            scores={axis: self._scores.get(axis, 0) for axis in AXIS_ORDER},
            levels_passed={axis: self._levels_passed.get(axis, 0) for axis in AXIS_ORDER},
            diagnosis=diagnosis,
            calibration_passed=self._calibration_passed,
            stopped_early=stopped_early,
            aborted=aborted,
            responses=tuple(self._records),
            filter_parameters=self.filter_parameters,
        )
        self._plate = None
        self._state = SequencerState.COMPLETED
        logger.info(
            f"Staircase complete: {diagnosis.type.value}/{diagnosis.severity.value} "
            + " ".join(f"{a.value}={s}" for a, s in diagnosis.scores.items())
        )
        return self._result
