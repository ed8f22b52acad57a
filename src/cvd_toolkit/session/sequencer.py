"""
Module: session.sequencer

Purpose:
    Per-session trial state machine. Presents plates in order, scores each
    response as it arrives, and produces a SessionResult when the last
    plate is answered (or a partial one on abort).

Key Classes:
    - SequencerState: IDLE -> RUNNING -> AWAITING_RESPONSE -> SCORING -> COMPLETED
    - Progress: Position within the session
    - TrialSequencer: The state machine

Dependencies:
    - session.scoring: SessionResult assembly
    - time (std): Default clock

Used By:
    - session.controller: build_session()
    - tuning.tuner: One sequencer per tuning round
"""

from __future__ import annotations

import logging
import time
from enum import Enum
from typing import Callable, List, NamedTuple, Optional, Sequence, Tuple, Union

from cvd_toolkit.core.errors import InvalidArgumentError, InvalidStateError
from cvd_toolkit.core.models import (
    FilterParameters,
    Plate,
    Response,
    ResponseRecord,
    SessionMode,
    SessionResult,
    round_half_up,
)

from .scoring import score_responses

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


class SequencerState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    AWAITING_RESPONSE = "awaiting_response"
    SCORING = "scoring"
    COMPLETED = "completed"

    def __str__(self) -> str:
        return self.value


class Progress(NamedTuple):
    current: int
    total: int
    percentage: int


def normalize_answer(value: str) -> str:
    return value.strip().casefold()


def evaluate_response(plate: Plate, response: Response) -> Tuple[str, bool]:
    """
    Score a non-skip response against a plate.

    Symbolic plates match the answer case- and whitespace-insensitively.
    Outlier plates map the click to a grid cell and hit-test it against the
    target bounds; a typed answer on an outlier plate is incorrect.

    Returns:
        (recorded response, is_correct)
    """
    if plate.target.kind.is_symbolic or response.click is None:
        answer = response.answer or ""
        is_correct = (
            plate.target.kind.is_symbolic
            and normalize_answer(answer) == normalize_answer(plate.target.value)
        )
        return answer.strip(), is_correct

    row, col = response.click.to_cell(plate.grid_size)
    bounds = plate.target.bounds
    return f"{row},{col}", bounds is not None and bounds.contains(row, col)


class TrialSequencer:
    """
    Drives one session over a fixed list of plates.

    Each instance owns its response log and clock; nothing is shared
    between sessions. The human wait happens between receiving a plate
    and calling record_response(), skip() or timeout().

    Attributes:
        mode: Session mode recorded on the result
        seed: Session seed recorded on the result
        filter_parameters: Filter the plates were generated with

    Example:
        >>> seq = TrialSequencer(SessionMode.BASELINE, seed="abc")
        >>> plate = seq.start(plates)
        >>> seq.record_response(Response(answer=plate.target.value)).is_correct
        True
    """

    def __init__(
        self,
        mode: SessionMode = SessionMode.BASELINE,
        seed: Union[int, str, None] = None,
        filter_parameters: Optional[FilterParameters] = None,
        clock: Clock = time.monotonic,
    ) -> None:
        self.mode = mode
        self.seed = seed
        self.filter_parameters = filter_parameters
        self._clock = clock
        self._state = SequencerState.IDLE
        self._plates: Tuple[Plate, ...] = ()
        self._index = 0
        self._records: List[ResponseRecord] = []
        self._started_at = 0.0
        self._presented_at = 0.0
        self._result: Optional[SessionResult] = None

    # ─────────────────────────────────────────────────────────────────────
    # State
    # ─────────────────────────────────────────────────────────────────────

    @property
    def state(self) -> SequencerState:
        return self._state

    @property
    def plates(self) -> Tuple[Plate, ...]:
        return self._plates

    @property
    def responses(self) -> Tuple[ResponseRecord, ...]:
        return tuple(self._records)

    @property
    def current_index(self) -> int:
        return self._index

    @property
    def current_plate(self) -> Optional[Plate]:
        if self._state is not SequencerState.AWAITING_RESPONSE:
            return None
        return self._plates[self._index]

    @property
    def progress(self) -> Progress:
        total = len(self._plates)
        done = len(self._records)
        return Progress(
            current=done,
            total=total,
            percentage=round_half_up(100 * done / total) if total else 0,
        )

    @property
    def result(self) -> SessionResult:
        """
        The scored session.

        Raises:
            InvalidStateError: If the session has not completed
        """
        if self._state is not SequencerState.COMPLETED or self._result is None:
            raise InvalidStateError(f"No result available in state {self._state}")
        return self._result

    @property
    def is_complete(self) -> bool:
        return self._state is SequencerState.COMPLETED

    # ─────────────────────────────────────────────────────────────────────
    # Transitions
    # ─────────────────────────────────────────────────────────────────────

    def start(self, plates: Sequence[Plate]) -> Plate:
        """
        Begin a session and present the first plate.

        Allowed from IDLE or COMPLETED; the response log is reset.

        Raises:
            InvalidArgumentError: If plates is empty
            InvalidStateError: If a session is in progress
        """
        if self._state not in (SequencerState.IDLE, SequencerState.COMPLETED):
            raise InvalidStateError(f"Cannot start a session in state {self._state}")
        if not plates:
            raise InvalidArgumentError("Cannot start a session with no plates")

        self._state = SequencerState.RUNNING
        self._plates = tuple(plates)
        self._index = 0
        self._records = []
        self._result = None
        self._started_at = self._clock()
        logger.info(f"Session started: mode={self.mode.value} seed={self.seed!r} plates={len(self._plates)}")
        return self._present()

    def record_response(self, response: Response) -> ResponseRecord:
        """
        Score a response to the current plate and advance.

        Symbolic plates match the answer case- and whitespace-insensitively;
        "none" or an empty answer is a skip. Outlier plates map the click to
        a grid cell and hit-test it against the target bounds.

        Raises:
            InvalidStateError: If no plate is awaiting a response
        """
        self._require_awaiting("record a response")
        plate = self._plates[self._index]
        elapsed_ms = self._elapsed_ms(response.response_time_ms)

        if response.is_skip:
            return self._commit(plate, None, False, elapsed_ms, skipped=True)

        user_response, is_correct = evaluate_response(plate, response)
        return self._commit(plate, user_response, is_correct, elapsed_ms)

    def skip(self) -> ResponseRecord:
        """Record "can't see it" for the current plate."""
        self._require_awaiting("skip")
        plate = self._plates[self._index]
        return self._commit(plate, None, False, self._elapsed_ms(None), skipped=True)

    def timeout(self) -> ResponseRecord:
        """Record that the caller's response deadline passed."""
        self._require_awaiting("time out")
        plate = self._plates[self._index]
        return self._commit(plate, None, False, self._elapsed_ms(None), timed_out=True)

    def abort(self) -> SessionResult:
        """
        Stop early and score the responses recorded so far.

        Raises:
            InvalidStateError: If no session is in progress
        """
        self._require_awaiting("abort")
        logger.info(f"Session aborted after {len(self._records)}/{len(self._plates)} plates")
        return self._score(aborted=True)

    # ─────────────────────────────────────────────────────────────────────
    # Internals
    # ─────────────────────────────────────────────────────────────────────

    def _require_awaiting(self, action: str) -> None:
        if self._state is not SequencerState.AWAITING_RESPONSE:
            raise InvalidStateError(f"Cannot {action} in state {self._state}")

    def _present(self) -> Plate:
        self._state = SequencerState.AWAITING_RESPONSE
        self._presented_at = self._clock()
        return self._plates[self._index]

    def _elapsed_ms(self, supplied: Optional[float]) -> float:
        if supplied is not None:
            return float(supplied)
        return (self._clock() - self._presented_at) * 1000.0

    def _commit(
        self,
        plate: Plate,
        user_response: Optional[str],
        is_correct: bool,
        response_time_ms: float,
        *,
        skipped: bool = False,
        timed_out: bool = False,
    ) -> ResponseRecord:
        self._state = SequencerState.SCORING
        record = ResponseRecord(
            trial_index=self._index,
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
            f"Trial {self._index}: {plate.category.value} target={plate.target.value!r} "
            f"response={user_response!r} correct={is_correct}"
        )

        self._index += 1
        if self._index >= len(self._plates):
            self._score(aborted=False)
        else:
            self._state = SequencerState.RUNNING
            self._present()
        return record

    def _score(self, *, aborted: bool) -> SessionResult:
        self._state = SequencerState.SCORING
        result = score_responses(
            self._records,
            mode=self.mode,
            seed=self.seed,
            plate_count=len(self._plates),
            session_seconds=self._clock() - self._started_at,
            filter_parameters=self.filter_parameters,
            aborted=aborted,
        )
        self._result = result
        self._state = SequencerState.COMPLETED
        logger.info(
            f"Session complete: overall={result.overall.percentage}% "
            f"deutan={result.deutan.percentage}% control={result.control.percentage}% "
            f"severity={result.severity.bucket.value}"
        )
        return result
