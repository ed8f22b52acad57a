"""
Module: tuning.tuner

Purpose:
    Multi-round hill-climbing over FilterParameters. Each round generates
    a short plate sequence under the current parameters, runs it through
    a TrialSequencer driven by the caller's responses, and uses the round
    score to pick the next parameters.

Key Classes:
    - TunerState: UNINITIALIZED -> READY -> RUNNING -> COMPLETED
    - AdaptiveTuner: Round loop state machine

Key Functions:
    - next_parameters(): Pure parameter-update step
    - stop_reason(): Pure continuation test
    - validation_session(): Non-adaptive pass with the best parameters

Algorithm (per round r = 1..R):
    1. Generate N plates with the current parameters, score them
    2. Append the round to history
    3. New best -> record it, reset stall counter; else stall += 1
    4. Stop if r == R, best >= 100, or stall >= K
    5. Otherwise choose the next parameters (see next_parameters)

Dependencies:
    - generation.generator: Round plates
    - session.sequencer: Round scoring
    - tuning.parameter_space: Neighbours, similarity, clamping

Used By:
    - cli: simulate command
"""

from __future__ import annotations

import logging
import time
from enum import Enum
from typing import List, Optional, Sequence, Union

from cvd_toolkit.core.errors import InvalidStateError
from cvd_toolkit.core.models import (
    FilterParameters,
    Plate,
    Response,
    ResponseRecord,
    SessionMode,
    SeverityBucket,
    TuningOutcome,
    TuningRound,
)
from cvd_toolkit.core.utils.seeded_random import Seed, SeededRandom, derive_seed
from cvd_toolkit.generation import PlateGenerator
from cvd_toolkit.session import PreparedSession, SessionConfig, TrialSequencer, build_session
from cvd_toolkit.session.sequencer import Clock

from .config import TuningConfig
from .parameter_space import DEFAULT_SPACE, FilterParameterSpace
from .presets import initial_parameters

logger = logging.getLogger(__name__)

STOP_MAX_ROUNDS = "max_rounds"
STOP_PERFECT = "perfect_score"
STOP_STALLED = "stalled"
STOP_ABORTED = "aborted"


class TunerState(str, Enum):
    UNINITIALIZED = "uninitialized"
    READY = "ready"
    RUNNING = "running"
    COMPLETED = "completed"

    def __str__(self) -> str:
        return self.value


# ─────────────────────────────────────────────────────────────────────────────
# Pure search steps
# ─────────────────────────────────────────────────────────────────────────────

def stop_reason(round_number: int, best_score: int, stall_count: int, config: TuningConfig) -> Optional[str]:
    """Why the search should stop after ``round_number``, or None to continue."""
    if round_number >= config.max_rounds:
        return STOP_MAX_ROUNDS
    if best_score >= 100:
        return STOP_PERFECT
    if stall_count >= config.stall_limit:
        return STOP_STALLED
    return None


def _unexplored(
    candidates: Sequence[FilterParameters],
    history: Sequence[TuningRound],
    threshold: float,
    space: FilterParameterSpace,
) -> List[FilterParameters]:
    return [
        c for c in candidates
        if not any(space.similarity(h.params, c) > threshold for h in history)
    ]


def next_parameters(
    *,
    current: FilterParameters,
    best: FilterParameters,
    best_score: int,
    last_score: int,
    history: Sequence[TuningRound],
    rng: SeededRandom,
    space: FilterParameterSpace = DEFAULT_SPACE,
    config: Optional[TuningConfig] = None,
) -> FilterParameters:
    """
    Choose the parameters for the next round.

    Below the best: pick an untried neighbour of ``best`` (similarity to
    every history entry <= local threshold), falling back to a random
    fine-step neighbour of ``best``. Matched or raised the best: pick an
    untried neighbour of ``current`` (outward threshold), falling back to
    a random one-step perturbation of ``current``. The result is always
    normalised; every random choice comes from ``rng``.
    """
    config = config or TuningConfig()

    if last_score < best_score:
        candidates = _unexplored(space.neighbors(best, 1.0), history, config.local_similarity, space)
        if candidates:
            chosen = rng.pick(candidates)
            logger.debug(f"Local step around best: {len(candidates)} untried neighbours")
        else:
            fine = space.neighbors(best, config.fine_step_multiplier)
            chosen = rng.pick(fine) if fine else best
            logger.debug("Local neighbours exhausted, taking a fine step")
    else:
        candidates = _unexplored(space.neighbors(current, 1.0), history, config.outward_similarity, space)
        if candidates:
            chosen = rng.pick(candidates)
            logger.debug(f"Outward step from current: {len(candidates)} untried neighbours")
        else:
            chosen = space.random_perturbation(current, rng)
            logger.debug("Outward neighbours exhausted, exploring a new direction")

    return space.normalize(chosen)


# ─────────────────────────────────────────────────────────────────────────────
# State machine
# ─────────────────────────────────────────────────────────────────────────────

class AdaptiveTuner:
    """
    Round-based filter tuning driven by human responses.

    Owns its history, random stream and per-round sequencer; nothing is
    shared between tuners. The loop is bounded by ``config.max_rounds``.

    Example:
        >>> tuner = AdaptiveTuner()
        >>> tuner.init(SeverityBucket.MODERATE, baseline_score=50, seed="abc")
        >>> plate = tuner.start()
        >>> tuner.record_response(Response(answer=plate.target.value))
    """

    def __init__(
        self,
        config: Optional[TuningConfig] = None,
        space: FilterParameterSpace = DEFAULT_SPACE,
        generator: Optional[PlateGenerator] = None,
        clock: Clock = time.monotonic,
    ) -> None:
        self.config = config or TuningConfig()
        self.space = space
        self.generator = generator or PlateGenerator()
        self._clock = clock
        self._state = TunerState.UNINITIALIZED
        self._seed: Optional[Seed] = None
        self._rng: Optional[SeededRandom] = None
        self._current = FilterParameters()
        self._best = FilterParameters()
        self._best_score = 0
        self._baseline_score = 0
        self._stall_count = 0
        self._round = 0
        self._history: List[TuningRound] = []
        self._sequencer: Optional[TrialSequencer] = None
        self._outcome: Optional[TuningOutcome] = None

    # ─────────────────────────────────────────────────────────────────────
    # State
    # ─────────────────────────────────────────────────────────────────────

    @property
    def state(self) -> TunerState:
        return self._state

    @property
    def current_round(self) -> int:
        return self._round

    @property
    def current_params(self) -> FilterParameters:
        return self._current

    @property
    def best_params(self) -> FilterParameters:
        return self._best

    @property
    def best_score(self) -> int:
        return self._best_score

    @property
    def history(self) -> tuple[TuningRound, ...]:
        return tuple(self._history)

    @property
    def current_plate(self) -> Optional[Plate]:
        if self._state is not TunerState.RUNNING or self._sequencer is None:
            return None
        return self._sequencer.current_plate

    @property
    def outcome(self) -> TuningOutcome:
        """
        Final outcome.

        Raises:
            InvalidStateError: Before the run completes
        """
        if self._state is not TunerState.COMPLETED or self._outcome is None:
            raise InvalidStateError(f"No tuning outcome in state {self._state}")
        return self._outcome

    # ─────────────────────────────────────────────────────────────────────
    # Transitions
    # ─────────────────────────────────────────────────────────────────────

    def init(
        self,
        baseline_bucket: Union[SeverityBucket, str],
        baseline_score: int,
        seed: Seed,
        initial: Optional[FilterParameters] = None,
    ) -> None:
        """
        Prepare a run from a baseline result.

        Args:
            baseline_bucket: Selects the starting preset
            baseline_score: Score to beat
            seed: Run seed; round r uses f"{seed}-round-{r}"
            initial: Starting parameters overriding the preset
        """
        if self._state is TunerState.RUNNING:
            raise InvalidStateError("Cannot re-initialise a running tuner")
        start = self.space.normalize(initial if initial is not None else initial_parameters(baseline_bucket))
        self._seed = seed
        self._rng = SeededRandom(derive_seed(seed, "tuner"))
        self._current = start
        self._best = start
        self._best_score = baseline_score
        self._baseline_score = baseline_score
        self._stall_count = 0
        self._round = 0
        self._history = []
        self._sequencer = None
        self._outcome = None
        self._state = TunerState.READY
        logger.info(
            f"Tuner initialised: bucket={baseline_bucket} baseline={baseline_score}% seed={seed!r}"
        )

    def start(self) -> Plate:
        """
        Begin round 1 and return its first plate.

        Raises:
            InvalidStateError: If init() has not been called
        """
        if self._state is not TunerState.READY:
            raise InvalidStateError(f"Cannot start tuning in state {self._state}")
        self._state = TunerState.RUNNING
        return self._start_round()

    def record_response(self, response: Response) -> ResponseRecord:
        """Record a response for the current plate; rounds advance automatically."""
        sequencer = self._require_running("record a response")
        record = sequencer.record_response(response)
        self._after_trial(sequencer)
        return record

    def skip(self) -> ResponseRecord:
        sequencer = self._require_running("skip")
        record = sequencer.skip()
        self._after_trial(sequencer)
        return record

    def timeout(self) -> ResponseRecord:
        sequencer = self._require_running("time out")
        record = sequencer.timeout()
        self._after_trial(sequencer)
        return record

    def abort(self) -> TuningOutcome:
        """
        Stop the run and return a partial outcome.

        Responses already given in the current round are kept as a
        ``partial`` round; partial rounds never change the best score.
        """
        sequencer = self._require_running("abort")
        if sequencer.responses:
            partial = sequencer.abort()
            self._history.append(TuningRound(
                round_number=self._round,
                params=self._current,
                score=partial.score,
                correct=partial.overall.correct,
                total=partial.overall.total,
                responses=partial.responses,
                partial=True,
            ))
        logger.info(f"Tuning aborted in round {self._round}")
        return self._finish(STOP_ABORTED, aborted=True)

    # ─────────────────────────────────────────────────────────────────────
    # Internals
    # ─────────────────────────────────────────────────────────────────────

    def _require_running(self, action: str) -> TrialSequencer:
        if self._state is not TunerState.RUNNING or self._sequencer is None:
            raise InvalidStateError(f"Cannot {action} in tuner state {self._state}")
        return self._sequencer

    def _start_round(self) -> Plate:
        self._round += 1
        round_seed = derive_seed(self._seed, "round", self._round)
        plates = self.generator.generate_sequence(
            self.config.plates_per_round,
            self.config.category_ratio,
            round_seed,
            False,
            target_kinds=self.config.target_kinds,
            filter_parameters=self._current,
        )
        self._sequencer = TrialSequencer(
            mode=SessionMode.TUNING,
            seed=round_seed,
            filter_parameters=self._current,
            clock=self._clock,
        )
        logger.info(f"Tuning round {self._round}/{self.config.max_rounds} started")
        logger.debug(f"Round {self._round} parameters: {self._current.to_dict()}")
        return self._sequencer.start(plates)

    def _after_trial(self, sequencer: TrialSequencer) -> None:
        if sequencer.is_complete:
            self._complete_round(sequencer)

    def _complete_round(self, sequencer: TrialSequencer) -> None:
        result = sequencer.result
        score = result.score
        self._history.append(TuningRound(
            round_number=self._round,
            params=self._current,
            score=score,
            correct=result.overall.correct,
            total=result.overall.total,
            responses=result.responses,
        ))

        if score > self._best_score:
            self._best_score = score
            self._best = self._current
            self._stall_count = 0
        else:
            self._stall_count += 1
        logger.info(
            f"Round {self._round} scored {score}% (best {self._best_score}%, "
            f"stall {self._stall_count})"
        )

        reason = stop_reason(self._round, self._best_score, self._stall_count, self.config)
        if reason is not None:
            self._finish(reason, aborted=False)
            return

        self._current = next_parameters(
            current=self._current,
            best=self._best,
            best_score=self._best_score,
            last_score=score,
            history=self._history,
            rng=self._rng,
            space=self.space,
            config=self.config,
        )
        self._start_round()

    def _finish(self, reason: str, *, aborted: bool) -> TuningOutcome:
        self._sequencer = None
        self._state = TunerState.COMPLETED
        self._outcome = TuningOutcome(
            best_params=self._best,
            best_score=self._best_score,
            baseline_score=self._baseline_score,
            rounds=sum(1 for r in self._history if not r.partial),
            history=tuple(self._history),
            aborted=aborted,
            stop_reason=reason,
        )
        logger.info(
            f"Tuning finished ({reason}): best={self._best_score}% "
            f"improvement={self._outcome.improvement:+d} over {self._outcome.rounds} rounds"
        )
        return self._outcome


def validation_session(
    outcome: TuningOutcome,
    seed: Seed,
    generator: Optional[PlateGenerator] = None,
    clock: Clock = time.monotonic,
    **overrides,
) -> PreparedSession:
    """
    Non-adaptive validation pass using the tuned parameters.

    Example:
        >>> session = validation_session(tuner.outcome, seed="abc-validation")
        >>> plate = session.start()
    """
    config = SessionConfig.for_mode(
        SessionMode.VALIDATION,
        seed,
        filter_parameters=outcome.best_params,
        **overrides,
    )
    return build_session(config, generator=generator, clock=clock)
