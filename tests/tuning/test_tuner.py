"""
Unit Tests for AdaptiveTuner

Round loop, termination, abort handling and the pure search steps.
"""

import pytest

from cvd_toolkit.core.errors import InvalidStateError
from cvd_toolkit.core.models import (
    FilterParameters,
    Response,
    SessionMode,
    SeverityBucket,
    TuningRound,
)
from cvd_toolkit.core.utils.seeded_random import SeededRandom
from cvd_toolkit.session import SequencerState
from cvd_toolkit.tuning import (
    DEFAULT_SPACE,
    PRESETS,
    AdaptiveTuner,
    TunerState,
    TuningConfig,
    next_parameters,
    stop_reason,
    validation_session,
)


@pytest.fixture
def tuner(generator, fake_clock):
    return AdaptiveTuner(TuningConfig(), generator=generator, clock=fake_clock)


def run_to_completion(tuner, respond, limit=200):
    """Answer every plate with ``respond(plate)`` until the tuner stops."""
    plate = tuner.start()
    for _ in range(limit):
        tuner.record_response(respond(plate))
        if tuner.state is TunerState.COMPLETED:
            return tuner.outcome
        plate = tuner.current_plate
    raise AssertionError("tuner did not terminate")


class TestTunerLifecycle:
    """Tests for tuner state transitions."""

    def test_start_when_uninitialized_then_raises(self, tuner):
        assert tuner.state is TunerState.UNINITIALIZED
        with pytest.raises(InvalidStateError):
            tuner.start()

    def test_record_when_not_running_then_raises(self, tuner):
        with pytest.raises(InvalidStateError):
            tuner.record_response(Response(answer="5"))

    def test_outcome_when_running_then_raises(self, tuner):
        tuner.init(SeverityBucket.MODERATE, baseline_score=50, seed="abc")
        tuner.start()
        with pytest.raises(InvalidStateError):
            _ = tuner.outcome

    def test_init_when_bucket_then_starts_from_preset(self, tuner):
        tuner.init(SeverityBucket.STRONG, baseline_score=40, seed="abc")
        assert tuner.state is TunerState.READY
        assert tuner.current_params == PRESETS[SeverityBucket.STRONG]
        assert tuner.best_params == PRESETS[SeverityBucket.STRONG]
        assert tuner.best_score == 40

    def test_init_when_initial_given_then_normalised_override(self, tuner):
        tuner.init(SeverityBucket.MILD, baseline_score=40, seed="abc",
                   initial=FilterParameters(hue_shift=90, intensity=0.5))
        assert tuner.current_params.hue_shift == 60

    def test_init_when_running_then_raises(self, tuner):
        tuner.init(SeverityBucket.MILD, baseline_score=40, seed="abc")
        tuner.start()
        with pytest.raises(InvalidStateError):
            tuner.init(SeverityBucket.MILD, baseline_score=40, seed="abc")

    def test_start_when_ready_then_round_one_plate(self, tuner):
        tuner.init(SeverityBucket.MODERATE, baseline_score=50, seed="abc")
        plate = tuner.start()
        assert tuner.state is TunerState.RUNNING
        assert tuner.current_round == 1
        assert plate.seed == "abc-round-1-plate-0"
        assert plate.filter_parameters == PRESETS[SeverityBucket.MODERATE]
        assert tuner.current_plate is plate


class TestTunerTermination:
    """Tests for stop conditions."""

    def test_run_when_all_correct_then_stops_on_perfect_score(self, tuner, answer_correctly):
        tuner.init(SeverityBucket.MODERATE, baseline_score=50, seed="abc")
        outcome = run_to_completion(tuner, answer_correctly)
        assert outcome.stop_reason == "perfect_score"
        assert outcome.rounds == 1
        assert outcome.best_score == 100
        assert outcome.improvement == 50
        assert outcome.best_params == PRESETS[SeverityBucket.MODERATE]

    def test_run_when_never_improving_then_stops_after_stall_limit(self, tuner, answer_wrongly):
        tuner.init(SeverityBucket.MODERATE, baseline_score=50, seed="abc")
        outcome = run_to_completion(tuner, answer_wrongly)
        assert outcome.stop_reason == "stalled"
        assert outcome.rounds == 2
        assert outcome.best_score == 50
        assert outcome.improvement == 0
        assert outcome.best_params == PRESETS[SeverityBucket.MODERATE]

    @pytest.mark.parametrize("max_rounds", [1, 3, 5])
    def test_run_when_stall_limit_high_then_never_exceeds_max_rounds(
        self, generator, fake_clock, answer_wrongly, max_rounds
    ):
        tuner = AdaptiveTuner(
            TuningConfig(max_rounds=max_rounds, stall_limit=100),
            generator=generator, clock=fake_clock,
        )
        tuner.init(SeverityBucket.MILD, baseline_score=60, seed="cap")
        outcome = run_to_completion(tuner, answer_wrongly)
        assert outcome.rounds == max_rounds
        assert outcome.stop_reason == "max_rounds"
        assert [r.round_number for r in outcome.history] == list(range(1, max_rounds + 1))

    def test_run_when_rounds_advance_then_each_round_uses_new_parameters(
        self, generator, fake_clock, answer_wrongly
    ):
        tuner = AdaptiveTuner(TuningConfig(max_rounds=4, stall_limit=10), generator=generator, clock=fake_clock)
        tuner.init(SeverityBucket.MODERATE, baseline_score=60, seed="explore")
        outcome = run_to_completion(tuner, answer_wrongly)
        params = [r.params for r in outcome.history]
        assert all(DEFAULT_SPACE.contains(p) for p in params)
        assert params[1] != params[0]

    def test_run_when_round_complete_then_history_has_round_scores(self, tuner, answer_wrongly):
        tuner.init(SeverityBucket.MODERATE, baseline_score=50, seed="abc")
        outcome = run_to_completion(tuner, answer_wrongly)
        for round_ in outcome.history:
            assert round_.total == tuner.config.plates_per_round
            assert round_.score == 0
            assert not round_.partial
            assert len(round_.responses) == round_.total

    def test_run_when_same_seed_and_answers_then_same_history(self, generator, fake_clock, answer_wrongly):
        outcomes = []
        for _ in range(2):
            tuner = AdaptiveTuner(TuningConfig(max_rounds=4, stall_limit=10), generator=generator, clock=fake_clock)
            tuner.init(SeverityBucket.STRONG, baseline_score=30, seed="repeat")
            outcomes.append(run_to_completion(tuner, answer_wrongly))
        assert [r.params for r in outcomes[0].history] == [r.params for r in outcomes[1].history]


class TestTunerAbort:
    """Tests for abort()."""

    def test_abort_when_mid_round_then_partial_round_kept(self, tuner, answer_correctly):
        tuner.init(SeverityBucket.MODERATE, baseline_score=50, seed="abc")
        plate = tuner.start()
        tuner.record_response(answer_correctly(plate))
        tuner.record_response(answer_correctly(tuner.current_plate))
        outcome = tuner.abort()
        assert outcome.aborted
        assert outcome.stop_reason == "aborted"
        assert outcome.rounds == 0
        assert len(outcome.history) == 1
        partial = outcome.history[0]
        assert partial.partial
        assert partial.total == 2
        assert partial.score == 100
        # Partial rounds never move the best
        assert outcome.best_score == 50
        assert tuner.state is TunerState.COMPLETED

    def test_abort_when_no_responses_in_round_then_no_partial(self, tuner):
        tuner.init(SeverityBucket.MODERATE, baseline_score=50, seed="abc")
        tuner.start()
        outcome = tuner.abort()
        assert outcome.history == ()
        assert outcome.best_params == PRESETS[SeverityBucket.MODERATE]

    def test_abort_when_not_running_then_raises(self, tuner):
        with pytest.raises(InvalidStateError):
            tuner.abort()

    def test_skip_and_timeout_when_running_then_recorded(self, tuner):
        tuner.init(SeverityBucket.MODERATE, baseline_score=50, seed="abc")
        tuner.start()
        assert tuner.skip().skipped
        assert tuner.timeout().timed_out


class TestSearchSteps:
    """Tests for the pure next_parameters() / stop_reason() steps."""

    def test_stop_reason_when_round_at_limit_then_max_rounds(self):
        assert stop_reason(5, 40, 0, TuningConfig()) == "max_rounds"

    def test_stop_reason_when_perfect_then_perfect(self):
        assert stop_reason(1, 100, 0, TuningConfig()) == "perfect_score"

    def test_stop_reason_when_stalled_then_stalled(self):
        assert stop_reason(2, 60, 2, TuningConfig()) == "stalled"

    def test_stop_reason_when_room_left_then_none(self):
        assert stop_reason(2, 60, 1, TuningConfig()) is None

    def test_next_when_below_best_and_best_untried_then_one_step_neighbour_of_best(self):
        best = FilterParameters(hue_shift=25, intensity=0.5)
        far = FilterParameters(hue_shift=-40, intensity=0.9)
        chosen = next_parameters(
            current=far, best=best, best_score=80, last_score=40,
            history=[TuningRound(1, far, 40, 2, 5)], rng=SeededRandom("n"),
        )
        assert chosen in DEFAULT_SPACE.neighbors(best)

    def test_next_when_below_best_then_neighbours_too_close_to_history_skipped(self):
        best = FilterParameters(hue_shift=25, intensity=0.5)
        # Similarity to best is 0.944; only the intensity=0.6 neighbour is above 0.95
        tried = FilterParameters(hue_shift=25, intensity=0.95)
        excluded = FilterParameters(hue_shift=25, intensity=0.6)
        assert DEFAULT_SPACE.similarity(tried, excluded) > 0.95
        choices = {
            next_parameters(
                current=tried, best=best, best_score=80, last_score=40,
                history=[TuningRound(1, tried, 40, 2, 5)], rng=SeededRandom(f"skip-{i}"),
            )
            for i in range(100)
        }
        assert excluded not in choices
        assert choices <= set(DEFAULT_SPACE.neighbors(best))
        assert len(choices) > 1

    def test_next_when_below_best_and_neighbours_tried_then_half_step_on_one_parameter(self):
        best = FilterParameters(hue_shift=25, intensity=0.5)
        history = [TuningRound(1, best, 80, 4, 5), TuningRound(2, best, 40, 2, 5)]
        for i in range(20):
            chosen = next_parameters(
                current=best, best=best, best_score=80, last_score=40,
                history=history, rng=SeededRandom(f"fine-{i}"),
            )
            changed = [n for n in FilterParameters.names() if chosen.get(n) != best.get(n)]
            assert len(changed) == 1
            name = changed[0]
            step = DEFAULT_SPACE.ranges[name].step
            assert abs(chosen.get(name) - best.get(name)) == pytest.approx(step * 0.5)

    def test_next_when_improved_and_current_untried_then_one_step_neighbour_of_current(self):
        current = FilterParameters(hue_shift=10, intensity=0.4)
        far = FilterParameters(hue_shift=-60, intensity=1.0, saturation_boost=40)
        chosen = next_parameters(
            current=current, best=current, best_score=60, last_score=60,
            history=[TuningRound(1, far, 60, 3, 5)], rng=SeededRandom("out"),
        )
        assert chosen in DEFAULT_SPACE.neighbors(current)

    def test_next_when_improved_then_neighbours_above_outward_threshold_skipped(self):
        current = FilterParameters(intensity=0.1)
        # Similarity to current is 0.894; only the intensity=0.2 neighbour is above 0.9
        tried = FilterParameters(intensity=0.95)
        excluded = FilterParameters(intensity=0.2)
        assert DEFAULT_SPACE.similarity(tried, excluded) > 0.9
        choices = {
            next_parameters(
                current=current, best=current, best_score=60, last_score=60,
                history=[TuningRound(1, tried, 60, 3, 5)], rng=SeededRandom(f"out-{i}"),
            )
            for i in range(100)
        }
        assert excluded not in choices
        assert choices <= set(DEFAULT_SPACE.neighbors(current))

    def test_next_when_improved_and_neighbours_tried_then_random_perturbation(self):
        current = FilterParameters(hue_shift=10, intensity=0.4)
        chosen = next_parameters(
            current=current, best=current, best_score=60, last_score=60,
            history=[TuningRound(1, current, 60, 3, 5)], rng=SeededRandom("explore"),
        )
        assert chosen == DEFAULT_SPACE.random_perturbation(current, SeededRandom("explore"))
        assert chosen not in DEFAULT_SPACE.neighbors(current)
        for name, r in DEFAULT_SPACE.ranges.items():
            assert abs(chosen.get(name) - current.get(name)) <= r.step + 1e-9

    def test_next_when_same_rng_seed_then_same_choice(self):
        current = FilterParameters(hue_shift=10, intensity=0.4)
        kwargs = dict(current=current, best=current, best_score=60, last_score=60,
                      history=[TuningRound(1, current, 60, 3, 5)])
        assert (
            next_parameters(rng=SeededRandom("same"), **kwargs)
            == next_parameters(rng=SeededRandom("same"), **kwargs)
        )


class TestValidationSession:
    """Tests for validation_session()."""

    def test_validation_when_outcome_then_best_params_applied(self, tuner, generator, fake_clock, answer_correctly):
        tuner.init(SeverityBucket.MODERATE, baseline_score=50, seed="abc")
        outcome = run_to_completion(tuner, answer_correctly)
        session = validation_session(outcome, "abc-validation", generator=generator, clock=fake_clock)
        assert len(session.plates) == 12
        assert all(p.filter_parameters == outcome.best_params for p in session.plates)
        assert session.sequencer.mode is SessionMode.VALIDATION
        assert session.sequencer.state is SequencerState.IDLE
