"""
Module: cli

Purpose:
    ``cvd-toolkit`` command line. Generates plate sequences as JSON and
    runs a full baseline, tuning and validation pass against a simulated
    observer for offline inspection of the search.

Commands:
    - generate: Print a generated plate sequence
    - simulate: Baseline -> tuning -> validation with a simulated observer
    - staircase: Level-progression test with a simulated observer

Dependencies:
    - argparse (std)
    - cvd_toolkit.session / tuning / core.utils.serialization
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Any, Optional, Sequence

from cvd_toolkit import __version__
from cvd_toolkit.core.errors import CvdToolkitError
from cvd_toolkit.core.models import (
    Category,
    Click,
    Difficulty,
    FilterParameters,
    Plate,
    Response,
    SessionMode,
    TargetKind,
)
from cvd_toolkit.core.utils.seeded_random import SeededRandom, derive_seed
from cvd_toolkit.core.utils.serialization import (
    deserialize_filter_parameters,
    serialize_plate,
    serialize_session_result,
    serialize_staircase_result,
    serialize_tuning_outcome,
    to_json,
)
from cvd_toolkit.generation import PlateGenerator
from cvd_toolkit.session import SessionConfig, StaircaseSequencer, build_session
from cvd_toolkit.tuning import AdaptiveTuner, TuningConfig, tune_from_severity, validation_session

logger = logging.getLogger(__name__)


class SimulatedObserver:
    """
    Answers plates like a subject with a fixed red-green deficiency.

    Control plates are answered correctly with ``control_accuracy``.
    Deutan plates start at ``deutan_accuracy`` and improve with the
    strength of the filter the plate was generated with.
    """

    def __init__(self, deutan_accuracy: float, control_accuracy: float, seed: str) -> None:
        self.deutan_accuracy = deutan_accuracy
        self.control_accuracy = control_accuracy
        self._rng = SeededRandom(seed)

    def accuracy_for(self, plate: Plate) -> float:
        if plate.category is Category.CONTROL:
            return self.control_accuracy
        params = plate.filter_parameters or FilterParameters()
        benefit = params.intensity * (
            0.3 + abs(params.hue_shift) / 200 + max(params.green_gain, 0) * 0.4
        )
        return min(1.0, self.deutan_accuracy + benefit)

    def respond(self, plate: Plate) -> Response:
        if self._rng() >= self.accuracy_for(plate):
            return Response(answer="none", response_time_ms=4000.0)
        bounds = plate.target.bounds
        if bounds is not None:
            # Click the centre of the outlier square on a one-pixel-per-cell surface
            click = Click(
                x=bounds.col + bounds.size / 2,
                y=bounds.row + bounds.size / 2,
                width=plate.grid_size,
                height=plate.grid_size,
            )
            return Response(click=click, response_time_ms=1500.0)
        return Response(answer=plate.target.value, response_time_ms=1500.0)


# ─────────────────────────────────────────────────────────────────────────────
# Commands
# ─────────────────────────────────────────────────────────────────────────────

def cmd_generate(args: argparse.Namespace) -> dict[str, Any]:
    params = deserialize_filter_parameters(args.params) if args.params else None
    kinds = (TargetKind(args.kind),) if args.kind else None
    plates = PlateGenerator().generate_sequence(
        args.count,
        args.ratio,
        args.seed,
        args.progressive,
        difficulty=Difficulty(args.difficulty),
        target_kinds=kinds,
        filter_parameters=params,
    )
    serialized = []
    for plate in plates:
        data = serialize_plate(plate)
        if args.no_tiles:
            data.pop("tiles")
        serialized.append(data)
    return {"seed": args.seed, "plates": serialized}


def cmd_simulate(args: argparse.Namespace) -> dict[str, Any]:
    observer = SimulatedObserver(
        deutan_accuracy=args.deutan_accuracy,
        control_accuracy=args.control_accuracy,
        seed=derive_seed(args.seed, "observer"),
    )

    baseline = build_session(SessionConfig.for_mode(SessionMode.BASELINE, derive_seed(args.seed, "baseline")))
    plate = baseline.start()
    while not baseline.sequencer.is_complete:
        baseline.sequencer.record_response(observer.respond(plate))
        plate = baseline.sequencer.current_plate
    baseline_result = baseline.sequencer.result

    # The tuner starts from the severity-scaled preset and must beat the
    # baseline deutan score
    tuner = AdaptiveTuner(TuningConfig(max_rounds=args.rounds))
    tuner.init(
        baseline_result.severity.bucket,
        baseline_result.deutan.percentage,
        derive_seed(args.seed, "tuning"),
        initial=tune_from_severity(baseline_result.severity),
    )
    plate = tuner.start()
    while plate is not None:
        tuner.record_response(observer.respond(plate))
        plate = tuner.current_plate
    outcome = tuner.outcome

    validation = validation_session(outcome, derive_seed(args.seed, "validation"))
    plate = validation.start()
    while not validation.sequencer.is_complete:
        validation.sequencer.record_response(observer.respond(plate))
        plate = validation.sequencer.current_plate

    return {
        "baseline": serialize_session_result(baseline_result),
        "tuning": serialize_tuning_outcome(outcome),
        "validation": serialize_session_result(validation.sequencer.result),
    }



def cmd_staircase(args: argparse.Namespace) -> dict[str, Any]:
    params = deserialize_filter_parameters(args.params) if args.params else None
    observer = SimulatedObserver(
        deutan_accuracy=args.deutan_accuracy,
        control_accuracy=args.control_accuracy,
        seed=derive_seed(args.seed, "observer"),
    )
    staircase = StaircaseSequencer(seed=args.seed, filter_parameters=params)
    plate = staircase.start()
    while plate is not None:
        staircase.record_response(observer.respond(plate))
        plate = staircase.current_plate
    data = serialize_staircase_result(staircase.result)
    if args.no_responses:
        data.pop("responses")
    return data


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cvd-toolkit",
        description="Red-green colour vision screening plates and filter tuning",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    gen = sub.add_parser("generate", help="Print a generated plate sequence as JSON")
    gen.add_argument("--seed", default="demo", help="Session seed")
    gen.add_argument("--count", type=int, default=16, help="Number of plates")
    gen.add_argument("--ratio", type=float, default=0.625, help="Deutan plate fraction")
    gen.add_argument("--progressive", action="store_true", help="Ramp difficulty by position")
    gen.add_argument("--difficulty", choices=[d.value for d in Difficulty], default="medium")
    gen.add_argument("--kind", choices=[k.value for k in TargetKind], help="Use a single target kind")
    gen.add_argument("--params", help="Filter parameters as a JSON object")
    gen.add_argument("--no-tiles", action="store_true", help="Omit per-tile data")
    gen.set_defaults(func=cmd_generate)

    sim = sub.add_parser("simulate", help="Run baseline, tuning and validation with a simulated observer")
    sim.add_argument("--seed", default="demo", help="Run seed")
    sim.add_argument("--deutan-accuracy", type=float, default=0.3)
    sim.add_argument("--control-accuracy", type=float, default=0.95)
    sim.add_argument("--rounds", type=int, default=5, help="Maximum tuning rounds")
    sim.set_defaults(func=cmd_simulate)

    stair = sub.add_parser("staircase", help="Run the level-progression test with a simulated observer")
    stair.add_argument("--seed", default="demo", help="Run seed")
    stair.add_argument("--deutan-accuracy", type=float, default=0.3)
    stair.add_argument("--control-accuracy", type=float, default=0.95)
    stair.add_argument("--params", help="Filter parameters as a JSON object")
    stair.add_argument("--no-responses", action="store_true", help="Omit the trial log")
    stair.set_defaults(func=cmd_staircase)

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
    try:
        output = args.func(args)
    except CvdToolkitError as e:
        logger.error(f"{args.command} failed: {e}")
        print(f"error: {e}", file=sys.stderr)
        return 2
    print(to_json(output))
    return 0


if __name__ == "__main__":
    sys.exit(main())
