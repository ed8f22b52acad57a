"""
Tests for the cvd-toolkit command line.
"""

import json

import pytest

from cvd_toolkit.cli import SimulatedObserver, build_parser, main
from cvd_toolkit.core.models import Category, FilterParameters, PlateRequest, TargetKind
from cvd_toolkit.core.utils.serialization import deserialize_session_result
from cvd_toolkit.tuning import DEFAULT_SPACE, tune_from_severity


class TestGenerateCommand:
    """Tests for ``cvd-toolkit generate``."""

    def test_generate_when_no_tiles_then_summary_json(self, capsys):
        assert main(["generate", "--seed", "cli", "--count", "4", "--no-tiles"]) == 0
        data = json.loads(capsys.readouterr().out)
        assert data["seed"] == "cli"
        assert len(data["plates"]) == 4
        assert "tiles" not in data["plates"][0]

    def test_generate_when_kind_given_then_all_plates_that_kind(self, capsys):
        assert main(["generate", "--count", "2", "--kind", "outlier"]) == 0
        data = json.loads(capsys.readouterr().out)
        assert all(p["animated"] for p in data["plates"])
        assert len(data["plates"][0]["tiles"]) == 18 * 18

    def test_generate_when_params_given_then_recorded(self, capsys):
        assert main(["generate", "--count", "1", "--no-tiles", "--params", '{"hue_shift": 20, "intensity": 0.5}']) == 0
        data = json.loads(capsys.readouterr().out)
        assert data["plates"][0]["filter_parameters"]["hue_shift"] == 20

    def test_generate_when_bad_params_then_exit_code_2(self, capsys):
        assert main(["generate", "--params", '{"gamma": 1}']) == 2
        assert "error" in capsys.readouterr().err

    def test_generate_when_same_seed_then_same_output(self, capsys):
        main(["generate", "--seed", "same", "--count", "3"])
        first = capsys.readouterr().out
        main(["generate", "--seed", "same", "--count", "3"])
        assert capsys.readouterr().out == first

    def test_parser_when_no_command_then_exits(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])


class TestSimulateCommand:
    """Tests for ``cvd-toolkit simulate``."""

    def test_simulate_when_run_then_three_stage_report(self, capsys):
        assert main(["simulate", "--seed", "sim", "--rounds", "2"]) == 0
        data = json.loads(capsys.readouterr().out)
        assert set(data) == {"baseline", "tuning", "validation"}
        assert data["baseline"]["mode"] == "baseline"
        assert data["validation"]["mode"] == "validation"
        assert 1 <= data["tuning"]["rounds"] <= 2
        assert data["validation"]["filter_parameters"] == data["tuning"]["best_params"]

    def test_simulate_when_run_then_tuner_must_beat_baseline_deutan_score(self, capsys):
        assert main(["simulate", "--seed", "p", "--rounds", "3"]) == 0
        data = json.loads(capsys.readouterr().out)
        assert data["tuning"]["baseline_score"] == data["baseline"]["deutan"]["percentage"]
        assert data["tuning"]["best_score"] >= data["tuning"]["baseline_score"]

    def test_simulate_when_run_then_first_round_uses_severity_scaled_preset(self, capsys):
        assert main(["simulate", "--seed", "p", "--rounds", "3"]) == 0
        data = json.loads(capsys.readouterr().out)
        severity = deserialize_session_result(data["baseline"]).severity
        expected = DEFAULT_SPACE.normalize(tune_from_severity(severity))
        assert data["tuning"]["history"][0]["params"] == expected.to_dict()


class TestStaircaseCommand:
    """Tests for ``cvd-toolkit staircase``."""

    def test_staircase_when_run_then_scores_and_diagnosis(self, capsys):
        assert main(["staircase", "--seed", "st"]) == 0
        data = json.loads(capsys.readouterr().out)
        assert set(data["scores"]) == {"red_green", "purple_blue", "purple_green"}
        assert all(0 <= s <= 100 for s in data["scores"].values())
        assert data["diagnosis"]["type"] in {"normal", "deutan", "protan"}
        assert data["trials"] == len(data["responses"]) >= 1
        assert data["responses"][0]["palette_name"] == "calibration"

    def test_staircase_when_no_responses_then_trial_log_dropped(self, capsys):
        assert main(["staircase", "--seed", "st", "--no-responses"]) == 0
        data = json.loads(capsys.readouterr().out)
        assert "responses" not in data
        assert data["trials"] >= 1

    def test_staircase_when_perfect_observer_then_ends_after_red_green(self, capsys):
        assert main(["staircase", "--deutan-accuracy", "1", "--control-accuracy", "1", "--no-responses"]) == 0
        data = json.loads(capsys.readouterr().out)
        assert data["scores"]["red_green"] == 100
        assert data["stopped_early"]
        assert data["diagnosis"]["type"] == "normal"
        assert data["trials"] == 1 + 20

    def test_staircase_when_params_given_then_recorded(self, capsys):
        assert main(["staircase", "--no-responses", "--params", '{"hue_shift": 10, "intensity": 0.3}']) == 0
        data = json.loads(capsys.readouterr().out)
        assert data["filter_parameters"]["hue_shift"] == 10


class TestSimulatedObserver:
    """Tests for SimulatedObserver."""

    def test_accuracy_when_control_plate_then_control_accuracy(self, generator):
        observer = SimulatedObserver(0.2, 0.9, "obs")
        plate = generator.generate(PlateRequest(seed="c", category=Category.CONTROL))
        assert observer.accuracy_for(plate) == 0.9

    def test_accuracy_when_filter_stronger_then_deutan_accuracy_rises(self, generator):
        observer = SimulatedObserver(0.2, 0.9, "obs")
        plain = generator.generate(PlateRequest(seed="d"))
        filtered = generator.generate(PlateRequest(
            seed="d", filter_parameters=FilterParameters(hue_shift=40, intensity=0.7, green_gain=0.5),
        ))
        assert observer.accuracy_for(filtered) > observer.accuracy_for(plain) == 0.2

    def test_respond_when_perfect_observer_then_hits_outlier(self, generator):
        from cvd_toolkit.session import TrialSequencer

        observer = SimulatedObserver(1.0, 1.0, "obs")
        plates = generator.generate_sequence(3, 1.0, "o", target_kinds=[TargetKind.OUTLIER])
        seq = TrialSequencer()
        plate = seq.start(plates)
        while not seq.is_complete:
            seq.record_response(observer.respond(plate))
            plate = seq.current_plate
        assert seq.result.overall.percentage == 100
