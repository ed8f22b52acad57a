"""
Unit Tests for FilterParameterSpace
"""

import pytest

from cvd_toolkit.core.errors import InvalidArgumentError
from cvd_toolkit.core.models import FilterParameters, ParameterRange
from cvd_toolkit.core.utils.seeded_random import SeededRandom
from cvd_toolkit.tuning import DEFAULT_RANGES, DEFAULT_SPACE, FilterParameterSpace


@pytest.fixture
def space():
    return FilterParameterSpace()


def _extreme(which: str) -> FilterParameters:
    return FilterParameters(**{name: getattr(r, which) for name, r in DEFAULT_RANGES.items()})


class TestConstruction:
    """Tests for range validation."""

    def test_space_when_default_then_covers_every_parameter(self, space):
        assert list(space.ranges) == list(FilterParameters.names())

    def test_space_when_range_missing_then_raises(self):
        ranges = dict(DEFAULT_RANGES)
        del ranges["contrast"]
        with pytest.raises(InvalidArgumentError, match="contrast"):
            FilterParameterSpace(ranges)

    def test_space_when_unknown_range_then_raises(self):
        ranges = dict(DEFAULT_RANGES, gamma=ParameterRange(0, 2, 0.1))
        with pytest.raises(InvalidArgumentError, match="gamma"):
            FilterParameterSpace(ranges)

    def test_range_for_when_unknown_then_raises(self, space):
        with pytest.raises(InvalidArgumentError):
            space.range_for("gamma")

    def test_contains_when_outside_then_false(self, space):
        assert space.contains(FilterParameters())
        assert not space.contains(FilterParameters(hue_shift=90))


class TestNeighbors:
    """Tests for neighbors()."""

    def test_neighbors_when_hue_zero_then_includes_plus_and_minus_step(self, space):
        hues = {n.hue_shift for n in space.neighbors(FilterParameters()) if n.hue_shift != 0}
        assert hues == {-5, 5}

    def test_neighbors_when_identity_then_lower_bound_respected(self, space):
        neighbors = space.neighbors(FilterParameters())
        # intensity 0 has no lower neighbour
        assert len(neighbors) == 15
        assert all(space.contains(n) for n in neighbors)

    def test_neighbors_when_called_then_one_parameter_changes(self, space):
        base = FilterParameters(hue_shift=25, intensity=0.5, saturation_boost=15)
        for n in space.neighbors(base):
            changed = [k for k in FilterParameters.names() if n.get(k) != base.get(k)]
            assert len(changed) == 1

    def test_neighbors_when_at_max_then_only_lower(self, space):
        neighbors = space.neighbors(FilterParameters(hue_shift=60, intensity=0.5))
        hues = {n.hue_shift for n in neighbors if n.hue_shift != 60}
        assert hues == {55}

    def test_neighbors_when_all_extremes_then_stay_in_range(self, space):
        for params in (_extreme("min"), _extreme("max")):
            assert all(space.contains(n) for n in space.neighbors(params))

    def test_neighbors_when_fractional_step_then_no_float_drift(self, space):
        values = {n.intensity for n in space.neighbors(FilterParameters(intensity=0.3))}
        assert {0.2, 0.4} <= values

    def test_neighbors_when_step_multiplier_half_then_half_steps(self, space):
        hues = {n.hue_shift for n in space.neighbors(FilterParameters(), 0.5) if n.hue_shift != 0}
        assert hues == {-2.5, 2.5}

    def test_neighbors_when_multiplier_not_positive_then_raises(self, space):
        with pytest.raises(InvalidArgumentError):
            space.neighbors(FilterParameters(), 0)


class TestSimilarity:
    """Tests for similarity()."""

    def test_similarity_when_equal_then_one(self, space):
        p = FilterParameters(hue_shift=25, intensity=0.5)
        assert space.similarity(p, p) == 1.0

    def test_similarity_when_swapped_then_symmetric(self, space):
        a = FilterParameters(hue_shift=25, intensity=0.5, green_gain=0.4)
        b = FilterParameters(hue_shift=-10, contrast=15, blue_gain=-0.1)
        assert space.similarity(a, b) == pytest.approx(space.similarity(b, a))

    def test_similarity_when_opposite_extremes_then_zero(self, space):
        assert space.similarity(_extreme("min"), _extreme("max")) == pytest.approx(0.0)

    def test_similarity_when_one_step_then_close_to_one(self, space):
        a = FilterParameters()
        b = FilterParameters(hue_shift=5)
        # 5 / 120 spread over 8 parameters
        assert space.similarity(a, b) == pytest.approx(1 - (5 / 120) / 8)

    def test_similarity_when_zero_span_range_then_ignored(self):
        ranges = dict(DEFAULT_RANGES, blue_gain=ParameterRange(0, 0, 0.05))
        space = FilterParameterSpace(ranges)
        assert space.similarity(FilterParameters(), FilterParameters(blue_gain=0.5)) == 1.0


class TestNormalizeAndBlend:
    """Tests for normalize, coerce, interpolate and random_perturbation."""

    def test_normalize_when_out_of_range_then_clamped(self, space):
        p = space.normalize(FilterParameters(hue_shift=100, intensity=-1, green_gain=2))
        assert (p.hue_shift, p.intensity, p.green_gain) == (60, 0, 0.8)

    def test_coerce_when_partial_mapping_then_defaults_and_clamps(self, space):
        p = space.coerce({"hue_shift": -90, "saturation_boost": 10})
        assert p.hue_shift == -60
        assert p.saturation_boost == 10
        assert p.contrast == 0

    def test_interpolate_when_midpoint_then_average(self, space):
        a = FilterParameters(hue_shift=0, intensity=0.2)
        b = FilterParameters(hue_shift=40, intensity=0.6)
        mid = space.interpolate(a, b, 0.5)
        assert mid.hue_shift == 20
        assert mid.intensity == pytest.approx(0.4)

    def test_interpolate_when_endpoints_then_inputs(self, space):
        a = FilterParameters(hue_shift=10)
        b = FilterParameters(hue_shift=30)
        assert space.interpolate(a, b, 0) == a
        assert space.interpolate(a, b, 1) == b

    def test_interpolate_when_t_out_of_range_then_raises(self, space):
        with pytest.raises(InvalidArgumentError):
            space.interpolate(FilterParameters(), FilterParameters(), 1.5)

    def test_perturbation_when_called_then_within_one_step_and_range(self, space):
        base = FilterParameters(hue_shift=58, intensity=0.5)
        rng = SeededRandom("perturb")
        for _ in range(50):
            p = space.random_perturbation(base, rng)
            assert space.contains(p)
            for name, r in space.ranges.items():
                assert abs(p.get(name) - base.get(name)) <= r.step

    def test_perturbation_when_same_seed_then_same_result(self, space):
        base = FilterParameters(hue_shift=20)
        assert (
            space.random_perturbation(base, SeededRandom("x"))
            == space.random_perturbation(base, SeededRandom("x"))
        )

    def test_default_space_when_imported_then_default_ranges(self):
        assert DEFAULT_SPACE.ranges == dict(DEFAULT_RANGES)
