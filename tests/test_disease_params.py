"""Tests for the seasonal transmissibility signal and engine parameters."""

import numpy as np
import pytest

from seasonal_sis.core.disease_params import (
    CONTINUOUS_SCENARIO,
    OSCILLATING_SCENARIO,
    SeasonalParameters,
    SeasonalTransmissibility,
)
from seasonal_sis.core.exceptions import ConfigurationError, DegenerateRateError, PreconditionViolation


@pytest.fixture
def flat():
    return SeasonalTransmissibility(t1=10, t2=20, base_rate=2.0, rate_boost=0.0)


@pytest.fixture
def forced():
    return SeasonalTransmissibility(t1=10, t2=20, base_rate=2.0, rate_boost=6.0)


class TestEvaluate:
    def test_flat_signal_is_constant(self, flat):
        for t in np.linspace(0.0, 95.0, 77):
            assert flat.evaluate(t) == 2.0

    def test_forced_signal_phases(self, forced):
        assert forced.evaluate(5) == 2.0
        assert forced.evaluate(15) == 8.0
        assert forced.evaluate(25) == 2.0

    def test_t1_boundary_uses_boosted_phase(self, forced):
        assert forced.evaluate(10.0) == 8.0
        assert forced.evaluate(30.0) == 8.0
        assert forced.evaluate(np.nextafter(10.0, 0.0)) == 2.0

    def test_call_aliases_evaluate(self, forced):
        assert forced(15) == forced.evaluate(15)

    @pytest.mark.parametrize("k", [0, 1, 3, 17])
    def test_periodicity(self, forced, k):
        for t in [0.0, 2.5, 9.75, 10.0, 12.0, 19.5]:
            assert forced.evaluate(t + k * forced.t2) == forced.evaluate(t)


class TestIntegral:
    def test_zero_at_origin(self, forced):
        assert forced.evaluate_integral(0.0) == 0.0

    def test_flat_integral_is_linear(self, flat):
        for t in [0.0, 1.0, 10.0, 13.7, 20.0, 55.5]:
            assert flat.evaluate_integral(t) == pytest.approx(2.0 * t)

    def test_forced_integral_values(self, forced):
        assert forced.Lt1 == pytest.approx(20.0)
        assert forced.Lt2 == pytest.approx(100.0)
        assert forced.evaluate_integral(15) == pytest.approx(60.0)
        assert forced.evaluate_integral(25) == pytest.approx(110.0)

    def test_strictly_increasing(self, forced):
        times = np.linspace(0.0, 100.0, 2001)
        values = np.array([forced.evaluate_integral(t) for t in times])
        assert np.all(np.diff(values) > 0)

    def test_continuous_at_phase_boundaries(self, forced):
        for boundary in [10.0, 20.0, 30.0, 40.0]:
            below = forced.evaluate_integral(boundary - 1e-9)
            above = forced.evaluate_integral(boundary)
            assert above == pytest.approx(below, abs=1e-6)

    def test_negative_time_rejected(self, forced):
        with pytest.raises(PreconditionViolation):
            forced.evaluate_integral(-1.0)


class TestIntegralInverse:
    def test_round_trip(self, forced):
        rng = np.random.default_rng(3)
        for t in np.concatenate([[0.0, 10.0, 20.0, 35.0], rng.uniform(0, 1000, 200)]):
            L = forced.evaluate_integral(t)
            assert forced.evaluate_integral_inverse(L) == pytest.approx(t, rel=1e-9, abs=1e-9)

    def test_round_trip_flat(self, flat):
        for t in [0.5, 9.99, 10.0, 19.0, 123.4]:
            assert flat.evaluate_integral_inverse(flat.evaluate_integral(t)) == pytest.approx(t)

    def test_zero_base_rate_skips_quiet_phase(self):
        rate = SeasonalTransmissibility(t1=10, t2=20, base_rate=0.0, rate_boost=4.0)
        assert rate.evaluate_integral_inverse(0.0) == pytest.approx(10.0)
        assert rate.evaluate_integral_inverse(20.0) == pytest.approx(15.0)
        assert rate.evaluate_integral_inverse(60.0) == pytest.approx(35.0)

    def test_identically_zero_signal(self):
        rate = SeasonalTransmissibility(t1=10, t2=20, base_rate=0.0, rate_boost=0.0)
        assert rate.evaluate(12.0) == 0.0
        with pytest.raises(DegenerateRateError):
            rate.evaluate_integral_inverse(1.0)

    def test_negative_input_rejected(self, forced):
        with pytest.raises(PreconditionViolation):
            forced.evaluate_integral_inverse(-0.5)


class TestAggregate:
    def test_weights_edges_and_background(self, forced):
        total = forced.aggregate(3, background=1.0)
        assert total.evaluate(5) == pytest.approx(7.0)
        assert total.evaluate(15) == pytest.approx(25.0)
        assert (total.t1, total.t2) == (forced.t1, forced.t2)

    def test_negative_weights_rejected(self, forced):
        with pytest.raises(PreconditionViolation):
            forced.aggregate(-1)


class TestTable:
    def test_tabulate(self, forced):
        table = forced.tabulate(t_max=1.0, dt=0.25)
        assert list(table.columns) == ['t', 'l', 'L']
        assert len(table) == 4
        assert table['L'].iloc[-1] == pytest.approx(1.5)

    def test_write_table(self, forced, tmp_path):
        path = tmp_path / "table.txt"
        forced.write_table(path, t_max=0.5, dt=0.25)
        lines = path.read_text().splitlines()
        assert lines[0] == "t\tl\tL"
        assert lines[1] == "0.000\t2.000\t0.000"
        assert lines[2] == "0.250\t2.000\t0.500"


class TestValidation:
    @pytest.mark.parametrize("t1, t2, base_rate, rate_boost", [
        (10, 10, 1.0, 0.0),
        (20, 10, 1.0, 0.0),
        (-1, 10, 1.0, 0.0),
        (1, 10, -0.5, 1.0),
        (1, 10, 1.0, -2.0),
        (1, float('inf'), 1.0, 0.0),
        (1, 10, float('nan'), 0.0),
    ])
    def test_invalid_signal(self, t1, t2, base_rate, rate_boost):
        with pytest.raises(ConfigurationError):
            SeasonalTransmissibility(t1, t2, base_rate, rate_boost)

    def test_negative_boost_allowed_if_rate_stays_non_negative(self):
        rate = SeasonalTransmissibility(1, 10, 2.0, -2.0)
        assert rate.evaluate(5) == 0.0

    def test_invalid_parameters(self):
        with pytest.raises(ConfigurationError):
            SeasonalParameters(t1=10, t2=5, base_rate=1.0, rate_boost=0.0, recovery_rate=1.0)
        with pytest.raises(ConfigurationError):
            SeasonalParameters(t1=1, t2=5, base_rate=1.0, rate_boost=0.0, recovery_rate=-1.0)

    def test_configuration_error_is_value_error(self):
        with pytest.raises(ValueError):
            SeasonalTransmissibility(5, 5, 1.0, 0.0)


def test_presets():
    assert CONTINUOUS_SCENARIO.mean_rate == pytest.approx(2.0)
    assert OSCILLATING_SCENARIO.mean_rate == pytest.approx(5.0)
    assert OSCILLATING_SCENARIO.transmissibility().evaluate(15) == 8.0
