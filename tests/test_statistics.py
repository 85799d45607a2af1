"""Tests for the statistics primitives."""

import pytest

from tradescout.services import statistics
from tradescout.utils.constants import DAILY_RISK_FREE_RATE


class TestMeanAndStddev:
    def test_mean_empty_is_zero(self):
        assert statistics.mean([]) == 0.0

    def test_mean(self):
        assert statistics.mean([1.0, 2.0, 3.0]) == pytest.approx(2.0)

    @pytest.mark.parametrize("values", [[], [5.0], [3.0, 3.0, 3.0]])
    def test_stddev_degenerate_is_zero(self, values):
        assert statistics.stddev(values) == 0.0

    def test_stddev_is_population(self):
        assert statistics.stddev([2, 4, 4, 4, 5, 5, 7, 9]) == pytest.approx(2.0)


class TestZscore:
    def test_zero_stddev_gives_zero(self):
        assert statistics.zscore(42.0, 1.0, 0.0) == 0.0

    def test_zscore_against_constant_data_is_zero(self):
        data = [7.0, 7.0, 7.0]
        sd = statistics.stddev(data)
        assert statistics.zscore(100.0, statistics.mean(data), sd) == 0.0

    def test_value(self):
        assert statistics.zscore(-4.0, -1.0, 0.5) == pytest.approx(-6.0)

    @pytest.mark.parametrize("delta", [0.1, 1.0, 3.7])
    def test_antisymmetric_around_mean(self, delta):
        m, sd = 2.5, 1.3
        assert statistics.zscore(m + delta, m, sd) == pytest.approx(
            -statistics.zscore(m - delta, m, sd)
        )


class TestSharpe:
    def test_too_few_returns(self):
        assert statistics.sharpe_ratio([0.01]) == 0.0

    def test_constant_returns(self):
        assert statistics.sharpe_ratio([0.01, 0.01, 0.01]) == 0.0

    def test_value(self):
        expected = (0.02 - DAILY_RISK_FREE_RATE) / 0.01
        assert statistics.sharpe_ratio([0.01, 0.03]) == pytest.approx(expected)


class TestHelpers:
    @pytest.mark.parametrize("z, pct", [
        (-3.5, 0.1), (-2.7, 0.6), (-2.2, 2.5), (-1.7, 7.0), (-1.0, 16.0),
    ])
    def test_approximate_percentile(self, z, pct):
        assert statistics.approximate_percentile(z) == pct

    def test_max_drawdown(self):
        amount, pct = statistics.max_drawdown([100.0, 120.0, 90.0, 130.0])
        assert amount == pytest.approx(30.0)
        assert pct == pytest.approx(25.0)

    def test_max_drawdown_monotonic_rise(self):
        assert statistics.max_drawdown([1.0, 2.0, 3.0]) == (0.0, 0.0)

    def test_clamp(self):
        assert statistics.clamp(120.0, 0.0, 100.0) == 100.0
        assert statistics.clamp(-5.0, 0.0, 100.0) == 0.0
