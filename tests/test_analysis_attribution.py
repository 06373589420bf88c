"""Unit tests for aether_risk.analysis.attribution module."""

import numpy as np
import pytest

from aether_risk.analysis.attribution import compute_attribution
from aether_risk.exceptions import MismatchedLengthError, ValidationError

RESULT_KEYS = {
    "sharpe_ratio", "sortino_ratio", "alpha", "beta", "information_ratio",
    "max_drawdown", "calmar_ratio", "volatility", "returns",
}


class TestDegenerateInput:
    def test_empty_series_returns_all_zero(self):
        result = compute_attribution([], [], 6.5)
        assert set(result) == RESULT_KEYS
        assert all(v == 0 for v in result.values())

    def test_constant_returns_zero_ratios(self):
        """Zero volatility and no downside -> sharpe and sortino fall back to 0."""
        flat = [0.01, 0.01, 0.01, 0.01]
        result = compute_attribution(flat, [0.005, 0.0, 0.01, -0.002])
        assert result["sharpe_ratio"] == 0
        assert result["sortino_ratio"] == 0
        assert result["volatility"] == 0

    def test_constant_benchmark_gives_beta_one(self):
        result = compute_attribution([0.01, -0.02, 0.03], [0.001, 0.001, 0.001])
        assert result["beta"] == 1

    def test_identical_series_zero_information_ratio(self, small_portfolio):
        result = compute_attribution(small_portfolio, small_portfolio, 0)
        assert result["information_ratio"] == 0
        assert result["beta"] == 1.0

    def test_no_drawdown_zero_calmar(self):
        result = compute_attribution([0.01, 0.02, 0.015], [0.01, 0.01, 0.02])
        assert result["max_drawdown"] == 0
        assert result["calmar_ratio"] == 0


class TestValidation:
    def test_mismatched_length_raises(self):
        with pytest.raises(MismatchedLengthError, match="doesn't match"):
            compute_attribution([0.01, 0.02], [0.01], 6.5)

    def test_mismatch_checked_before_empty(self):
        with pytest.raises(MismatchedLengthError):
            compute_attribution([], [0.01], 6.5)

    def test_mismatch_is_a_value_error(self):
        with pytest.raises(ValueError):
            compute_attribution([0.01], [], 6.5)
        assert issubclass(MismatchedLengthError, ValidationError)


class TestHandComputed:
    """Portfolio [2%, -1%, 3%, -2%] against a benchmark moving half as much."""

    @pytest.fixture
    def result(self, small_portfolio, half_benchmark):
        return compute_attribution(small_portfolio, half_benchmark, risk_free_rate_pct=0)

    def test_beta(self, result):
        assert result["beta"] == pytest.approx(2.0)

    def test_alpha_is_zero_when_fully_explained(self, result):
        assert result["alpha"] == pytest.approx(0.0, abs=1e-9)

    def test_volatility_pct(self, result):
        # population std = sqrt(4.25e-4) = 0.020616
        assert result["volatility"] == pytest.approx(2.06)

    def test_sharpe(self, result):
        assert result["sharpe_ratio"] == pytest.approx(0.24)

    def test_sortino(self, result):
        # 0.005 / sqrt(2.5e-4)
        assert result["sortino_ratio"] == pytest.approx(0.32)

    def test_information_ratio(self, result):
        # 0.0025 / sqrt(1.125e-4)
        assert result["information_ratio"] == pytest.approx(0.24)

    def test_max_drawdown_pct(self, result):
        assert result["max_drawdown"] == pytest.approx(2.0)

    def test_annualized_return_and_calmar(self, result):
        assert result["returns"] == pytest.approx(126.0)
        assert result["calmar_ratio"] == pytest.approx(63.0)


class TestRiskFreeRate:
    def test_annual_pct_converted_to_daily(self):
        # 25.2% annual -> 0.1% per day; mean 0.1% leaves zero excess return
        portfolio = [0.002, 0.0, 0.002, 0.0]
        benchmark = [0.001, 0.0, 0.002, -0.001]
        result = compute_attribution(portfolio, benchmark, risk_free_rate_pct=25.2)
        assert result["sharpe_ratio"] == pytest.approx(0.0, abs=1e-9)

    def test_higher_rate_lowers_sharpe(self, daily_returns):
        portfolio, benchmark = daily_returns
        low = compute_attribution(portfolio, benchmark, 2.0)
        high = compute_attribution(portfolio, benchmark, 10.0)
        assert high["sharpe_ratio"] < low["sharpe_ratio"]


class TestRealisticSeries:
    def test_beta_near_construction(self, daily_returns):
        portfolio, benchmark = daily_returns
        result = compute_attribution(portfolio, benchmark)
        assert 0.9 < result["beta"] < 1.3

    def test_drawdown_is_percentage_within_bounds(self, daily_returns):
        portfolio, benchmark = daily_returns
        result = compute_attribution(portfolio, benchmark)
        assert 0.0 <= result["max_drawdown"] <= 100.0

    def test_input_not_mutated(self, daily_returns):
        portfolio, benchmark = daily_returns
        before = portfolio.copy()
        compute_attribution(portfolio, benchmark)
        assert np.array_equal(portfolio, before)
