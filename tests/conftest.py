"""Pytest configuration and shared fixtures."""

import numpy as np
import pytest

from aether_risk.config import Settings


@pytest.fixture
def daily_returns():
    """252 days of portfolio and benchmark returns (~16% annual vol)."""
    rng = np.random.default_rng(42)
    benchmark = rng.normal(0.0004, 0.01, 252)
    noise = rng.normal(0.0001, 0.004, 252)
    portfolio = 1.1 * benchmark + noise
    return portfolio, benchmark


@pytest.fixture
def small_portfolio():
    """Four periods; drawdown and ratios are easy to check by hand."""
    return [0.02, -0.01, 0.03, -0.02]


@pytest.fixture
def half_benchmark(small_portfolio):
    """Benchmark moving exactly half as much as small_portfolio (beta = 2)."""
    return [r / 2 for r in small_portfolio]


@pytest.fixture
def settings():
    return Settings(
        simulation_batch_size=2500,
        simulation_parallel_threshold=10000,
        simulation_max_workers=2,
        simulation_seed=None,
    )
