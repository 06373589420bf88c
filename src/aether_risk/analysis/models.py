"""Input and result records exchanged with the analytics engines.

Results are TypedDicts created fresh per call. Inputs that carry
constraints are validated on construction.
"""

from dataclasses import dataclass, field
from typing import TypedDict

import numpy as np
from pydantic import BaseModel, ConfigDict, Field

ASSET_CLASSES = ("stocks", "bonds", "gold", "cash", "alternatives")


# ---------------------------------------------------------------------------
# Attribution
# ---------------------------------------------------------------------------


class AttributionResult(TypedDict):
    sharpe_ratio: float
    sortino_ratio: float
    alpha: float  # %
    beta: float
    information_ratio: float
    max_drawdown: float  # %
    calmar_ratio: float
    volatility: float  # %
    returns: float  # annualized, %


# ---------------------------------------------------------------------------
# Monte Carlo
# ---------------------------------------------------------------------------


class SimulationConfig(BaseModel):
    """Forward-looking assumptions for one Monte Carlo run."""

    model_config = ConfigDict(frozen=True)

    current_value: float = Field(gt=0, description="Starting portfolio value")
    expected_return: float = Field(description="Annual expected return (decimal)")
    volatility: float = Field(ge=0, description="Annual standard deviation (decimal)")
    time_horizon: int = Field(ge=0, description="Horizon in whole years")
    simulation_count: int = Field(10000, gt=0, description="Number of trials")


class ConfidenceIntervals(TypedDict):
    p5: float
    p25: float
    p50: float
    p75: float
    p95: float


class ScenarioResult(TypedDict):
    scenario: str
    probability: int  # narrative weight, %
    expected_value: float
    worst_case: float
    best_case: float
    median: float


class SimulationOutcome(TypedDict):
    scenarios: list[ScenarioResult]
    distribution: np.ndarray  # ascending, len == simulation_count
    confidence_intervals: ConfidenceIntervals


class DistributionBucket(TypedDict):
    lower: float | None
    upper: float | None
    probability: float  # %


class PresetProjection(TypedDict):
    name: str
    annual_return: float
    volatility: float
    projected_value: int
    probability: int


# ---------------------------------------------------------------------------
# Stress testing
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ShockScenario:
    """Named shock: per-asset-class % change plus a recovery estimate.

    ``fixed_impact`` short-circuits the allocation-weighted formula.
    """

    name: str
    description: str
    shocks: dict[str, float] = field(default_factory=dict)
    recovery_time: int = 0  # months
    fixed_impact: float | None = None


class StressTestResult(TypedDict):
    scenario: str
    description: str
    portfolio_impact: float  # %
    estimated_value: int
    recovery_time: int  # months


# ---------------------------------------------------------------------------
# Factor attribution
# ---------------------------------------------------------------------------


class FactorAttribution(TypedDict):
    factor: str
    contribution: float  # % of returns
    description: str


__all__ = [
    "ASSET_CLASSES",
    "AttributionResult",
    "SimulationConfig",
    "ConfidenceIntervals",
    "ScenarioResult",
    "SimulationOutcome",
    "DistributionBucket",
    "PresetProjection",
    "ShockScenario",
    "StressTestResult",
    "FactorAttribution",
]
