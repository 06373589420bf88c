"""Stress Testing Module

Allocation-weighted shock propagation over a library of named market
scenarios. Impact is a weighted dot product of asset-class weights and
per-class % shocks; no randomness and no price history.
"""

import logging
from typing import Mapping

from aether_risk.analysis.models import ASSET_CLASSES, ShockScenario, StressTestResult
from aether_risk.analysis.stats import round_half_up
from aether_risk.exceptions import ValidationError

logger = logging.getLogger(__name__)


# Historical shock vectors: % change per asset class
DEFAULT_SHOCK_LIBRARY = (
    ShockScenario(
        name="2008 Financial Crisis",
        description="Stocks -50%, Bonds +5%, Gold +25%",
        shocks={"stocks": -50, "bonds": 5, "gold": 25, "cash": 0, "alternatives": -30},
        recovery_time=24,
    ),
    ShockScenario(
        name="COVID-19 Crash (2020)",
        description="Stocks -35%, Bonds +10%, Gold +15%",
        shocks={"stocks": -35, "bonds": 10, "gold": 15, "cash": 0, "alternatives": -20},
        recovery_time=6,
    ),
    ShockScenario(
        name="Dot-com Bubble (2000)",
        description="Stocks -45%, Bonds +8%, Gold +10%",
        shocks={"stocks": -45, "bonds": 8, "gold": 10, "cash": 0, "alternatives": -40},
        recovery_time=36,
    ),
    ShockScenario(
        name="Inflation Spike",
        description="Stocks -20%, Bonds -15%, Gold +30%",
        shocks={"stocks": -20, "bonds": -15, "gold": 30, "cash": -10, "alternatives": 5},
        recovery_time=18,
    ),
    # Currency exposure isn't modelled per asset class; flat estimate
    ShockScenario(
        name="Currency Crisis",
        description="INR depreciation -25%, Foreign assets +25%",
        recovery_time=12,
        fixed_impact=-15,
    ),
)


def _read_allocation(allocation: Mapping[str, float]) -> dict[str, float]:
    unknown = set(allocation) - set(ASSET_CLASSES)
    if unknown:
        logger.warning("Ignoring unknown asset classes in allocation: %s", sorted(unknown))
    return {cls: float(allocation.get(cls, 0.0) or 0.0) for cls in ASSET_CLASSES}


def scenario_impact(
    allocation: Mapping[str, float],
    shocks: Mapping[str, float],
) -> float:
    """Portfolio % change under ``shocks``, weights normalised by their sum.

    Returns 0.0 when the allocation total is zero.
    """
    weights = _read_allocation(allocation)
    total = sum(weights.values())
    if total == 0:
        return 0.0

    impact = sum(
        (weights[cls] / total) * float(shocks.get(cls, 0.0))
        for cls in ASSET_CLASSES
    )
    return round_half_up(impact, 2)


def custom_scenario(
    name: str,
    shocks: Mapping[str, float],
    description: str = "",
    recovery_time: int = 0,
) -> ShockScenario:
    """Build a caller-defined shock vector over the standard asset classes."""
    unknown = set(shocks) - set(ASSET_CLASSES)
    if unknown:
        raise ValidationError(
            f"Unknown asset classes {sorted(unknown)}; expected {list(ASSET_CLASSES)}"
        )
    return ShockScenario(
        name=name,
        description=description,
        shocks={cls: float(shocks.get(cls, 0.0)) for cls in ASSET_CLASSES},
        recovery_time=recovery_time,
    )


def run_stress_tests(
    current_value: float,
    allocation: Mapping[str, float],
    shock_library: tuple[ShockScenario, ...] | list[ShockScenario] = DEFAULT_SHOCK_LIBRARY,
) -> list[StressTestResult]:
    """Estimate portfolio impact for every scenario in ``shock_library``.

    Args:
        current_value: Portfolio value before the shock.
        allocation: % weight per asset class (need not sum to 100).
        shock_library: Scenarios to apply, in output order.

    Returns:
        One StressTestResult per scenario. Scenarios carrying a
        ``fixed_impact`` report it unchanged, whatever the allocation.
    """
    results: list[StressTestResult] = []

    for scenario in shock_library:
        if scenario.fixed_impact is not None:
            impact = round_half_up(float(scenario.fixed_impact), 2)
        else:
            impact = scenario_impact(allocation, scenario.shocks)

        results.append(
            StressTestResult(
                scenario=scenario.name,
                description=scenario.description,
                portfolio_impact=impact,
                estimated_value=round_half_up(current_value * (1 + impact / 100)),
                recovery_time=scenario.recovery_time,
            )
        )

    logger.info(
        "run_stress_tests: %d scenarios, worst impact %.2f%%",
        len(results),
        min((r["portfolio_impact"] for r in results), default=0.0),
    )
    return results
