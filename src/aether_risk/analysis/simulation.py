"""Monte Carlo projection of portfolio value.

Each trial compounds ``current_value`` over ``time_horizon`` yearly steps
with returns drawn from N(expected_return, volatility) via Box-Muller.
Trials run in fixed-size batches; batches are independent and may be
fanned out to a process pool, then merged with a single sort.
"""

import logging
import threading
from concurrent.futures import ProcessPoolExecutor, as_completed
from typing import Any

import numpy as np

from aether_risk.analysis.models import (
    ConfidenceIntervals,
    DistributionBucket,
    PresetProjection,
    ScenarioResult,
    SimulationConfig,
    SimulationOutcome,
)
from aether_risk.analysis.sampling import BoxMullerSampler, UniformSource
from aether_risk.analysis.stats import percentile_by_index, round_half_up
from aether_risk.config import Settings
from aether_risk.exceptions import SimulationCancelledError, ValidationError

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

DEFAULT_NUM_SIMULATIONS = 10000
CONFIDENCE_LEVELS = {
    "p5": 0.05,
    "p25": 0.25,
    "p50": 0.50,
    "p75": 0.75,
    "p95": 0.95,
}

# (label, narrative probability %, anchor percentile key)
# The probabilities are fixed display weights, not tail mass at the anchor.
SCENARIO_ANCHORS = (
    ("Bear Market (-30% crash)", 5, "p5"),
    ("Recession (-15%)", 15, "p25"),
    ("Base Case (Expected Return)", 60, "p50"),
    ("Bull Market (+20%)", 15, "p75"),
    ("Euphoria (+40%)", 5, "p95"),
)

# Named assumption sets offered by the scenario planner
SCENARIO_PRESETS = (
    {"name": "Bull Market", "annual_return": 0.18, "volatility": 0.12, "probability": 25},
    {"name": "Base Case", "annual_return": 0.12, "volatility": 0.15, "probability": 50},
    {"name": "Bear Market", "annual_return": 0.05, "volatility": 0.22, "probability": 15},
    {"name": "Recession", "annual_return": -0.08, "volatility": 0.30, "probability": 10},
)

SEED_BOUND = 2**63


# ---------------------------------------------------------------------------
# Trial kernel
# ---------------------------------------------------------------------------


def _run_trials(
    sampler: BoxMullerSampler,
    current_value: float,
    expected_return: float,
    volatility: float,
    time_horizon: int,
    trials: int,
) -> np.ndarray:
    """Terminal values for ``trials`` independent paths."""
    values = np.full(trials, float(current_value))
    if time_horizon == 0:
        return values

    yearly_returns = sampler.normal(expected_return, volatility, (trials, time_horizon))
    for year in range(time_horizon):
        values *= 1.0 + yearly_returns[:, year]
    return values


def _simulate_batch(
    current_value: float,
    expected_return: float,
    volatility: float,
    time_horizon: int,
    trials: int,
    seed: int,
) -> np.ndarray:
    """Picklable worker for ProcessPoolExecutor.

    Builds its own generator from ``seed`` so the batch is reproducible
    regardless of which process runs it.
    """
    sampler = BoxMullerSampler(np.random.default_rng(seed))
    return _run_trials(
        sampler, current_value, expected_return, volatility, time_horizon, trials
    )


def _batch_sizes(total: int, batch_size: int) -> list[int]:
    batch_size = max(1, batch_size)
    full, rest = divmod(total, batch_size)
    sizes = [batch_size] * full
    if rest:
        sizes.append(rest)
    return sizes


def _check_cancelled(cancel_event: threading.Event | None, done: int, total: int) -> None:
    if cancel_event is not None and cancel_event.is_set():
        logger.info("Monte Carlo cancelled after %d/%d trials", done, total)
        raise SimulationCancelledError(done, total)


# ---------------------------------------------------------------------------
# Execution strategies
# ---------------------------------------------------------------------------


def _run_serial_seeded(
    config: SimulationConfig,
    sizes: list[int],
    seeds: list[int],
    cancel_event: threading.Event | None,
) -> list[np.ndarray]:
    parts: list[np.ndarray] = []
    done = 0
    for trials, seed in zip(sizes, seeds):
        _check_cancelled(cancel_event, done, config.simulation_count)
        parts.append(
            _simulate_batch(
                config.current_value, config.expected_return, config.volatility,
                config.time_horizon, trials, seed,
            )
        )
        done += trials
    return parts


def _run_serial_source(
    config: SimulationConfig,
    sizes: list[int],
    rng: UniformSource,
    cancel_event: threading.Event | None,
) -> list[np.ndarray]:
    """Draw every batch straight from a caller-supplied uniform source."""
    sampler = BoxMullerSampler(rng)
    parts: list[np.ndarray] = []
    done = 0
    for trials in sizes:
        _check_cancelled(cancel_event, done, config.simulation_count)
        parts.append(
            _run_trials(
                sampler, config.current_value, config.expected_return,
                config.volatility, config.time_horizon, trials,
            )
        )
        done += trials
    return parts


def _run_parallel(
    config: SimulationConfig,
    sizes: list[int],
    seeds: list[int],
    max_workers: int,
    cancel_event: threading.Event | None,
) -> list[np.ndarray]:
    parts: list[np.ndarray] = []
    done = 0

    logger.info(
        "Running %d Monte Carlo batches with %d workers",
        len(sizes), max_workers,
    )

    with ProcessPoolExecutor(max_workers=max_workers) as executor:
        futures = {}
        for idx, (trials, seed) in enumerate(zip(sizes, seeds)):
            future = executor.submit(
                _simulate_batch,
                config.current_value, config.expected_return, config.volatility,
                config.time_horizon, trials, seed,
            )
            futures[future] = idx

        for future in as_completed(futures):
            idx = futures[future]
            try:
                batch = future.result()
            except Exception as e:
                logger.warning("Monte Carlo batch %d failed: %s", idx, e)
                for pending in futures:
                    pending.cancel()
                raise
            parts.append(batch)
            done += len(batch)

            if cancel_event is not None and cancel_event.is_set():
                for pending in futures:
                    pending.cancel()
                _check_cancelled(cancel_event, done, config.simulation_count)

    return parts


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------


def run_monte_carlo(
    config: SimulationConfig,
    rng: UniformSource | None = None,
    *,
    max_workers: int | None = None,
    batch_size: int | None = None,
    cancel_event: threading.Event | None = None,
    settings: Settings | None = None,
) -> SimulationOutcome:
    """Project a distribution of terminal portfolio values.

    Args:
        config: Validated simulation assumptions.
        rng: Uniform source. A ``numpy.random.Generator`` is split into one
            child seed per batch, so a seeded run gives the same
            distribution serially or in parallel. Any other object with a
            ``random(size)`` method is drawn from directly, serially.
            ``None`` uses ``settings.simulation_seed`` (entropy if unset).
        max_workers: Process count for the parallel path
            (default: ``settings.simulation_max_workers``).
        batch_size: Trials per batch (default: ``settings.simulation_batch_size``).
        cancel_event: Checked between batches; when set the run stops with
            SimulationCancelledError.
        settings: Override for the ambient Settings.

    Returns:
        SimulationOutcome with the sorted distribution, p5..p95 bands and
        the five labeled scenarios.
    """
    settings = settings or Settings()
    if max_workers is None:
        max_workers = settings.simulation_max_workers
    if batch_size is None:
        batch_size = settings.simulation_batch_size
    if rng is None:
        rng = np.random.default_rng(settings.simulation_seed)

    total = config.simulation_count
    sizes = _batch_sizes(total, batch_size)

    if isinstance(rng, np.random.Generator):
        seeds = [int(rng.integers(SEED_BOUND)) for _ in sizes]
        use_parallel = (
            max_workers > 1
            and len(sizes) > 1
            and total >= settings.simulation_parallel_threshold
        )
        if use_parallel:
            parts = _run_parallel(
                config, sizes, seeds, min(max_workers, len(sizes)), cancel_event
            )
        else:
            parts = _run_serial_seeded(config, sizes, seeds, cancel_event)
    else:
        parts = _run_serial_source(config, sizes, rng, cancel_event)

    distribution = np.sort(np.concatenate(parts))
    outcome = _build_outcome(distribution)

    logger.info(
        "Monte Carlo complete: %d trials, %dy horizon, p50=%.2f",
        total, config.time_horizon, outcome["confidence_intervals"]["p50"],
    )
    return outcome


def _build_outcome(distribution: np.ndarray) -> SimulationOutcome:
    bands = ConfidenceIntervals(
        **{key: percentile_by_index(distribution, p) for key, p in CONFIDENCE_LEVELS.items()}
    )
    worst_case = float(distribution[0])
    best_case = float(distribution[-1])

    scenarios = [
        ScenarioResult(
            scenario=label,
            probability=probability,
            expected_value=bands[anchor],
            worst_case=worst_case,
            best_case=best_case,
            median=bands["p50"],
        )
        for label, probability, anchor in SCENARIO_ANCHORS
    ]

    return SimulationOutcome(
        scenarios=scenarios,
        distribution=distribution,
        confidence_intervals=bands,
    )


# ---------------------------------------------------------------------------
# Scenario-planner helpers
# ---------------------------------------------------------------------------


def _band_key(p: float) -> str:
    return f"p{int(round(p * 100))}"


def project_yearly_bands(
    config: SimulationConfig,
    rng: UniformSource | None = None,
    percentiles: tuple[float, ...] = (0.10, 0.50, 0.90),
    settings: Settings | None = None,
) -> list[dict[str, Any]]:
    """Percentile fan for each year from 0 to ``config.time_horizon``.

    Returns rows like ``{"year": 1, "p10": ..., "p50": ..., "p90": ...}``
    using the same floor-index percentile rule as run_monte_carlo.
    """
    if rng is None:
        rng = np.random.default_rng((settings or Settings()).simulation_seed)
    sampler = BoxMullerSampler(rng)
    trials = config.simulation_count
    horizon = config.time_horizon

    paths = np.empty((trials, horizon + 1))
    paths[:, 0] = config.current_value
    if horizon > 0:
        yearly_returns = sampler.normal(
            config.expected_return, config.volatility, (trials, horizon)
        )
        paths[:, 1:] = config.current_value * np.cumprod(1.0 + yearly_returns, axis=1)

    rows = []
    for year in range(horizon + 1):
        column = np.sort(paths[:, year])
        row: dict[str, Any] = {"year": year}
        for p in percentiles:
            row[_band_key(p)] = percentile_by_index(column, p)
        rows.append(row)
    return rows


def bucket_distribution(
    distribution: np.ndarray,
    edges: tuple[float, ...] | list[float],
) -> list[DistributionBucket]:
    """Share of simulated values per bucket, in percent.

    ``edges`` splits the real line into ``len(edges) + 1`` half-open
    buckets ``[lower, upper)``; the first and last are open-ended.
    """
    edges = [float(e) for e in edges]
    if any(b <= a for a, b in zip(edges, edges[1:])):
        raise ValidationError(f"Bucket edges must be strictly increasing: {edges}")

    values = np.asarray(distribution, dtype=np.float64)
    n = values.size
    bounds = [None, *edges, None]

    buckets: list[DistributionBucket] = []
    for lower, upper in zip(bounds[:-1], bounds[1:]):
        mask = np.ones(n, dtype=bool)
        if lower is not None:
            mask &= values >= lower
        if upper is not None:
            mask &= values < upper
        share = float(mask.sum()) / n * 100 if n else 0.0
        buckets.append(
            DistributionBucket(lower=lower, upper=upper, probability=round_half_up(share, 2))
        )
    return buckets


def probability_above(distribution: np.ndarray, target: float) -> float:
    """Fraction of trials whose terminal value strictly exceeds ``target``."""
    values = np.asarray(distribution, dtype=np.float64)
    if values.size == 0:
        return 0.0
    return round_half_up(float(np.mean(values > target)), 4)


def run_preset_projections(
    current_value: float,
    time_horizon: int,
    presets: tuple[dict[str, Any], ...] = SCENARIO_PRESETS,
    simulation_count: int = DEFAULT_NUM_SIMULATIONS,
    rng: UniformSource | None = None,
    settings: Settings | None = None,
) -> list[PresetProjection]:
    """Run the simulator once per preset and report each median outcome."""
    if rng is None:
        rng = np.random.default_rng((settings or Settings()).simulation_seed)

    projections: list[PresetProjection] = []
    for preset in presets:
        config = SimulationConfig(
            current_value=current_value,
            expected_return=preset["annual_return"],
            volatility=preset["volatility"],
            time_horizon=time_horizon,
            simulation_count=simulation_count,
        )
        outcome = run_monte_carlo(config, rng, max_workers=1, settings=settings)
        projections.append(
            PresetProjection(
                name=preset["name"],
                annual_return=preset["annual_return"],
                volatility=preset["volatility"],
                projected_value=round_half_up(outcome["confidence_intervals"]["p50"]),
                probability=preset["probability"],
            )
        )
    return projections
