import json
import logging

import click
import numpy as np

from aether_risk.config import Settings
from aether_risk.logging_config import setup_logging

logger = logging.getLogger(__name__)


def _echo_json(payload) -> None:
    click.echo(json.dumps(payload, indent=2, ensure_ascii=False))


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
def cli(verbose: bool):
    """Aether Risk - portfolio risk & scenario analytics"""
    setup_logging()
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)


@cli.command()
@click.argument("csv_path", type=click.Path(exists=True, dir_okay=False))
@click.option("--portfolio-col", default="portfolio", show_default=True,
              help="Column holding portfolio returns")
@click.option("--benchmark-col", default="benchmark", show_default=True,
              help="Column holding benchmark returns")
@click.option("--risk-free", "risk_free", type=float, default=None,
              help="Annual risk-free rate in percent (default: settings)")
def attribution(csv_path: str, portfolio_col: str, benchmark_col: str, risk_free: float | None):
    """Risk-adjusted metrics from a CSV of aligned periodic returns."""
    import pandas as pd

    from aether_risk.analysis.attribution import compute_attribution

    settings = Settings()
    frame = pd.read_csv(csv_path)
    missing = [c for c in (portfolio_col, benchmark_col) if c not in frame.columns]
    if missing:
        raise click.BadParameter(f"Missing column(s): {', '.join(missing)}")

    frame = frame[[portfolio_col, benchmark_col]].dropna()
    result = compute_attribution(
        frame[portfolio_col].to_numpy(dtype=float),
        frame[benchmark_col].to_numpy(dtype=float),
        risk_free_rate_pct=settings.risk_free_rate_pct if risk_free is None else risk_free,
        periods_per_year=settings.trading_days_per_year,
    )
    _echo_json(result)


@cli.command()
@click.option("--value", "current_value", type=float, required=True,
              help="Current portfolio value")
@click.option("--expected-return", type=float, default=0.12, show_default=True,
              help="Annual expected return (decimal)")
@click.option("--volatility", type=float, default=0.15, show_default=True,
              help="Annual volatility (decimal)")
@click.option("--years", "time_horizon", type=int, default=5, show_default=True,
              help="Horizon in years")
@click.option("--count", "simulation_count", type=int, default=None,
              help="Number of trials (default: settings)")
@click.option("--seed", type=int, default=None, help="Random seed for reproducible runs")
@click.option("--workers", type=int, default=None,
              help="Process workers for large runs (default: settings)")
def simulate(current_value: float, expected_return: float, volatility: float,
             time_horizon: int, simulation_count: int | None, seed: int | None,
             workers: int | None):
    """Monte Carlo projection of portfolio value."""
    from pydantic import ValidationError as ConfigError

    from aether_risk.analysis.models import SimulationConfig
    from aether_risk.analysis.simulation import run_monte_carlo

    settings = Settings()
    try:
        config = SimulationConfig(
            current_value=current_value,
            expected_return=expected_return,
            volatility=volatility,
            time_horizon=time_horizon,
            simulation_count=(
                settings.simulation_count if simulation_count is None else simulation_count
            ),
        )
    except ConfigError as e:
        raise click.BadParameter(str(e))

    rng = np.random.default_rng(seed if seed is not None else settings.simulation_seed)
    outcome = run_monte_carlo(config, rng, max_workers=workers, settings=settings)
    _echo_json({
        "confidence_intervals": outcome["confidence_intervals"],
        "scenarios": outcome["scenarios"],
        "simulation_count": int(outcome["distribution"].size),
    })


@cli.command()
@click.option("--value", "current_value", type=float, required=True,
              help="Current portfolio value")
@click.option("--stocks", type=float, default=0.0, show_default=True)
@click.option("--bonds", type=float, default=0.0, show_default=True)
@click.option("--gold", type=float, default=0.0, show_default=True)
@click.option("--cash", type=float, default=0.0, show_default=True)
@click.option("--alternatives", type=float, default=0.0, show_default=True)
def stress(current_value: float, stocks: float, bonds: float, gold: float,
           cash: float, alternatives: float):
    """Apply the default historical shock library to an allocation."""
    from aether_risk.analysis.stress import run_stress_tests

    allocation = {
        "stocks": stocks,
        "bonds": bonds,
        "gold": gold,
        "cash": cash,
        "alternatives": alternatives,
    }
    _echo_json(run_stress_tests(current_value, allocation))


@cli.command()
def factors():
    """Show the (placeholder) factor decomposition."""
    from aether_risk.analysis.factors import decompose_factors

    click.echo("Note: static illustrative split, not a regression.", err=True)
    _echo_json(decompose_factors([], {}))


if __name__ == "__main__":
    cli()
