"""Risk-adjusted performance attribution.

Pure computation over two aligned periodic return series. No data
access; callers supply the series (oldest first).
"""

import logging

from aether_risk.analysis import stats
from aether_risk.analysis.models import AttributionResult
from aether_risk.analysis.stats import ArrayLike, round_half_up
from aether_risk.exceptions import MismatchedLengthError

logger = logging.getLogger(__name__)

# Library defaults; Settings carries the CLI's copies of these values
TRADING_DAYS_PER_YEAR = 252
DEFAULT_RISK_FREE_RATE_PCT = 6.5


def _empty_result() -> AttributionResult:
    return AttributionResult(
        sharpe_ratio=0.0,
        sortino_ratio=0.0,
        alpha=0.0,
        beta=0.0,
        information_ratio=0.0,
        max_drawdown=0.0,
        calmar_ratio=0.0,
        volatility=0.0,
        returns=0.0,
    )


def _pct(value: float) -> float:
    return round_half_up(value * 10000) / 100


def compute_attribution(
    portfolio_returns: ArrayLike,
    benchmark_returns: ArrayLike,
    risk_free_rate_pct: float = DEFAULT_RISK_FREE_RATE_PCT,
    periods_per_year: int = TRADING_DAYS_PER_YEAR,
) -> AttributionResult:
    """Compute the full risk-adjusted metrics bundle for a portfolio.

    Ratios use population moments of the per-period returns. The annual
    risk-free rate is converted to a per-period rate as
    ``risk_free_rate_pct / 100 / periods_per_year``.

    Args:
        portfolio_returns: Periodic fractional returns (0.01 = 1%).
        benchmark_returns: Benchmark returns aligned period-by-period.
        risk_free_rate_pct: Annual risk-free rate in percent.
        periods_per_year: Annualisation factor (252 for daily data).

    Returns:
        AttributionResult. alpha, max_drawdown, volatility and returns are
        percentages; the other fields are raw ratios. All rounded to 2 dp.
        Empty series produce an all-zero result.

    Raises:
        MismatchedLengthError: if the two series differ in length.
    """
    portfolio = stats.as_returns(portfolio_returns)
    benchmark = stats.as_returns(benchmark_returns)

    if portfolio.size != benchmark.size:
        raise MismatchedLengthError(
            "portfolio_returns", portfolio.size, "benchmark_returns", benchmark.size
        )

    n = portfolio.size
    if n == 0:
        logger.debug("compute_attribution: empty series, returning zero result")
        return _empty_result()

    avg_portfolio = stats.mean(portfolio)
    avg_benchmark = stats.mean(benchmark)
    period_rf = risk_free_rate_pct / 100 / periods_per_year

    volatility = stats.population_std(portfolio)
    excess_return = avg_portfolio - period_rf
    sharpe = excess_return / volatility if volatility > 0 else 0.0

    downside_dev = stats.downside_deviation(portfolio)
    sortino = excess_return / downside_dev if downside_dev > 0 else 0.0

    benchmark_var = stats.population_variance(benchmark)
    if benchmark_var > 0:
        beta = stats.covariance(portfolio, benchmark) / benchmark_var
    else:
        # Constant benchmark: assume market-neutral scale
        beta = 1.0

    alpha = avg_portfolio - (period_rf + beta * (avg_benchmark - period_rf))

    tracking_error = stats.root_mean_square(portfolio - benchmark)
    information_ratio = (
        (avg_portfolio - avg_benchmark) / tracking_error if tracking_error > 0 else 0.0
    )

    mdd = stats.max_drawdown(portfolio)
    annualized_return = avg_portfolio * periods_per_year
    calmar = annualized_return / mdd if mdd > 0 else 0.0

    result = AttributionResult(
        sharpe_ratio=round_half_up(sharpe, 2),
        sortino_ratio=round_half_up(sortino, 2),
        alpha=_pct(alpha),
        beta=round_half_up(beta, 2),
        information_ratio=round_half_up(information_ratio, 2),
        max_drawdown=_pct(mdd),
        calmar_ratio=round_half_up(calmar, 2),
        volatility=_pct(volatility),
        returns=_pct(annualized_return),
    )

    logger.debug(
        "compute_attribution: n=%d sharpe=%.2f beta=%.2f mdd=%.2f%%",
        n, result["sharpe_ratio"], result["beta"], result["max_drawdown"],
    )
    return result
