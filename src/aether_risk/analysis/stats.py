"""Statistics kernel shared by the analytics engines.

Population (ddof=0) moments, downside deviation, compounding and the
floor-index percentile rule. Every function is total: empty input or
zero variance returns 0.0 rather than NaN or an exception.
"""

import math
from typing import Sequence

import numpy as np

ArrayLike = Sequence[float] | np.ndarray


def as_returns(values: ArrayLike) -> np.ndarray:
    """Copy a return sequence into a flat float64 array."""
    return np.array(values, dtype=np.float64).reshape(-1)


def mean(values: ArrayLike) -> float:
    arr = as_returns(values)
    if arr.size == 0:
        return 0.0
    return float(np.mean(arr))


def population_variance(values: ArrayLike) -> float:
    arr = as_returns(values)
    # A constant series is exactly zero-variance; skip float residue from the mean
    if arr.size == 0 or np.all(arr == arr[0]):
        return 0.0
    return float(np.var(arr, ddof=0))


def population_std(values: ArrayLike) -> float:
    return math.sqrt(population_variance(values))


def covariance(left: ArrayLike, right: ArrayLike) -> float:
    """Population covariance of two equal-length series."""
    a = as_returns(left)
    b = as_returns(right)
    if a.size == 0 or a.size != b.size:
        return 0.0
    return float(np.mean((a - a.mean()) * (b - b.mean())))


def root_mean_square(values: ArrayLike) -> float:
    arr = as_returns(values)
    if arr.size == 0:
        return 0.0
    return math.sqrt(float(np.mean(arr**2)))


def downside_deviation(values: ArrayLike, threshold: float = 0.0) -> float:
    """sqrt(mean(r²)) over the observations strictly below ``threshold``.

    The mean is taken over the downside count, not the full length.
    Returns 0.0 when there are no downside observations.
    """
    arr = as_returns(values)
    downside = arr[arr < threshold]
    return root_mean_square(downside)


def cumulative_growth(values: ArrayLike) -> np.ndarray:
    """Compounded value path v_i = prod(1 + r_j, j <= i), starting from 1."""
    arr = as_returns(values)
    if arr.size == 0:
        return arr
    return np.cumprod(1.0 + arr)


def max_drawdown(values: ArrayLike) -> float:
    """Largest peak-to-trough decline of the compounded path, as a fraction >= 0."""
    path = cumulative_growth(values)
    if path.size == 0:
        return 0.0

    # Peak tracking starts at the first compounded value, not at 1.0
    running_peak = np.maximum.accumulate(path)
    with np.errstate(divide="ignore", invalid="ignore"):
        drawdowns = np.where(running_peak > 0, (running_peak - path) / running_peak, 0.0)
    return float(max(drawdowns.max(), 0.0))


def percentile_by_index(sorted_values: ArrayLike, p: float) -> float:
    """Return ``sorted_values[floor(n * p)]`` for an ascending sample.

    No interpolation. ``p`` is clamped so the index stays in range.
    """
    arr = np.asarray(sorted_values, dtype=np.float64)
    n = arr.size
    if n == 0:
        return 0.0
    idx = min(max(int(math.floor(n * p)), 0), n - 1)
    return float(arr[idx])


def round_half_up(value: float, digits: int = 0) -> float | int:
    """Round with ties toward +inf (2.5 -> 3, -2.5 -> -2, 0.125 -> 0.13).

    Returns an int when ``digits`` is 0.
    """
    scale = 10**digits
    rounded = math.floor(value * scale + 0.5)
    if digits == 0:
        return int(rounded)
    return rounded / scale
