"""Gaussian sampling via the Box-Muller transform.

The uniform source is injected so tests can pin exact draws. Any object
with a numpy-style ``random(size)`` method works; production code passes
a ``numpy.random.Generator``.
"""

import logging
from typing import Protocol

import numpy as np

logger = logging.getLogger(__name__)

TWO_PI = 2.0 * np.pi


class UniformSource(Protocol):
    def random(self, size=None): ...


def box_muller(u1: np.ndarray, u2: np.ndarray) -> np.ndarray:
    """Standard normal draws from two independent uniform(0, 1] arrays.

    z = sqrt(-2 ln u1) * cos(2 pi u2)
    """
    return np.sqrt(-2.0 * np.log(u1)) * np.cos(TWO_PI * u2)


class BoxMullerSampler:
    """Draw N(mean, std) samples from an injected uniform source."""

    def __init__(self, rng: UniformSource | None = None):
        self.rng = rng if rng is not None else np.random.default_rng()

    def _uniform(self, size) -> np.ndarray:
        # Generator.random() is on [0, 1); flip it so ln(u1) stays finite.
        return 1.0 - np.asarray(self.rng.random(size), dtype=np.float64)

    def standard_normal(self, size) -> np.ndarray:
        u1 = self._uniform(size)
        u2 = self._uniform(size)
        return box_muller(u1, u2)

    def normal(self, mean: float, std: float, size) -> np.ndarray:
        return mean + self.standard_normal(size) * std
