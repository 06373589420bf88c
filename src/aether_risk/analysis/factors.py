"""Factor decomposition of portfolio returns.

Placeholder: returns a fixed illustrative split regardless of input. The
signature anticipates a multi-factor regression on market, size, value
and momentum returns; no regression is performed here.
"""

import logging
from typing import Mapping

from aether_risk.analysis.models import FactorAttribution
from aether_risk.analysis.stats import ArrayLike

logger = logging.getLogger(__name__)

FACTOR_MODEL_IS_PLACEHOLDER = True

FACTOR_NAMES = ("market", "size", "value", "momentum")

_STATIC_DECOMPOSITION = (
    ("Market Beta", 65, "Exposure to overall market movements"),
    ("Size Factor", 10, "Small-cap vs large-cap exposure"),
    ("Value Factor", 15, "Value vs growth stock exposure"),
    ("Momentum Factor", 5, "Trending stocks exposure"),
    ("Alpha (Stock Selection)", 5, "Manager skill / stock picking"),
)


def decompose_factors(
    portfolio_returns: ArrayLike,
    factor_returns: Mapping[str, ArrayLike],
) -> list[FactorAttribution]:
    """Attribute portfolio returns to market, size, value and momentum.

    Not statistically derived: the contributions are fixed percentages
    and both arguments are ignored. See FACTOR_MODEL_IS_PLACEHOLDER.
    """
    logger.debug(
        "decompose_factors: static placeholder decomposition (%d returns, factors=%s)",
        len(portfolio_returns), sorted(factor_returns),
    )
    return [
        FactorAttribution(factor=factor, contribution=contribution, description=description)
        for factor, contribution, description in _STATIC_DECOMPOSITION
    ]
