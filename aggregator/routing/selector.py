"""Best-route selection.

Quotes and pools are two independent views of the market, possibly taken
at slightly different times. The selector correlates them on a best-effort
basis (same DEX, same fee tier), keeps quotes backed by enough liquidity and
with an acceptable price impact, and returns the highest output among them.

When nothing passes the filters the first matched quote is returned anyway:
off-chain aggregator quotes never correlate with an on-chain pool, so a
strict filter would reject most executable trades. A returned route is
therefore not a safety guarantee.
"""

from __future__ import annotations

from collections.abc import Sequence

import structlog

from aggregator.constants import MAX_PRICE_IMPACT, MIN_LIQUIDITY
from aggregator.models.route import PoolCandidate, Quote, SelectedRoute

logger = structlog.get_logger()


def find_matching_pool(quote: Quote, pools: Sequence[PoolCandidate]) -> PoolCandidate | None:
    """Find the first pool with the quote's DEX and fee tier."""
    for pool in pools:
        if pool.dex_id == quote.dex_id and pool.fee == quote.fee:
            return pool
    return None


def match_quotes_to_pools(
    quotes: Sequence[Quote], pools: Sequence[PoolCandidate]
) -> list[Quote]:
    """Fill ``pool_address`` and ``liquidity`` of each quote from its pool.

    Quotes without a matching pool in ``pools`` get their pool fields reset
    to empty placeholders, so pool data from an earlier matching never
    survives. The operation is idempotent: matching an already matched quote
    yields the same fields.
    """
    matched = []
    for quote in quotes:
        pool = find_matching_pool(quote, pools)
        if pool is None:
            matched.append(quote.model_copy(update={"pool_address": "", "liquidity": 0}))
            continue
        matched.append(
            quote.model_copy(
                update={"pool_address": pool.pool_address, "liquidity": pool.liquidity}
            )
        )
    return matched


def passes_constraints(
    quote: Quote,
    min_liquidity: int = MIN_LIQUIDITY,
    max_price_impact: float = MAX_PRICE_IMPACT,
) -> bool:
    """Check the liquidity floor and price impact ceiling (both strict)."""
    return quote.liquidity > min_liquidity and quote.price_impact < max_price_impact


def select_best_route(
    quotes: Sequence[Quote],
    pools: Sequence[PoolCandidate],
    min_liquidity: int = MIN_LIQUIDITY,
    max_price_impact: float = MAX_PRICE_IMPACT,
) -> SelectedRoute | None:
    """Pick the best quote given discovered pool liquidity.

    Args:
        quotes: Quotes from the collector
        pools: Pools from discovery
        min_liquidity: Matched liquidity must exceed this value
        max_price_impact: Price impact must be below this percentage

    Returns:
        The quote with the highest ``amount_out`` among those passing the
        constraints, the first matched quote when none passes, or None when
        there are no quotes at all.
    """
    if not quotes:
        return None

    matched = match_quotes_to_pools(quotes, pools)
    eligible = [q for q in matched if passes_constraints(q, min_liquidity, max_price_impact)]

    if eligible:
        best = max(eligible, key=lambda quote: quote.amount_out)
        degraded = False
    else:
        best = matched[0]
        degraded = True

    logger.info(
        "route_selected",
        dex_id=best.dex_id,
        fee=best.fee,
        amount_out=best.amount_out,
        pool=best.pool_address or None,
        eligible=len(eligible),
        candidates=len(matched),
        degraded=degraded,
    )
    return best


__all__ = [
    "find_matching_pool",
    "match_quotes_to_pools",
    "passes_constraints",
    "select_best_route",
]
