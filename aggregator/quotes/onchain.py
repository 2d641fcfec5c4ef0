"""On-chain quote sources: V3 quoter contracts and V2 routers."""

from __future__ import annotations

import asyncio

import structlog

from aggregator.chain.reader import ChainReader
from aggregator.config import AggregatorConfig, DexConfig
from aggregator.constants import DEFAULT_GAS_ESTIMATE
from aggregator.models.route import Confidence, Quote

logger = structlog.get_logger()


class OnChainV3QuoteSource:
    """Quotes every fee tier of every V3 protocol through its QuoterV2.

    A tier that reverts (no pool, no liquidity) simply contributes nothing.
    ``pool_address`` and ``liquidity`` are left empty for the route selector
    to fill in from discovered pools.
    """

    name = "onchain_v3"

    def __init__(self, reader: ChainReader, config: AggregatorConfig) -> None:
        self.reader = reader
        self.config = config

    async def fetch_quotes(self, token_in: str, token_out: str, amount_in: int) -> list[Quote]:
        calls = [
            self._quote_tier(dex, fee, token_in, token_out, amount_in)
            for dex in self.config.tiered_dexes
            for fee in dex.fee_tiers
        ]
        results = await asyncio.gather(*calls)
        return [quote for quote in results if quote is not None]

    async def _quote_tier(
        self,
        dex: DexConfig,
        fee: int,
        token_in: str,
        token_out: str,
        amount_in: int,
    ) -> Quote | None:
        assert dex.quoter is not None  # enforced by AggregatorConfig
        try:
            amount_out, gas_estimate = await self.reader.quote_exact_input_single(
                dex.quoter, token_in, token_out, fee, amount_in
            )
        except Exception as e:
            # Most failures here are reverts for tiers without a pool
            logger.debug("v3_tier_quote_failed", dex_id=dex.dex_id, fee=fee, error=str(e))
            return None

        if amount_out <= 0:
            return None

        return Quote(
            dex_id=dex.dex_id,
            amount_out=amount_out,
            gas_estimate=gas_estimate,
            price_impact=0.0,
            route=[dex.name],
            fee=fee,
            confidence=Confidence.HIGH,
            token_in=token_in,
            token_out=token_out,
            amount_in=amount_in,
        )


class OnChainV2QuoteSource:
    """Quotes V2 protocols through the router's ``getAmountsOut``.

    V2 routers do not report gas or price impact, so these quotes carry a
    default gas estimate and medium confidence.
    """

    name = "onchain_v2"

    def __init__(self, reader: ChainReader, config: AggregatorConfig) -> None:
        self.reader = reader
        self.config = config

    async def fetch_quotes(self, token_in: str, token_out: str, amount_in: int) -> list[Quote]:
        calls = [
            self._quote_router(dex, token_in, token_out, amount_in)
            for dex in self.config.untiered_dexes
        ]
        results = await asyncio.gather(*calls)
        return [quote for quote in results if quote is not None]

    async def _quote_router(
        self, dex: DexConfig, token_in: str, token_out: str, amount_in: int
    ) -> Quote | None:
        try:
            amounts = await self.reader.get_amounts_out(
                dex.router, amount_in, [token_in, token_out]
            )
        except Exception as e:
            logger.debug("v2_router_quote_failed", dex_id=dex.dex_id, error=str(e))
            return None

        if not amounts or amounts[-1] <= 0:
            return None

        return Quote(
            dex_id=dex.dex_id,
            amount_out=amounts[-1],
            gas_estimate=DEFAULT_GAS_ESTIMATE,
            price_impact=0.0,
            route=[dex.name],
            fee=0,
            confidence=Confidence.MEDIUM,
            token_in=token_in,
            token_out=token_out,
            amount_in=amount_in,
        )


__all__ = ["OnChainV3QuoteSource", "OnChainV2QuoteSource"]
