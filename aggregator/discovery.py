"""Pool discovery through on-chain factory contracts.

For every configured protocol the factory is asked for the pool of the token
pair (once per fee tier for V3 protocols). Pools that do not exist or hold no
liquidity are dropped. Each lookup runs concurrently in its own failure
boundary: one failing RPC call never aborts the others.
"""

from __future__ import annotations

import asyncio

import structlog

from aggregator.chain.reader import ChainReader
from aggregator.config import AggregatorConfig, DexConfig
from aggregator.models.route import PoolCandidate
from aggregator.models.types import is_zero_address

logger = structlog.get_logger()


class PoolDiscovery:
    """Finds liquidity pools for a token pair across configured DEXes.

    Args:
        reader: Contract reader used for factory and pool calls
        config: Aggregator configuration holding the protocol table
    """

    def __init__(self, reader: ChainReader, config: AggregatorConfig) -> None:
        self.reader = reader
        self.config = config

    async def discover_pools(self, token_in: str, token_out: str) -> list[PoolCandidate]:
        """Find all pools with liquidity for (token_in, token_out).

        Addresses are not validated here; malformed addresses surface as
        per-lookup failures and are logged like any other RPC error.

        Returns:
            Pool candidates sorted by liquidity, deepest first. Empty when no
            configured protocol has a pool for the pair.
        """
        lookups = []
        for dex in self.config.tiered_dexes:
            for fee in dex.fee_tiers:
                lookups.append(self._probe_v3_pool(dex, token_in, token_out, fee))
        for dex in self.config.untiered_dexes:
            lookups.append(self._probe_v2_pair(dex, token_in, token_out))

        results = await asyncio.gather(*lookups)
        pools = [pool for pool in results if pool is not None]
        pools.sort(key=lambda pool: pool.liquidity, reverse=True)

        logger.info(
            "pools_discovered",
            token_in=token_in,
            token_out=token_out,
            lookups=len(lookups),
            pool_count=len(pools),
        )
        return pools

    async def _probe_v3_pool(
        self, dex: DexConfig, token_in: str, token_out: str, fee: int
    ) -> PoolCandidate | None:
        """Look up one V3 fee tier. Returns None when absent, empty or failed."""
        try:
            pool_address = await self.reader.get_pool(dex.factory, token_in, token_out, fee)
            if is_zero_address(pool_address):
                return None

            liquidity = await self.reader.get_liquidity(pool_address)
            if liquidity <= 0:
                logger.debug("pool_without_liquidity", dex_id=dex.dex_id, pool=pool_address)
                return None

            return PoolCandidate(
                dex_id=dex.dex_id,
                pool_address=pool_address,
                fee=fee,
                liquidity=liquidity,
                version=dex.version,
            )
        except Exception as e:
            logger.warning(
                "pool_lookup_failed",
                dex_id=dex.dex_id,
                fee=fee,
                token_in=token_in,
                token_out=token_out,
                error=str(e),
            )
            return None

    async def _probe_v2_pair(
        self, dex: DexConfig, token_in: str, token_out: str
    ) -> PoolCandidate | None:
        """Look up a V2 pair; its liquidity is the sum of both reserves."""
        try:
            pair_address = await self.reader.get_pair(dex.factory, token_in, token_out)
            if is_zero_address(pair_address):
                return None

            reserve0, reserve1 = await self.reader.get_reserves(pair_address)
            liquidity = reserve0 + reserve1
            if reserve0 <= 0 or reserve1 <= 0:
                logger.debug("pool_without_liquidity", dex_id=dex.dex_id, pool=pair_address)
                return None

            return PoolCandidate(
                dex_id=dex.dex_id,
                pool_address=pair_address,
                fee=0,
                liquidity=liquidity,
                version=dex.version,
            )
        except Exception as e:
            logger.warning(
                "pool_lookup_failed",
                dex_id=dex.dex_id,
                fee=0,
                token_in=token_in,
                token_out=token_out,
                error=str(e),
            )
            return None


__all__ = ["PoolDiscovery"]
