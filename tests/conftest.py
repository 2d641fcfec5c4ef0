"""Pytest configuration and shared fixtures."""

import pytest

from aggregator.config import UNISWAP_V2, UNISWAP_V3, AggregatorConfig
from aggregator.models.route import Quote
from tests.helpers import (
    BASESWAP_PAIR,
    POOL_500,
    POOL_3000,
    V2_PAIR,
    make_config,
    make_quote,
)
from tests.helpers.fakes import FakeChainReader

# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def config() -> AggregatorConfig:
    """Default protocol table with retries disabled."""
    return make_config()


@pytest.fixture
def reader() -> FakeChainReader:
    """Empty fake reader: every lookup finds nothing."""
    return FakeChainReader()


@pytest.fixture
def populated_reader(config: AggregatorConfig) -> FakeChainReader:
    """Fake reader with a WETH/USDC market on every default DEX.

    - Uniswap V3: 0.05% and 0.3% pools, the 0.05% tier is deeper
    - Uniswap V2 and BaseSwap: one pair each
    """
    baseswap = config.dex("baseswap")
    reader = FakeChainReader()

    reader.v3_pools[(UNISWAP_V3.factory, 500)] = POOL_500
    reader.v3_pools[(UNISWAP_V3.factory, 3000)] = POOL_3000
    reader.liquidity[POOL_500] = 5 * 10**18
    reader.liquidity[POOL_3000] = 10**18

    reader.v2_pairs[UNISWAP_V2.factory] = V2_PAIR
    reader.reserves[V2_PAIR] = (10**17, 2 * 10**17)
    reader.v2_pairs[baseswap.factory] = BASESWAP_PAIR
    reader.reserves[BASESWAP_PAIR] = (10**15, 10**15)

    assert UNISWAP_V3.quoter is not None
    reader.v3_quotes[(UNISWAP_V3.quoter, 500)] = (2_501_000_000, 110_000)
    reader.v3_quotes[(UNISWAP_V3.quoter, 3000)] = (2_495_000_000, 115_000)
    reader.v2_amounts[UNISWAP_V2.router] = [10**18, 2_490_000_000]
    reader.v2_amounts[baseswap.router] = [10**18, 2_480_000_000]
    return reader


@pytest.fixture
def oneinch_quote() -> Quote:
    """An off-chain quote that beats every on-chain quote."""
    return make_quote(dex_id="1inch", amount_out=2_510_000_000, fee=0, route=["UNISWAP_V3"])
