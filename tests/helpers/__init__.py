"""Test helpers module for shared test utilities.

- constants: Token, wallet and pool addresses, common amounts
- factories: Quote, pool and config factory functions
- fakes: In-memory chain reader and quote sources (import from tests.helpers.fakes)
"""

from tests.helpers.constants import (
    BASESWAP_PAIR,
    DAI,
    DEAD,
    ONE_WETH,
    POOL_500,
    POOL_3000,
    POOL_10000,
    USDC,
    USDC_2500,
    V2_PAIR,
    WALLET,
    WETH,
)
from tests.helpers.factories import make_config, make_pool, make_quote

__all__ = [
    # Constants
    "WETH",
    "USDC",
    "DAI",
    "DEAD",
    "WALLET",
    "POOL_500",
    "POOL_3000",
    "POOL_10000",
    "V2_PAIR",
    "BASESWAP_PAIR",
    "ONE_WETH",
    "USDC_2500",
    # Factories
    "make_quote",
    "make_pool",
    "make_config",
]
