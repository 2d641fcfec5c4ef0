"""In-memory fakes for the chain reader and quote sources.

Usage:
    from tests.helpers.fakes import FakeChainReader, StaticQuoteSource
"""

from dataclasses import dataclass, field

from aggregator.errors import ContractRevertError, RpcError, SourceUnavailableError
from aggregator.models.route import Quote
from aggregator.models.types import ZERO_ADDRESS

# =============================================================================
# Fake chain reader
# =============================================================================


@dataclass
class FakeChainReader:
    """In-memory ChainReader for testing.

    Pools are keyed by (factory, fee), pairs by factory, quoter results by
    (quoter, fee) and router results by router. Token arguments are ignored
    for pool and quote lookups: every test works with a single pair. Token
    allowances are keyed by (token, owner, spender) and balances by
    (token, owner); both default to 0.

    Usage:
        reader = FakeChainReader()
        reader.v3_pools[(UNISWAP_V3.factory, 500)] = POOL_500
        reader.liquidity[POOL_500] = 10**18
        pools = await PoolDiscovery(reader, config).discover_pools(WETH, USDC)

    Any address listed in ``failing`` raises RpcError when it is called or
    looked up, which lets tests inject partial failures.
    """

    v3_pools: dict[tuple[str, int], str] = field(default_factory=dict)
    liquidity: dict[str, int] = field(default_factory=dict)
    v2_pairs: dict[str, str] = field(default_factory=dict)
    reserves: dict[str, tuple[int, int]] = field(default_factory=dict)
    v3_quotes: dict[tuple[str, int], tuple[int, int]] = field(default_factory=dict)
    v2_amounts: dict[str, list[int]] = field(default_factory=dict)
    allowances: dict[tuple[str, str, str], int] = field(default_factory=dict)
    balances: dict[tuple[str, str], int] = field(default_factory=dict)
    failing: set[str] = field(default_factory=set)
    failing_fees: set[int] = field(default_factory=set)
    calls: list[tuple] = field(default_factory=list)

    def _check(self, address: str, fee: int | None = None) -> None:
        if address in self.failing or (fee is not None and fee in self.failing_fees):
            raise RpcError(f"connection reset calling {address}", source="rpc")

    async def get_pool(self, factory: str, token_a: str, token_b: str, fee: int) -> str:
        self.calls.append(("get_pool", factory, fee))
        self._check(factory, fee)
        return self.v3_pools.get((factory, fee), ZERO_ADDRESS)

    async def get_pair(self, factory: str, token_a: str, token_b: str) -> str:
        self.calls.append(("get_pair", factory))
        self._check(factory)
        return self.v2_pairs.get(factory, ZERO_ADDRESS)

    async def get_liquidity(self, pool: str) -> int:
        self.calls.append(("get_liquidity", pool))
        self._check(pool)
        return self.liquidity.get(pool, 0)

    async def get_reserves(self, pair: str) -> tuple[int, int]:
        self.calls.append(("get_reserves", pair))
        self._check(pair)
        return self.reserves.get(pair, (0, 0))

    async def quote_exact_input_single(
        self,
        quoter: str,
        token_in: str,
        token_out: str,
        fee: int,
        amount_in: int,
    ) -> tuple[int, int]:
        self.calls.append(("quote_exact_input_single", quoter, fee, amount_in))
        self._check(quoter, fee)
        if (quoter, fee) not in self.v3_quotes:
            raise ContractRevertError("quoteExactInputSingle reverted", source="rpc")
        return self.v3_quotes[(quoter, fee)]

    async def get_amounts_out(self, router: str, amount_in: int, path: list[str]) -> list[int]:
        self.calls.append(("get_amounts_out", router, amount_in, tuple(path)))
        self._check(router)
        if router not in self.v2_amounts:
            raise ContractRevertError("getAmountsOut reverted", source="rpc")
        return self.v2_amounts[router]

    async def get_allowance(self, token: str, owner: str, spender: str) -> int:
        self.calls.append(("get_allowance", token, owner, spender))
        self._check(token)
        return self.allowances.get((token, owner, spender), 0)

    async def get_balance(self, token: str, owner: str) -> int:
        self.calls.append(("get_balance", token, owner))
        self._check(token)
        return self.balances.get((token, owner), 0)


# =============================================================================
# Fake quote sources
# =============================================================================


class StaticQuoteSource:
    """Quote source returning a fixed list of quotes.

    Usage:
        source = StaticQuoteSource("1inch", [make_quote(dex_id="1inch")])
    """

    def __init__(self, name: str, quotes: list[Quote]) -> None:
        self.name = name
        self.quotes = quotes
        self.calls: list[tuple[str, str, int]] = []

    async def fetch_quotes(self, token_in: str, token_out: str, amount_in: int) -> list[Quote]:
        self.calls.append((token_in, token_out, amount_in))
        return list(self.quotes)


class FailingQuoteSource:
    """Quote source that always raises the given error."""

    def __init__(self, name: str, error: BaseException | None = None) -> None:
        self.name = name
        self.error = error or SourceUnavailableError(f"{name} is down", source=name)
        self.calls = 0

    async def fetch_quotes(self, token_in: str, token_out: str, amount_in: int) -> list[Quote]:
        self.calls += 1
        raise self.error
