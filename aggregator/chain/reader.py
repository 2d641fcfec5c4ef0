"""Read-only contract access over JSON-RPC.

``ChainReader`` is the seam between the aggregator and the blockchain: the
pipeline only needs a handful of ``eth_call`` reads, and tests substitute an
in-memory implementation.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any, Protocol, TypeVar

import structlog
from web3 import AsyncWeb3, Web3
from web3.exceptions import BadFunctionCallOutput, ContractLogicError

from aggregator.config import AggregatorConfig
from aggregator.errors import ContractRevertError, RpcError
from aggregator.models.types import normalize_address
from aggregator.retry import with_retry

from .abi import (
    ERC20_ABI,
    QUOTER_V2_ABI,
    V2_FACTORY_ABI,
    V2_PAIR_ABI,
    V2_ROUTER_ABI,
    V3_FACTORY_ABI,
    V3_POOL_ABI,
)

logger = structlog.get_logger()

T = TypeVar("T")


class ChainReader(Protocol):
    """Protocol for the contract reads used by discovery and quoting.

    This allows swapping between the real RPC-based reader and an in-memory
    one for testing.
    """

    async def get_pool(self, factory: str, token_a: str, token_b: str, fee: int) -> str:
        """V3 factory ``getPool``; returns the zero address when no pool exists."""
        ...

    async def get_pair(self, factory: str, token_a: str, token_b: str) -> str:
        """V2 factory ``getPair``; returns the zero address when no pair exists."""
        ...

    async def get_liquidity(self, pool: str) -> int:
        """V3 pool in-range ``liquidity``."""
        ...

    async def get_reserves(self, pair: str) -> tuple[int, int]:
        """V2 pair ``getReserves`` as (reserve0, reserve1)."""
        ...

    async def quote_exact_input_single(
        self,
        quoter: str,
        token_in: str,
        token_out: str,
        fee: int,
        amount_in: int,
    ) -> tuple[int, int]:
        """QuoterV2 ``quoteExactInputSingle`` as (amount_out, gas_estimate)."""
        ...

    async def get_amounts_out(self, router: str, amount_in: int, path: list[str]) -> list[int]:
        """V2 router ``getAmountsOut`` along ``path``."""
        ...

    async def get_allowance(self, token: str, owner: str, spender: str) -> int:
        """ERC-20 ``allowance`` granted by ``owner`` to ``spender``."""
        ...

    async def get_balance(self, token: str, owner: str) -> int:
        """ERC-20 ``balanceOf`` for ``owner``."""
        ...


class Web3ChainReader:
    """ChainReader backed by an ``AsyncWeb3`` HTTP provider.

    Every read is bounded by ``config.request_timeout`` and retried according
    to ``config.retry`` when the failure is transient. Reverts are reported
    as ``ContractRevertError`` and never retried.
    """

    def __init__(self, config: AggregatorConfig, w3: AsyncWeb3 | None = None) -> None:
        """Initialize the reader.

        Args:
            config: Aggregator configuration (RPC URL, timeout, retry policy)
            w3: Pre-built AsyncWeb3 instance, e.g. to share a provider
        """
        self.config = config
        self.w3 = w3 if w3 is not None else AsyncWeb3(AsyncWeb3.AsyncHTTPProvider(config.rpc_url))

    def _contract(self, address: str, abi: list[dict[str, Any]]) -> Any:
        return self.w3.eth.contract(address=Web3.to_checksum_address(address), abi=abi)

    async def _call(self, method: str, fn: Callable[[], Awaitable[T]]) -> T:
        """Run one contract read with timeout, retry and error translation."""

        async def attempt() -> T:
            try:
                return await fn()
            except (ContractLogicError, BadFunctionCallOutput) as e:
                raise ContractRevertError(f"{method} reverted: {e}", source="rpc") from e
            except (ValueError, TypeError, TimeoutError):
                raise
            except Exception as e:
                raise RpcError(f"{method} failed: {e}", source="rpc") from e

        return await with_retry(
            attempt,
            retry=self.config.retry,
            timeout=self.config.request_timeout,
            source=f"rpc:{method}",
        )

    async def get_pool(self, factory: str, token_a: str, token_b: str, fee: int) -> str:
        contract = self._contract(factory, V3_FACTORY_ABI)
        call = contract.functions.getPool(
            Web3.to_checksum_address(token_a), Web3.to_checksum_address(token_b), fee
        ).call
        return normalize_address(await self._call("getPool", call))

    async def get_pair(self, factory: str, token_a: str, token_b: str) -> str:
        contract = self._contract(factory, V2_FACTORY_ABI)
        call = contract.functions.getPair(
            Web3.to_checksum_address(token_a), Web3.to_checksum_address(token_b)
        ).call
        return normalize_address(await self._call("getPair", call))

    async def get_liquidity(self, pool: str) -> int:
        contract = self._contract(pool, V3_POOL_ABI)
        return int(await self._call("liquidity", contract.functions.liquidity().call))

    async def get_reserves(self, pair: str) -> tuple[int, int]:
        contract = self._contract(pair, V2_PAIR_ABI)
        reserve0, reserve1, _ = await self._call(
            "getReserves", contract.functions.getReserves().call
        )
        return int(reserve0), int(reserve1)

    async def quote_exact_input_single(
        self,
        quoter: str,
        token_in: str,
        token_out: str,
        fee: int,
        amount_in: int,
    ) -> tuple[int, int]:
        contract = self._contract(quoter, QUOTER_V2_ABI)
        call = contract.functions.quoteExactInputSingle(
            (
                Web3.to_checksum_address(token_in),
                Web3.to_checksum_address(token_out),
                amount_in,
                fee,
                0,  # sqrtPriceLimitX96 = 0 means no limit
            )
        ).call
        # Result is (amountOut, sqrtPriceX96After, initializedTicksCrossed, gasEstimate)
        result = await self._call("quoteExactInputSingle", call)
        return int(result[0]), int(result[3])

    async def get_amounts_out(self, router: str, amount_in: int, path: list[str]) -> list[int]:
        contract = self._contract(router, V2_ROUTER_ABI)
        call = contract.functions.getAmountsOut(
            amount_in, [Web3.to_checksum_address(token) for token in path]
        ).call
        return [int(amount) for amount in await self._call("getAmountsOut", call)]

    async def get_allowance(self, token: str, owner: str, spender: str) -> int:
        contract = self._contract(token, ERC20_ABI)
        call = contract.functions.allowance(
            Web3.to_checksum_address(owner), Web3.to_checksum_address(spender)
        ).call
        return int(await self._call("allowance", call))

    async def get_balance(self, token: str, owner: str) -> int:
        contract = self._contract(token, ERC20_ABI)
        call = contract.functions.balanceOf(Web3.to_checksum_address(owner)).call
        return int(await self._call("balanceOf", call))


__all__ = ["ChainReader", "Web3ChainReader"]
