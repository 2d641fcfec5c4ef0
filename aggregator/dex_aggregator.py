"""Main aggregator that wires discovery, quoting, selection and encoding.

The DexAggregator class is the entry point for the rest of an application.
Its four operations can be called independently, or composed through
``find_best_swap`` which runs discovery and quote collection concurrently
and then selects a route. ``check_approval`` tells a wallet whether it must
approve the router before sending the encoded swap.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from dataclasses import dataclass, field
from types import TracebackType

import httpx
import structlog

from aggregator.chain.reader import ChainReader, Web3ChainReader
from aggregator.config import AggregatorConfig
from aggregator.discovery import PoolDiscovery
from aggregator.constants import APPROVE_GAS_ESTIMATE
from aggregator.encoding.approve import approval_amount, encode_approve
from aggregator.encoding.encoder import SwapEncoder
from aggregator.models.route import (
    ApprovalCheck,
    ApprovalMode,
    PoolCandidate,
    Quote,
    SelectedRoute,
    SwapTransaction,
)
from aggregator.models.types import normalize_address
from aggregator.quotes.base import QuoteSource
from aggregator.quotes.collector import QuoteCollector
from aggregator.quotes.oneinch import OneInchQuoteSource
from aggregator.quotes.onchain import OnChainV2QuoteSource, OnChainV3QuoteSource
from aggregator.quotes.zerox import ZeroExQuoteSource
from aggregator.routing import selector

logger = structlog.get_logger()


@dataclass
class SwapPlan:
    """Result of a full pipeline run for one token pair and amount."""

    route: SelectedRoute
    quotes: list[Quote] = field(default_factory=list)
    pools: list[PoolCandidate] = field(default_factory=list)


class DexAggregator:
    """Quote aggregation and best-route selection over several DEXes.

    Args:
        config: Aggregator configuration. Defaults to ``AggregatorConfig()``.
        reader: Contract reader. Defaults to a ``Web3ChainReader`` on
                ``config.rpc_url``.
        http_client: Shared HTTP client for aggregator APIs. Created (and
                     owned) by the aggregator when not given.
        sources: Quote sources. Defaults to on-chain V3 and V2, 1inch and 0x.
        encoder: Swap encoder. Defaults to ``SwapEncoder(config)``.
    """

    def __init__(
        self,
        config: AggregatorConfig | None = None,
        reader: ChainReader | None = None,
        http_client: httpx.AsyncClient | None = None,
        sources: Sequence[QuoteSource] | None = None,
        encoder: SwapEncoder | None = None,
    ) -> None:
        self.config = config if config is not None else AggregatorConfig()
        self.reader = reader if reader is not None else Web3ChainReader(self.config)

        self._owns_client = http_client is None
        self.http_client = (
            http_client
            if http_client is not None
            else httpx.AsyncClient(timeout=self.config.request_timeout)
        )

        if sources is None:
            sources = [
                OnChainV3QuoteSource(self.reader, self.config),
                OnChainV2QuoteSource(self.reader, self.config),
                OneInchQuoteSource(self.http_client, self.config),
                ZeroExQuoteSource(self.http_client, self.config),
            ]

        self.discovery = PoolDiscovery(self.reader, self.config)
        self.collector = QuoteCollector(sources)
        self.encoder = encoder if encoder is not None else SwapEncoder(self.config)

    async def discover_pools_directly(self, token_in: str, token_out: str) -> list[PoolCandidate]:
        """Find pools with liquidity for the pair, deepest first."""
        return await self.discovery.discover_pools(token_in, token_out)

    async def get_professional_quotes(
        self, token_in: str, token_out: str, amount_in: int | str
    ) -> list[Quote]:
        """Collect quotes from all sources, best output first.

        Raises:
            ValueError: If ``amount_in`` is not a positive integer
        """
        return await self.collector.collect_quotes(token_in, token_out, _parse_amount(amount_in))

    async def select_best_route(
        self, quotes: Sequence[Quote], pools: Sequence[PoolCandidate]
    ) -> SelectedRoute | None:
        """Select a route using the configured liquidity and impact limits."""
        return selector.select_best_route(
            quotes,
            pools,
            min_liquidity=self.config.min_liquidity,
            max_price_impact=self.config.max_price_impact,
        )

    async def execute_professional_swap(
        self,
        quote: SelectedRoute,
        wallet_address: str,
        slippage_bps: int | None = None,
        amount_in: int | None = None,
    ) -> SwapTransaction:
        """Encode the swap transaction for a selected route.

        Nothing is sent on-chain; the result is meant for a wallet to sign.

        Raises:
            UnsupportedDexError: If the route's DEX cannot be encoded
        """
        return self.encoder.encode_swap(quote, wallet_address, slippage_bps, amount_in)

    async def check_approval(
        self,
        token: str,
        owner: str,
        dex_id: str,
        amount: int | str,
        mode: ApprovalMode = ApprovalMode.EXACT,
    ) -> ApprovalCheck:
        """Check whether ``owner`` must approve the DEX router before swapping.

        Reads the token allowance and balance, and builds an ``approve``
        transaction for the router when the allowance is below ``amount``.

        Args:
            token: Input token of the swap
            owner: Wallet that will sign the swap
            dex_id: DEX whose router will pull the tokens
            amount: Amount the swap will spend, in the smallest unit
            mode: Approve exactly ``amount`` or an unlimited allowance

        Raises:
            UnsupportedDexError: If the DEX is not configured
            ValueError: If the amount or an address is invalid
            QuoteSourceError: If the token reads fail
        """
        dex = self.config.dex(dex_id)
        value = _parse_amount(amount)
        token = normalize_address(token, validate=True)
        owner = normalize_address(owner, validate=True)

        allowance, balance = await asyncio.gather(
            self.reader.get_allowance(token, owner, dex.router),
            self.reader.get_balance(token, owner),
        )

        transaction = None
        if allowance < value:
            transaction = SwapTransaction(
                to=token,
                data=encode_approve(dex.router, approval_amount(value, mode)),
                value=0,
                gas_estimate=APPROVE_GAS_ESTIMATE,
            )

        logger.info(
            "approval_checked",
            token=token,
            dex_id=dex_id,
            allowance=allowance,
            balance=balance,
            amount=value,
            needs_approval=transaction is not None,
        )
        return ApprovalCheck(
            token=token,
            owner=owner,
            spender=dex.router,
            amount=value,
            allowance=allowance,
            balance=balance,
            transaction=transaction,
        )

    async def find_best_swap(
        self, token_in: str, token_out: str, amount_in: int | str
    ) -> SwapPlan | None:
        """Run discovery and quoting concurrently, then select a route.

        Returns:
            The plan, or None when no source could quote the pair
        """
        amount = _parse_amount(amount_in)
        pools, quotes = await asyncio.gather(
            self.discovery.discover_pools(token_in, token_out),
            self.collector.collect_quotes(token_in, token_out, amount),
        )

        route = await self.select_best_route(quotes, pools)
        if route is None:
            logger.info("no_route_found", token_in=token_in, token_out=token_out, amount_in=amount)
            return None

        return SwapPlan(route=route, quotes=quotes, pools=pools)

    async def aclose(self) -> None:
        """Close the HTTP client if this aggregator created it."""
        if self._owns_client:
            await self.http_client.aclose()

    async def __aenter__(self) -> DexAggregator:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()


def _parse_amount(amount: int | str) -> int:
    """Parse a smallest-unit token amount, rejecting non-positive values."""
    try:
        value = int(amount)
    except (TypeError, ValueError) as e:
        raise ValueError(f"Invalid amount: {amount!r}") from e
    if isinstance(amount, bool) or value <= 0:
        raise ValueError(f"Amount must be a positive integer: {amount!r}")
    return value


_default_aggregator: DexAggregator | None = None


def get_default_aggregator() -> DexAggregator:
    """Return the process-wide aggregator, configured from the environment."""
    global _default_aggregator
    if _default_aggregator is None:
        config = AggregatorConfig.from_env()
        logger.info(
            "aggregator_initialized",
            chain_id=config.chain_id,
            dexes=[dex.dex_id for dex in config.dexes],
            rpc_url=config.rpc_url[:50],
        )
        _default_aggregator = DexAggregator(config)
    return _default_aggregator


async def discover_pools_directly(token_in: str, token_out: str) -> list[PoolCandidate]:
    """Module-level shortcut for ``get_default_aggregator().discover_pools_directly``."""
    return await get_default_aggregator().discover_pools_directly(token_in, token_out)


async def get_professional_quotes(
    token_in: str, token_out: str, amount_in: int | str
) -> list[Quote]:
    """Module-level shortcut for ``get_default_aggregator().get_professional_quotes``."""
    return await get_default_aggregator().get_professional_quotes(token_in, token_out, amount_in)


async def select_best_route(
    quotes: Sequence[Quote], pools: Sequence[PoolCandidate]
) -> SelectedRoute | None:
    """Module-level shortcut for ``get_default_aggregator().select_best_route``."""
    return await get_default_aggregator().select_best_route(quotes, pools)


async def execute_professional_swap(
    quote: SelectedRoute,
    wallet_address: str,
    slippage_bps: int | None = None,
    amount_in: int | None = None,
) -> SwapTransaction:
    """Module-level shortcut for ``get_default_aggregator().execute_professional_swap``."""
    return await get_default_aggregator().execute_professional_swap(
        quote, wallet_address, slippage_bps, amount_in
    )


async def check_approval(
    token: str,
    owner: str,
    dex_id: str,
    amount: int | str,
    mode: ApprovalMode = ApprovalMode.EXACT,
) -> ApprovalCheck:
    """Module-level shortcut for ``get_default_aggregator().check_approval``."""
    return await get_default_aggregator().check_approval(token, owner, dex_id, amount, mode)


__all__ = [
    "DexAggregator",
    "SwapPlan",
    "get_default_aggregator",
    "discover_pools_directly",
    "get_professional_quotes",
    "select_best_route",
    "execute_professional_swap",
    "check_approval",
]
