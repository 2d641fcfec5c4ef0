"""Swap transaction building for a selected route."""

from __future__ import annotations

import time
from collections.abc import Callable

import structlog

from aggregator.config import AggregatorConfig
from aggregator.constants import BPS_DENOMINATOR, MAX_SLIPPAGE_BPS
from aggregator.errors import UnsupportedDexError
from aggregator.models.route import DexVersion, SelectedRoute, SwapTransaction
from aggregator.models.types import is_valid_address

from .v2 import encode_swap_exact_tokens_for_tokens
from .v3 import encode_v3_swap

logger = structlog.get_logger()


def amount_out_minimum(amount_out: int, slippage_bps: int) -> int:
    """Minimum acceptable output after slippage, rounded down.

    Integer-only: ``amount_out * (10000 - slippage_bps) // 10000``. Rounding
    towards zero never overstates the minimum.

    Raises:
        ValueError: If slippage is outside [0, MAX_SLIPPAGE_BPS]
    """
    if not 0 <= slippage_bps <= MAX_SLIPPAGE_BPS:
        raise ValueError(f"Slippage must be between 0 and {MAX_SLIPPAGE_BPS} bps: {slippage_bps}")
    return amount_out * (BPS_DENOMINATOR - slippage_bps) // BPS_DENOMINATOR


class SwapEncoder:
    """Encodes router calldata for a route selected by the route selector.

    Args:
        config: Aggregator configuration (protocol table, deadline window)
        clock: Returns the current unix time; injectable for tests
    """

    def __init__(
        self,
        config: AggregatorConfig,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.config = config
        self.clock = clock

    def encode_swap(
        self,
        route: SelectedRoute,
        wallet_address: str,
        slippage_bps: int | None = None,
        amount_in: int | None = None,
    ) -> SwapTransaction:
        """Build the transaction executing ``route`` for ``wallet_address``.

        Args:
            route: Selected quote; must name a configured DEX
            wallet_address: Recipient of the output tokens
            slippage_bps: Allowed slippage in basis points (default from config)
            amount_in: Exact input amount; defaults to the quote's ``amount_in``

        Returns:
            SwapTransaction targeting the protocol's router

        Raises:
            UnsupportedDexError: If the quote's DEX is not configured
            ValueError: If the input amount, tokens, wallet, fee tier or slippage
                is invalid
        """
        dex = self.config.dex(route.dex_id)

        if slippage_bps is None:
            slippage_bps = self.config.default_slippage_bps
        min_out = amount_out_minimum(route.amount_out, slippage_bps)

        amount = route.amount_in if amount_in is None else amount_in
        if amount <= 0:
            raise ValueError("Swap input amount must be positive")
        if route.token_in is None or route.token_out is None:
            raise ValueError("Route has no token pair to encode")
        if not is_valid_address(wallet_address):
            raise ValueError(f"Invalid wallet address: {wallet_address}")
        if dex.is_tiered and route.fee not in dex.fee_tiers:
            raise ValueError(f"Fee tier {route.fee} is not supported by {dex.dex_id}")

        deadline = int(self.clock()) + self.config.deadline_seconds

        if dex.version == DexVersion.V3:
            data = encode_v3_swap(
                token_in=route.token_in,
                token_out=route.token_out,
                fee=route.fee,
                recipient=wallet_address,
                amount_in=amount,
                amount_out_minimum=min_out,
                deadline=deadline,
            )
        elif dex.version == DexVersion.V2:
            data = encode_swap_exact_tokens_for_tokens(
                amount_in=amount,
                amount_out_min=min_out,
                path=[route.token_in, route.token_out],
                recipient=wallet_address,
                deadline=deadline,
            )
        else:
            raise UnsupportedDexError(route.dex_id)

        logger.info(
            "swap_encoded",
            dex_id=route.dex_id,
            router=dex.router,
            amount_in=amount,
            amount_out_min=min_out,
            slippage_bps=slippage_bps,
            deadline=deadline,
        )

        return SwapTransaction(
            to=dex.router,
            data=data,
            value=0,
            gas_estimate=route.gas_estimate,
        )


__all__ = ["SwapEncoder", "amount_out_minimum"]
