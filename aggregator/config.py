"""Aggregator configuration.

Components never read module-level state: a frozen ``AggregatorConfig`` is
built once (``AggregatorConfig.from_env()`` or by hand in tests) and passed
into every component at construction time.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from aggregator.constants import (
    BASE_CHAIN_ID,
    BASESWAP_FACTORY,
    BASESWAP_ROUTER,
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_RPC_URL,
    DEFAULT_SLIPPAGE_BPS,
    MAX_PRICE_IMPACT,
    MIN_LIQUIDITY,
    ONEINCH_API_URL,
    SWAP_DEADLINE_SECONDS,
    UNISWAP_V2_FACTORY,
    UNISWAP_V2_ROUTER_02,
    UNISWAP_V3_FACTORY,
    UNISWAP_V3_QUOTER_V2,
    UNISWAP_V3_SWAP_ROUTER_02,
    V3_FEE_TIERS,
    ZEROX_API_URL,
)
from aggregator.errors import UnsupportedDexError
from aggregator.models.route import DexVersion


@dataclass(frozen=True)
class DexConfig:
    """Contract addresses and parameters of one DEX protocol.

    Attributes:
        dex_id: Identifier used in quotes and pools (e.g. "uniswap_v3")
        version: Protocol generation, decides discovery/quoting/encoding
        factory: Factory contract used to look up pools
        router: Router contract that executes swaps
        quoter: Quoter contract (V3 only)
        fee_tiers: Fee tiers to probe (V3 only)
        display_name: Human-readable name used in quote routes
    """

    dex_id: str
    version: DexVersion
    factory: str
    router: str
    quoter: str | None = None
    fee_tiers: tuple[int, ...] = ()
    display_name: str = ""

    @property
    def is_tiered(self) -> bool:
        """Check if pools of this protocol are keyed by fee tier."""
        return self.version == DexVersion.V3

    @property
    def name(self) -> str:
        return self.display_name or self.dex_id


@dataclass(frozen=True)
class RetryConfig:
    """Bounded retry policy for transient RPC/HTTP failures.

    Attributes:
        max_attempts: Total attempts including the first (1 disables retries)
        base_delay: Delay before the first retry, doubled on each attempt
        max_delay: Upper bound for a single delay
    """

    max_attempts: int = 3
    base_delay: float = 0.25
    max_delay: float = 2.0

    def delay_for(self, attempt: int) -> float:
        """Backoff delay after the given (0-based) failed attempt."""
        return float(min(self.base_delay * (2**attempt), self.max_delay))


UNISWAP_V3 = DexConfig(
    dex_id="uniswap_v3",
    version=DexVersion.V3,
    factory=UNISWAP_V3_FACTORY,
    router=UNISWAP_V3_SWAP_ROUTER_02,
    quoter=UNISWAP_V3_QUOTER_V2,
    fee_tiers=V3_FEE_TIERS,
    display_name="Uniswap V3",
)

UNISWAP_V2 = DexConfig(
    dex_id="uniswap_v2",
    version=DexVersion.V2,
    factory=UNISWAP_V2_FACTORY,
    router=UNISWAP_V2_ROUTER_02,
    display_name="Uniswap V2",
)

BASESWAP = DexConfig(
    dex_id="baseswap",
    version=DexVersion.V2,
    factory=BASESWAP_FACTORY,
    router=BASESWAP_ROUTER,
    display_name="BaseSwap",
)

DEFAULT_DEXES = (UNISWAP_V3, UNISWAP_V2, BASESWAP)


@dataclass(frozen=True)
class AggregatorConfig:
    """Centralized configuration for the quote aggregation pipeline.

    Attributes:
        chain_id: EVM chain id used by the off-chain aggregator APIs
        rpc_url: JSON-RPC endpoint for contract reads
        dexes: Configured DEX protocols
        oneinch_base_url: 1inch API base URL
        oneinch_api_key: Bearer token for 1inch
        zerox_base_url: 0x API base URL
        zerox_api_key: API key for 0x
        request_timeout: Timeout in seconds for a single external call
        retry: Retry policy for transient failures
        min_liquidity: Quotes must be backed by more liquidity than this
        max_price_impact: Quotes must have a lower price impact (percent)
        deadline_seconds: Validity window of encoded swaps
        default_slippage_bps: Slippage used when the caller gives none
    """

    chain_id: int = BASE_CHAIN_ID
    rpc_url: str = DEFAULT_RPC_URL
    dexes: tuple[DexConfig, ...] = DEFAULT_DEXES
    oneinch_base_url: str = ONEINCH_API_URL
    oneinch_api_key: str = ""
    zerox_base_url: str = ZEROX_API_URL
    zerox_api_key: str = ""
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    retry: RetryConfig = field(default_factory=RetryConfig)
    min_liquidity: int = MIN_LIQUIDITY
    max_price_impact: float = MAX_PRICE_IMPACT
    deadline_seconds: int = SWAP_DEADLINE_SECONDS
    default_slippage_bps: int = DEFAULT_SLIPPAGE_BPS

    def __post_init__(self) -> None:
        ids = [dex.dex_id for dex in self.dexes]
        if len(ids) != len(set(ids)):
            raise ValueError(f"Duplicate dex_id in configuration: {ids}")
        for dex in self.dexes:
            if dex.is_tiered and dex.quoter is None:
                raise ValueError(f"{dex.dex_id}: V3 protocols need a quoter address")

    def dex(self, dex_id: str) -> DexConfig:
        """Look up a configured protocol.

        Raises:
            UnsupportedDexError: If no protocol with this id is configured
        """
        for dex in self.dexes:
            if dex.dex_id == dex_id:
                return dex
        raise UnsupportedDexError(dex_id)

    @property
    def tiered_dexes(self) -> tuple[DexConfig, ...]:
        return tuple(dex for dex in self.dexes if dex.is_tiered)

    @property
    def untiered_dexes(self) -> tuple[DexConfig, ...]:
        return tuple(dex for dex in self.dexes if not dex.is_tiered)

    @classmethod
    def from_env(cls) -> AggregatorConfig:
        """Build a configuration from environment variables.

        - AGGREGATOR_RPC_URL: JSON-RPC endpoint (default: public Base RPC)
        - AGGREGATOR_CHAIN_ID: Chain id (default: 8453)
        - ONEINCH_API_KEY / ZEROX_API_KEY: Aggregator API credentials
        - AGGREGATOR_REQUEST_TIMEOUT: Per-call timeout in seconds (default: 8)
        - AGGREGATOR_MAX_RETRIES: Attempts per call (default: 3)
        """
        return cls(
            chain_id=int(os.environ.get("AGGREGATOR_CHAIN_ID", str(BASE_CHAIN_ID))),
            rpc_url=os.environ.get("AGGREGATOR_RPC_URL", DEFAULT_RPC_URL),
            oneinch_api_key=os.environ.get("ONEINCH_API_KEY", ""),
            zerox_api_key=os.environ.get("ZEROX_API_KEY", ""),
            request_timeout=float(
                os.environ.get("AGGREGATOR_REQUEST_TIMEOUT", str(DEFAULT_REQUEST_TIMEOUT))
            ),
            retry=RetryConfig(max_attempts=int(os.environ.get("AGGREGATOR_MAX_RETRIES", "3"))),
        )


# Default configuration instance
DEFAULT_CONFIG = AggregatorConfig()
