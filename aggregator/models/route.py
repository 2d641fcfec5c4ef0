"""Pydantic models for pools, quotes and swap transactions.

Every model is frozen: a pipeline run creates fresh instances and derived
values (e.g. a quote matched to a pool) are produced with ``model_copy``.
"""

from enum import Enum

from pydantic import BaseModel, Field

from aggregator.models.types import Address, Bytes, Uint256


class DexVersion(str, Enum):
    """Protocol generation, which decides how a pool is quoted and encoded."""

    V2 = "v2"  # constant product, single pool per pair
    V3 = "v3"  # concentrated liquidity, one pool per fee tier


class Confidence(str, Enum):
    """How much a quote source is trusted."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class ApprovalMode(str, Enum):
    """How much allowance an approval grants."""

    EXACT = "exact"  # just the swap amount
    MAX = "max"  # unlimited, no further approvals for this router


class PoolCandidate(BaseModel):
    """A liquidity pool found on-chain for a token pair.

    Only pools with non-zero liquidity are ever constructed by discovery.
    """

    dex_id: str = Field(alias="dexId", description="DEX protocol identifier")
    pool_address: Address = Field(alias="poolAddress", description="Pool contract address")
    fee: int = Field(default=0, ge=0, description="Fee tier (0 for untiered protocols)")
    liquidity: Uint256 = Field(gt=0, description="Reported liquidity depth")
    version: DexVersion

    model_config = {"populate_by_name": True, "frozen": True}


class Quote(BaseModel):
    """One source's estimate for executing a swap.

    ``pool_address`` and ``liquidity`` stay empty until the quote is matched
    against discovered pools by the route selector.
    """

    dex_id: str = Field(alias="dexId", description="DEX protocol or aggregator name")
    amount_out: Uint256 = Field(alias="amountOut")
    gas_estimate: Uint256 = Field(default=0, alias="gasEstimate")
    price_impact: float = Field(default=0.0, alias="priceImpact", ge=0, le=100)
    route: list[str] = Field(default_factory=list)
    pool_address: str = Field(default="", alias="poolAddress")
    fee: int = Field(default=0, ge=0)
    liquidity: Uint256 = 0
    confidence: Confidence = Confidence.HIGH
    # Request context, needed to encode the swap later
    token_in: Address | None = Field(default=None, alias="tokenIn")
    token_out: Address | None = Field(default=None, alias="tokenOut")
    amount_in: Uint256 = Field(default=0, alias="amountIn")

    model_config = {"populate_by_name": True, "frozen": True}

    @property
    def is_matched(self) -> bool:
        """Check whether the quote has been correlated with an on-chain pool."""
        return bool(self.pool_address)


# A quote chosen by the route selector, augmented with matched pool data
SelectedRoute = Quote


class SwapTransaction(BaseModel):
    """Ready-to-sign transaction descriptor handed to a wallet."""

    to: Address = Field(description="Router contract address")
    data: Bytes = Field(description="ABI-encoded calldata")
    value: Uint256 = Field(default=0, description="Native token amount to send")
    gas_estimate: Uint256 = Field(default=0, alias="gasEstimate")

    model_config = {"populate_by_name": True, "frozen": True}


class ApprovalCheck(BaseModel):
    """Allowance state of a token for a router, plus the approval to send.

    ``transaction`` is None when the current allowance already covers
    ``amount``.
    """

    token: Address
    owner: Address
    spender: Address = Field(description="Router that will pull the tokens")
    amount: Uint256 = Field(description="Amount the swap will spend")
    allowance: Uint256 = Field(description="Current allowance for the router")
    balance: Uint256 = Field(description="Owner's current token balance")
    transaction: SwapTransaction | None = None

    model_config = {"populate_by_name": True, "frozen": True}

    @property
    def needs_approval(self) -> bool:
        return self.transaction is not None

    @property
    def has_balance(self) -> bool:
        return self.balance >= self.amount
