"""Request and response bodies of the swap API."""

from pydantic import BaseModel, Field

from aggregator.constants import MAX_SLIPPAGE_BPS
from aggregator.models.route import ApprovalMode, PoolCandidate, Quote, SwapTransaction
from aggregator.models.types import Address, Uint256


class QuoteRequest(BaseModel):
    """Ask for the best route selling ``amount_in`` of ``token_in``."""

    token_in: Address = Field(alias="tokenIn")
    token_out: Address = Field(alias="tokenOut")
    amount_in: Uint256 = Field(alias="amountIn", gt=0, description="Smallest-unit amount")
    slippage_bps: int | None = Field(
        default=None, alias="slippageBps", ge=0, le=MAX_SLIPPAGE_BPS
    )

    model_config = {"populate_by_name": True}


class QuoteResponse(BaseModel):
    """Selected route plus everything it was selected from."""

    route: Quote
    amount_out_min: Uint256 = Field(alias="amountOutMin")
    slippage_bps: int = Field(alias="slippageBps")
    quotes: list[Quote] = Field(default_factory=list)
    pools: list[PoolCandidate] = Field(default_factory=list)

    model_config = {"populate_by_name": True}


class BuildSwapRequest(BaseModel):
    """Encode a previously returned route for a wallet."""

    quote: Quote
    wallet_address: Address = Field(alias="walletAddress")
    slippage_bps: int | None = Field(
        default=None, alias="slippageBps", ge=0, le=MAX_SLIPPAGE_BPS
    )
    amount_in: Uint256 | None = Field(default=None, alias="amountIn")

    model_config = {"populate_by_name": True}


class ErrorResponse(BaseModel):
    """Machine-readable error code and a human-readable message."""

    error: str
    message: str


class ApprovalRequest(BaseModel):
    """Check the router allowance a swap of ``amount`` needs."""

    token_address: Address = Field(alias="tokenAddress")
    wallet_address: Address = Field(alias="walletAddress")
    dex_id: str = Field(alias="dexId", description="DEX whose router will swap")
    amount: Uint256 = Field(gt=0, description="Smallest-unit amount to spend")
    approval_type: ApprovalMode = Field(default=ApprovalMode.EXACT, alias="approvalType")

    model_config = {"populate_by_name": True}


class ApprovalResponse(BaseModel):
    """Current allowance and, when it is too low, the approve transaction."""

    token: Address
    spender: Address
    amount: Uint256
    allowance: Uint256
    balance: Uint256
    needs_approval: bool = Field(alias="needsApproval")
    has_balance: bool = Field(alias="hasBalance")
    transaction: SwapTransaction | None = None

    model_config = {"populate_by_name": True}
