"""API endpoints for the swap workflow: quote, approve and build."""

import structlog
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from aggregator.api.schemas import (
    ApprovalRequest,
    ApprovalResponse,
    BuildSwapRequest,
    ErrorResponse,
    QuoteRequest,
    QuoteResponse,
)
from aggregator.dex_aggregator import DexAggregator, get_default_aggregator
from aggregator.encoding.encoder import amount_out_minimum
from aggregator.errors import QuoteSourceError, UnsupportedDexError
from aggregator.models.route import SwapTransaction

logger = structlog.get_logger()

router = APIRouter(prefix="/swap")


async def get_aggregator() -> DexAggregator:
    """Dependency provider for the aggregator instance.

    Runs on the event loop, never in the threadpool, so the lazily created
    default aggregator is built once.

    Override this in tests to inject an aggregator with fake sources:
        app.dependency_overrides[get_aggregator] = lambda: fake_aggregator
    """
    return get_default_aggregator()


def _error(status_code: int, error: str, message: str) -> JSONResponse:
    body = ErrorResponse(error=error, message=message)
    return JSONResponse(status_code=status_code, content=body.model_dump())


@router.post(
    "/quote",
    response_model=QuoteResponse,
    responses={404: {"model": ErrorResponse}},
)
async def quote(
    request: QuoteRequest,
    aggregator: DexAggregator = Depends(get_aggregator),
) -> QuoteResponse | JSONResponse:
    """Find the best route for a token pair and amount.

    Error Handling:
        - Invalid request schema: 422 Validation Error (Pydantic)
        - No source could quote the pair: 404 NO_ROUTE_FOUND
    """
    logger.info(
        "received_quote_request",
        token_in=request.token_in,
        token_out=request.token_out,
        amount_in=request.amount_in,
    )

    plan = await aggregator.find_best_swap(request.token_in, request.token_out, request.amount_in)
    if plan is None:
        return _error(404, "NO_ROUTE_FOUND", "No valid swap route found for this token pair")

    slippage_bps = (
        request.slippage_bps
        if request.slippage_bps is not None
        else aggregator.config.default_slippage_bps
    )
    return QuoteResponse(
        route=plan.route,
        amount_out_min=amount_out_minimum(plan.route.amount_out, slippage_bps),
        slippage_bps=slippage_bps,
        quotes=plan.quotes,
        pools=plan.pools,
    )


@router.post(
    "/build",
    response_model=SwapTransaction,
    responses={400: {"model": ErrorResponse}},
)
async def build(
    request: BuildSwapRequest,
    aggregator: DexAggregator = Depends(get_aggregator),
) -> SwapTransaction | JSONResponse:
    """Encode the swap transaction for a route returned by /swap/quote.

    Error Handling:
        - Route from a DEX that cannot be encoded (e.g. 1inch): 400 UNSUPPORTED_DEX
        - Missing input amount or token pair: 400 INVALID_SWAP
    """
    try:
        return await aggregator.execute_professional_swap(
            request.quote,
            request.wallet_address,
            slippage_bps=request.slippage_bps,
            amount_in=request.amount_in,
        )
    except UnsupportedDexError as e:
        logger.warning("unsupported_dex", dex_id=e.dex_id)
        return _error(400, "UNSUPPORTED_DEX", str(e))
    except ValueError as e:
        return _error(400, "INVALID_SWAP", str(e))


@router.post(
    "/approve",
    response_model=ApprovalResponse,
    responses={400: {"model": ErrorResponse}, 502: {"model": ErrorResponse}},
)
async def approve(
    request: ApprovalRequest,
    aggregator: DexAggregator = Depends(get_aggregator),
) -> ApprovalResponse | JSONResponse:
    """Report the router allowance and build an approve transaction if needed.

    Error Handling:
        - DEX without a configured router: 400 UNSUPPORTED_DEX
        - Token reads failed: 502 APPROVAL_CHECK_FAILED
    """
    try:
        check = await aggregator.check_approval(
            request.token_address,
            request.wallet_address,
            request.dex_id,
            request.amount,
            request.approval_type,
        )
    except UnsupportedDexError as e:
        logger.warning("unsupported_dex", dex_id=e.dex_id)
        return _error(400, "UNSUPPORTED_DEX", str(e))
    except QuoteSourceError as e:
        logger.warning("approval_check_failed", token=request.token_address, error=str(e))
        return _error(502, "APPROVAL_CHECK_FAILED", str(e))

    return ApprovalResponse(
        token=check.token,
        spender=check.spender,
        amount=check.amount,
        allowance=check.allowance,
        balance=check.balance,
        needs_approval=check.needs_approval,
        has_balance=check.has_balance,
        transaction=check.transaction,
    )
