"""SwapRouter02 calldata encoding for UniswapV3 swaps.

SwapRouter02's ``exactInputSingle`` struct has no deadline field; the
deadline is enforced by wrapping the call in ``multicall(deadline, data)``.
"""

from __future__ import annotations

from eth_abi import encode

from aggregator.models.types import normalize_address

# Function selectors for SwapRouter02
# exactInputSingle((address,address,uint24,address,uint256,uint256,uint160))
EXACT_INPUT_SINGLE_SELECTOR = bytes.fromhex("04e45aaf")

# multicall(uint256,bytes[])
MULTICALL_DEADLINE_SELECTOR = bytes.fromhex("5ae401dc")


def _address_bytes(address: str) -> bytes:
    return bytes.fromhex(normalize_address(address)[2:])


def encode_exact_input_single(
    token_in: str,
    token_out: str,
    fee: int,
    recipient: str,
    amount_in: int,
    amount_out_minimum: int,
    sqrt_price_limit_x96: int = 0,
) -> bytes:
    """Encode SwapRouter02.exactInputSingle call.

    Args:
        token_in: Input token address
        token_out: Output token address
        fee: Pool fee tier (e.g., 3000 for 0.3%)
        recipient: Address to receive output tokens
        amount_in: Amount of input tokens
        amount_out_minimum: Minimum output amount (slippage protection)
        sqrt_price_limit_x96: Price limit (0 = no limit)

    Returns:
        Calldata bytes (selector + encoded params)
    """
    # (address tokenIn, address tokenOut, uint24 fee, address recipient,
    #  uint256 amountIn, uint256 amountOutMinimum, uint160 sqrtPriceLimitX96)
    encoded_params = encode(
        ["(address,address,uint24,address,uint256,uint256,uint160)"],
        [
            (
                _address_bytes(token_in),
                _address_bytes(token_out),
                fee,
                _address_bytes(recipient),
                amount_in,
                amount_out_minimum,
                sqrt_price_limit_x96,
            )
        ],
    )
    return EXACT_INPUT_SINGLE_SELECTOR + encoded_params


def encode_multicall_with_deadline(deadline: int, calls: list[bytes]) -> bytes:
    """Encode SwapRouter02.multicall(deadline, data); reverts after ``deadline``."""
    return MULTICALL_DEADLINE_SELECTOR + encode(["uint256", "bytes[]"], [deadline, calls])


def encode_v3_swap(
    token_in: str,
    token_out: str,
    fee: int,
    recipient: str,
    amount_in: int,
    amount_out_minimum: int,
    deadline: int,
) -> str:
    """Encode a deadline-bounded single-hop exact-input V3 swap.

    Returns:
        Calldata as 0x-prefixed hex
    """
    swap = encode_exact_input_single(
        token_in, token_out, fee, recipient, amount_in, amount_out_minimum
    )
    return "0x" + encode_multicall_with_deadline(deadline, [swap]).hex()


__all__ = [
    "EXACT_INPUT_SINGLE_SELECTOR",
    "MULTICALL_DEADLINE_SELECTOR",
    "encode_exact_input_single",
    "encode_multicall_with_deadline",
    "encode_v3_swap",
]
