"""UniswapV2-style router calldata encoding."""

from __future__ import annotations

from eth_abi import encode

from aggregator.models.types import normalize_address

# swapExactTokensForTokens(uint256,uint256,address[],address,uint256)
SWAP_EXACT_TOKENS_FOR_TOKENS_SELECTOR = bytes.fromhex("38ed1739")


def encode_swap_exact_tokens_for_tokens(
    amount_in: int,
    amount_out_min: int,
    path: list[str],
    recipient: str,
    deadline: int,
) -> str:
    """Encode Router02.swapExactTokensForTokens.

    Args:
        amount_in: Exact amount of input tokens
        amount_out_min: Minimum output amount (slippage protection)
        path: Token addresses from input to output
        recipient: Address to receive output tokens
        deadline: Unix timestamp after which the swap reverts

    Returns:
        Calldata as 0x-prefixed hex
    """
    if len(path) < 2:
        raise ValueError(f"Swap path needs at least two tokens, got {len(path)}")

    encoded_params = encode(
        ["uint256", "uint256", "address[]", "address", "uint256"],
        [
            amount_in,
            amount_out_min,
            [bytes.fromhex(normalize_address(token)[2:]) for token in path],
            bytes.fromhex(normalize_address(recipient)[2:]),
            deadline,
        ],
    )
    return "0x" + (SWAP_EXACT_TOKENS_FOR_TOKENS_SELECTOR + encoded_params).hex()


__all__ = ["SWAP_EXACT_TOKENS_FOR_TOKENS_SELECTOR", "encode_swap_exact_tokens_for_tokens"]
