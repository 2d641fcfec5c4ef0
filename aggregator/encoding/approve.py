"""ERC-20 approval calldata.

A router can only pull input tokens the wallet has approved for it, so a
swap built for a fresh wallet is preceded by an ``approve`` transaction on
the input token.
"""

from __future__ import annotations

from eth_abi import encode

from aggregator.models.route import ApprovalMode
from aggregator.models.types import UINT256_MAX, normalize_address

# approve(address,uint256)
APPROVE_SELECTOR = bytes.fromhex("095ea7b3")


def approval_amount(amount: int, mode: ApprovalMode = ApprovalMode.EXACT) -> int:
    """Allowance to request for spending ``amount``.

    Raises:
        ValueError: If ``amount`` is not positive
    """
    if amount <= 0:
        raise ValueError(f"Approval amount must be positive: {amount}")
    if mode == ApprovalMode.MAX:
        return UINT256_MAX
    return amount


def encode_approve(spender: str, amount: int) -> str:
    """Encode ERC20.approve(spender, amount).

    Args:
        spender: Contract allowed to transfer the tokens (the router)
        amount: Allowance in the token's smallest unit

    Returns:
        Calldata as 0x-prefixed hex
    """
    encoded_params = encode(
        ["address", "uint256"],
        [bytes.fromhex(normalize_address(spender)[2:]), amount],
    )
    return "0x" + (APPROVE_SELECTOR + encoded_params).hex()


__all__ = ["APPROVE_SELECTOR", "approval_amount", "encode_approve"]
