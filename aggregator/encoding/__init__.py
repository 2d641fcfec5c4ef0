"""Router calldata encoding for V2 and V3 swaps and token approvals."""

from .approve import APPROVE_SELECTOR, approval_amount, encode_approve
from .encoder import SwapEncoder, amount_out_minimum
from .v2 import SWAP_EXACT_TOKENS_FOR_TOKENS_SELECTOR, encode_swap_exact_tokens_for_tokens
from .v3 import (
    EXACT_INPUT_SINGLE_SELECTOR,
    MULTICALL_DEADLINE_SELECTOR,
    encode_exact_input_single,
    encode_multicall_with_deadline,
    encode_v3_swap,
)

__all__ = [
    "SwapEncoder",
    "amount_out_minimum",
    # V3
    "EXACT_INPUT_SINGLE_SELECTOR",
    "MULTICALL_DEADLINE_SELECTOR",
    "encode_exact_input_single",
    "encode_multicall_with_deadline",
    "encode_v3_swap",
    # Approval
    "APPROVE_SELECTOR",
    "approval_amount",
    "encode_approve",
    # V2
    "SWAP_EXACT_TOKENS_FOR_TOKENS_SELECTOR",
    "encode_swap_exact_tokens_for_tokens",
]
