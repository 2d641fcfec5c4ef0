"""Aggregator data models."""

from aggregator.models.route import (
    ApprovalCheck,
    ApprovalMode,
    Confidence,
    DexVersion,
    PoolCandidate,
    Quote,
    SelectedRoute,
    SwapTransaction,
)
from aggregator.models.types import (
    UINT256_MAX,
    ZERO_ADDRESS,
    Address,
    Bytes,
    Uint256,
    is_valid_address,
    is_zero_address,
    normalize_address,
)

__all__ = [
    # Route models
    "ApprovalCheck",
    "ApprovalMode",
    "Confidence",
    "DexVersion",
    "PoolCandidate",
    "Quote",
    "SelectedRoute",
    "SwapTransaction",
    # Types
    "UINT256_MAX",
    "ZERO_ADDRESS",
    "Address",
    "Bytes",
    "Uint256",
    "is_valid_address",
    "is_zero_address",
    "normalize_address",
]
