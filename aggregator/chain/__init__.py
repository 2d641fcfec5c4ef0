"""On-chain access: contract ABIs and the JSON-RPC reader."""

from .abi import (
    ERC20_ABI,
    QUOTER_V2_ABI,
    V2_FACTORY_ABI,
    V2_PAIR_ABI,
    V2_ROUTER_ABI,
    V3_FACTORY_ABI,
    V3_POOL_ABI,
)
from .reader import ChainReader, Web3ChainReader

__all__ = [
    "ChainReader",
    "Web3ChainReader",
    "ERC20_ABI",
    "QUOTER_V2_ABI",
    "V2_FACTORY_ABI",
    "V2_PAIR_ABI",
    "V2_ROUTER_ABI",
    "V3_FACTORY_ABI",
    "V3_POOL_ABI",
]
