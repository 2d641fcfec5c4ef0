"""Protocol constants for the Base network.

Centralizes well-known contract addresses and protocol parameters.
"""

from aggregator.models.types import is_valid_address

BASE_CHAIN_ID = 8453

# Public endpoint, override with AGGREGATOR_RPC_URL
DEFAULT_RPC_URL = "https://mainnet.base.org"

ONEINCH_API_URL = "https://api.1inch.dev"
ZEROX_API_URL = "https://base.api.0x.org"


def _validate_address(name: str, address: str) -> str:
    """Validate and return a contract address.

    Raises:
        ValueError: If the address is invalid
    """
    if not is_valid_address(address):
        raise ValueError(f"Invalid {name} address: {address} (must be 0x + 40 hex chars)")
    return address


# V3 fee tiers in Uniswap units (hundredths of a basis point)
V3_FEE_LOWEST = 100  # 0.01% - stable pairs
V3_FEE_LOW = 500  # 0.05%
V3_FEE_MEDIUM = 3000  # 0.30% - most pairs
V3_FEE_HIGH = 10000  # 1.00% - exotic pairs

V3_FEE_TIERS = (V3_FEE_LOWEST, V3_FEE_LOW, V3_FEE_MEDIUM, V3_FEE_HIGH)

# Uniswap V3 on Base
UNISWAP_V3_FACTORY = _validate_address(
    "UniswapV3Factory", "0x33128a8fc17869897dce68ed026d694621f6fdfd"
)
UNISWAP_V3_QUOTER_V2 = _validate_address("QuoterV2", "0x3d4e44eb1374240ce5f1b871ab261cd16335b76a")
UNISWAP_V3_SWAP_ROUTER_02 = _validate_address(
    "SwapRouter02", "0x2626664c2603336e57b271c5c0b26f421741e481"
)

# Uniswap V2 on Base
UNISWAP_V2_FACTORY = _validate_address(
    "UniswapV2Factory", "0x8909dc15e40173ff4699343b6eb8132c65e18ec6"
)
UNISWAP_V2_ROUTER_02 = _validate_address(
    "UniswapV2Router02", "0x4752ba5dbc23f44d87826276bf6fd6b1c372ad24"
)

# BaseSwap (UniswapV2 fork)
BASESWAP_FACTORY = _validate_address("BaseSwapFactory", "0xfda619b6d20975be80a10332cd39b9a4b0faa8bb")
BASESWAP_ROUTER = _validate_address("BaseSwapRouter", "0x327df1e6de05895d2ab08513aadd9313fe505d86")

# Gas used when a source does not report an estimate
DEFAULT_GAS_ESTIMATE = 150_000
# Typical cost of an ERC-20 approve
APPROVE_GAS_ESTIMATE = 60_000

# Route selection thresholds
MIN_LIQUIDITY = 1000  # pool-native liquidity units
MAX_PRICE_IMPACT = 5.0  # percent

# Swap encoding
SWAP_DEADLINE_SECONDS = 1200  # 20 minutes
DEFAULT_SLIPPAGE_BPS = 50  # 0.5%
MAX_SLIPPAGE_BPS = 5000  # 50%
BPS_DENOMINATOR = 10_000

# Per-call timeout for RPC and HTTP requests
DEFAULT_REQUEST_TIMEOUT = 8.0
