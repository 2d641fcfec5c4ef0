"""DEX quote aggregation and best-route selection."""

from aggregator.dex_aggregator import (
    DexAggregator,
    SwapPlan,
    discover_pools_directly,
    execute_professional_swap,
    get_default_aggregator,
    get_professional_quotes,
    select_best_route,
)

__version__ = "0.1.0"
__all__ = [
    "DexAggregator",
    "SwapPlan",
    "get_default_aggregator",
    "discover_pools_directly",
    "get_professional_quotes",
    "select_best_route",
    "execute_professional_swap",
    "__version__",
]
