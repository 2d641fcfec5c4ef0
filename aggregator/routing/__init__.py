"""Route selection over collected quotes and discovered pools."""

from .selector import (
    find_matching_pool,
    match_quotes_to_pools,
    passes_constraints,
    select_best_route,
)

__all__ = [
    "find_matching_pool",
    "match_quotes_to_pools",
    "passes_constraints",
    "select_best_route",
]
