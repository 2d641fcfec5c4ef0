"""Quote sources and the collector that merges them.

- On-chain: V3 QuoterV2 per fee tier, V2 router ``getAmountsOut``
- Off-chain: 1inch and 0x aggregator APIs
"""

from .base import QuoteSource, get_json, parse_price_impact
from .collector import QuoteCollector
from .oneinch import OneInchQuoteSource, flatten_protocol_names
from .onchain import OnChainV2QuoteSource, OnChainV3QuoteSource
from .zerox import ZeroExQuoteSource, active_source_names

__all__ = [
    "QuoteSource",
    "QuoteCollector",
    "OnChainV3QuoteSource",
    "OnChainV2QuoteSource",
    "OneInchQuoteSource",
    "ZeroExQuoteSource",
    "active_source_names",
    "flatten_protocol_names",
    "get_json",
    "parse_price_impact",
]
