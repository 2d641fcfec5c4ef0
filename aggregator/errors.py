"""Aggregator error classes.

Source errors are caught at the boundary of the source that raised them
and only degrade the result set. ``UnsupportedDexError`` is a configuration
error and always reaches the caller.
"""


class AggregatorError(Exception):
    """Base error for aggregator operations."""

    pass


class UnsupportedDexError(AggregatorError, ValueError):
    """The DEX is not configured or cannot be encoded."""

    def __init__(self, dex_id: str) -> None:
        super().__init__(f"Unsupported DEX: {dex_id}")
        self.dex_id = dex_id


class QuoteSourceError(AggregatorError):
    """A pool or quote source failed.

    Attributes:
        source: Name of the failing source (e.g. "1inch", "rpc")
        retryable: Whether repeating the call may succeed
    """

    retryable = False

    def __init__(self, message: str, source: str = "unknown") -> None:
        super().__init__(message)
        self.source = source


class SourceUnavailableError(QuoteSourceError):
    """Timeout, transport failure, rate limit or HTTP 5xx."""

    retryable = True


class MalformedResponseError(QuoteSourceError):
    """Response was rejected (4xx) or did not have the expected shape."""

    pass


class RpcError(SourceUnavailableError):
    """A JSON-RPC contract read failed."""

    pass


class ContractRevertError(QuoteSourceError):
    """A contract call reverted (e.g. the quoter found no pool)."""

    pass
