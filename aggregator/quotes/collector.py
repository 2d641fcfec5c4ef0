"""Quote collection across independent sources.

All sources are queried concurrently and settled together: a source that
raises is logged and skipped, the others still contribute. When every
source fails the result is an empty list, never an exception.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence

import structlog

from aggregator.models.route import Quote

from .base import QuoteSource

logger = structlog.get_logger()


class QuoteCollector:
    """Fans a quote request out to several sources and merges the results.

    Args:
        sources: Quote sources to query, each independently failable
    """

    def __init__(self, sources: Sequence[QuoteSource]) -> None:
        self.sources = list(sources)

    async def collect_quotes(self, token_in: str, token_out: str, amount_in: int) -> list[Quote]:
        """Gather quotes for selling ``amount_in`` of ``token_in``.

        Returns:
            Quotes sorted by ``amount_out`` descending (integer comparison).
            Empty when no source produced a quote.
        """
        results = await asyncio.gather(
            *(source.fetch_quotes(token_in, token_out, amount_in) for source in self.sources),
            return_exceptions=True,
        )

        quotes: list[Quote] = []
        failed: list[str] = []
        for source, result in zip(self.sources, results, strict=True):
            if isinstance(result, BaseException):
                if not isinstance(result, Exception):
                    # Cancellation and interpreter exits are not source failures
                    raise result
                failed.append(source.name)
                logger.warning(
                    "quote_source_failed",
                    source=source.name,
                    error_type=type(result).__name__,
                    error=str(result),
                )
                continue
            quotes.extend(result)

        quotes.sort(key=lambda quote: quote.amount_out, reverse=True)

        logger.info(
            "quotes_collected",
            token_in=token_in,
            token_out=token_out,
            amount_in=amount_in,
            quote_count=len(quotes),
            failed_sources=failed,
        )
        return quotes


__all__ = ["QuoteCollector"]
