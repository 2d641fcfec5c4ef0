"""Quote source protocol and shared HTTP plumbing."""

from __future__ import annotations

from typing import Any, Protocol

import httpx

from aggregator.config import AggregatorConfig
from aggregator.errors import MalformedResponseError, SourceUnavailableError
from aggregator.models.route import Quote
from aggregator.retry import with_retry


class QuoteSource(Protocol):
    """A provider of swap quotes.

    Implementations raise on failure; the collector isolates each source so
    one failing source never hides the quotes of the others.
    """

    name: str

    async def fetch_quotes(self, token_in: str, token_out: str, amount_in: int) -> list[Quote]:
        """Return zero or more quotes for selling ``amount_in`` of ``token_in``."""
        ...


async def get_json(
    client: httpx.AsyncClient,
    url: str,
    *,
    params: dict[str, Any],
    headers: dict[str, str],
    config: AggregatorConfig,
    source: str,
) -> dict[str, Any]:
    """GET a JSON object with timeout and retry.

    Raises:
        SourceUnavailableError: Transport error, timeout, HTTP 429 or 5xx
        MalformedResponseError: Other non-2xx status or a non-object body
    """

    async def attempt() -> dict[str, Any]:
        try:
            response = await client.get(url, params=params, headers=headers)
        except httpx.TransportError as e:
            raise SourceUnavailableError(f"{source} request failed: {e}", source=source) from e

        if response.status_code == 429 or response.status_code >= 500:
            raise SourceUnavailableError(
                f"{source} returned HTTP {response.status_code}", source=source
            )
        if not response.is_success:
            raise MalformedResponseError(
                f"{source} returned HTTP {response.status_code}: {response.text[:200]}",
                source=source,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise MalformedResponseError(f"{source} returned invalid JSON", source=source) from e
        if not isinstance(data, dict):
            raise MalformedResponseError(f"{source} returned a non-object body", source=source)
        return data

    return await with_retry(
        attempt,
        retry=config.retry,
        timeout=config.request_timeout,
        source=source,
    )


def parse_price_impact(value: Any) -> float:
    """Parse a price impact percentage, clamped to [0, 100]. Missing means 0."""
    if value is None or value == "":
        return 0.0
    impact = float(value)
    return min(max(impact, 0.0), 100.0)
