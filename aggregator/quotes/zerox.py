"""0x swap API quote source."""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any

import httpx

from aggregator.config import AggregatorConfig
from aggregator.constants import DEFAULT_GAS_ESTIMATE
from aggregator.errors import MalformedResponseError
from aggregator.models.route import Confidence, Quote

from .base import get_json, parse_price_impact


def active_source_names(sources: Any) -> list[str]:
    """Names of the liquidity sources 0x actually routes through.

    0x lists every source it considered, most with a proportion of "0".
    """
    if not isinstance(sources, list):
        return []

    names = []
    for source in sources:
        if not isinstance(source, dict) or not isinstance(source.get("name"), str):
            continue
        try:
            proportion = Decimal(str(source.get("proportion", "1")))
        except InvalidOperation:
            continue
        if proportion > 0:
            names.append(source["name"])
    return names


class ZeroExQuoteSource:
    """Quotes from the 0x swap API (API-key authenticated)."""

    name = "0x"

    def __init__(self, client: httpx.AsyncClient, config: AggregatorConfig) -> None:
        self.client = client
        self.config = config

    @property
    def url(self) -> str:
        return f"{self.config.zerox_base_url}/swap/v1/quote"

    async def fetch_quotes(self, token_in: str, token_out: str, amount_in: int) -> list[Quote]:
        data = await get_json(
            self.client,
            self.url,
            params={
                "buyToken": token_out,
                "sellToken": token_in,
                "sellAmount": str(amount_in),
            },
            headers={"0x-api-key": self.config.zerox_api_key},
            config=self.config,
            source=self.name,
        )
        return [self.parse_quote(data, token_in, token_out, amount_in)]

    def parse_quote(
        self, data: dict[str, Any], token_in: str, token_out: str, amount_in: int
    ) -> Quote:
        """Map a 0x quote response to a Quote.

        The v1 API reports ``estimatedPriceImpact``; ``priceImpact`` is
        accepted as well.

        Raises:
            MalformedResponseError: If ``buyAmount`` is missing or invalid
        """
        if "buyAmount" not in data:
            raise MalformedResponseError("0x response has no buyAmount", source=self.name)

        impact = data.get("priceImpact", data.get("estimatedPriceImpact"))
        try:
            return Quote(
                dex_id=self.name,
                amount_out=data["buyAmount"],
                gas_estimate=data.get("gas") or DEFAULT_GAS_ESTIMATE,
                price_impact=parse_price_impact(impact),
                route=active_source_names(data.get("sources")) or ["0x"],
                fee=0,
                confidence=Confidence.HIGH,
                token_in=token_in,
                token_out=token_out,
                amount_in=amount_in,
            )
        except ValueError as e:
            raise MalformedResponseError(f"Invalid 0x quote: {e}", source=self.name) from e


__all__ = ["ZeroExQuoteSource", "active_source_names"]
