"""1inch swap API quote source."""

from __future__ import annotations

from typing import Any

import httpx

from aggregator.config import AggregatorConfig
from aggregator.constants import DEFAULT_GAS_ESTIMATE
from aggregator.errors import MalformedResponseError
from aggregator.models.route import Confidence, Quote

from .base import get_json, parse_price_impact


def flatten_protocol_names(protocols: Any) -> list[str]:
    """Collect hop names from 1inch's nested ``protocols`` structure.

    1inch returns routes as lists of parts of lists of hops, each hop a dict
    with a ``name``. Names are returned in order of first appearance.
    """
    names: list[str] = []

    def visit(node: Any) -> None:
        if isinstance(node, list):
            for child in node:
                visit(child)
        elif isinstance(node, dict):
            name = node.get("name")
            if isinstance(name, str) and name not in names:
                names.append(name)
        elif isinstance(node, str) and node not in names:
            names.append(node)

    visit(protocols)
    return names


class OneInchQuoteSource:
    """Quotes from the 1inch aggregation API (bearer-token authenticated)."""

    name = "1inch"

    def __init__(self, client: httpx.AsyncClient, config: AggregatorConfig) -> None:
        self.client = client
        self.config = config

    @property
    def url(self) -> str:
        return f"{self.config.oneinch_base_url}/swap/v5.2/{self.config.chain_id}/quote"

    async def fetch_quotes(self, token_in: str, token_out: str, amount_in: int) -> list[Quote]:
        data = await get_json(
            self.client,
            self.url,
            params={
                "src": token_in,
                "dst": token_out,
                "amount": str(amount_in),
                "includeProtocols": "true",
                "includeGas": "true",
            },
            headers={
                "Authorization": f"Bearer {self.config.oneinch_api_key}",
                "Accept": "application/json",
            },
            config=self.config,
            source=self.name,
        )
        return [self.parse_quote(data, token_in, token_out, amount_in)]

    def parse_quote(
        self, data: dict[str, Any], token_in: str, token_out: str, amount_in: int
    ) -> Quote:
        """Map a 1inch quote response to a Quote.

        Raises:
            MalformedResponseError: If ``toAmount`` is missing or invalid
        """
        if "toAmount" not in data:
            raise MalformedResponseError("1inch response has no toAmount", source=self.name)

        try:
            return Quote(
                dex_id=self.name,
                amount_out=data["toAmount"],
                gas_estimate=data.get("gas") or DEFAULT_GAS_ESTIMATE,
                price_impact=parse_price_impact(data.get("priceImpact")),
                route=flatten_protocol_names(data.get("protocols")) or ["1inch"],
                fee=0,
                confidence=Confidence.HIGH,
                token_in=token_in,
                token_out=token_out,
                amount_in=amount_in,
            )
        except ValueError as e:
            # pydantic.ValidationError is a ValueError
            raise MalformedResponseError(f"Invalid 1inch quote: {e}", source=self.name) from e


__all__ = ["OneInchQuoteSource", "flatten_protocol_names"]
