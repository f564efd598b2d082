"""
Local-currency pricing.

Prices are stored in USD. To show a local price we look up the shopper's
country with a geolocation API, map it to a currency, then fetch the USD rate
from an exchange-rate API. Both lookups are cached in the ``currency``
namespace; any failure falls back to plain USD.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

import httpx

from storefront.config import settings
from storefront.core.cache import CURRENCY_NAMESPACE, QueryCache, get_query_cache, query_key
from storefront.http_client import get_http_client
from storefront.logger import get_logger
from storefront.services.currency_mapping import (
    DEFAULT_CURRENCY,
    currency_for_country,
    symbol_for_currency,
)

logger = get_logger(__name__)


@dataclass(frozen=True)
class CurrencyQuote:
    local_price: float
    currency_code: str
    currency_symbol: str
    exchange_rate: float

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def usd_quote(usd_price: float) -> CurrencyQuote:
    return CurrencyQuote(
        local_price=usd_price,
        currency_code=DEFAULT_CURRENCY,
        currency_symbol=symbol_for_currency(DEFAULT_CURRENCY),
        exchange_rate=1.0,
    )


def format_currency(value: float, currency: str = "INR") -> str:
    """Symbol plus grouped amount, without trailing zero fraction digits."""
    sign = "-" if value < 0 else ""
    amount = f"{abs(value):,.2f}".rstrip("0").rstrip(".")
    return f"{sign}{symbol_for_currency(currency)}{amount}"


class CurrencyService:
    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        cache: QueryCache[Any] | None = None,
        *,
        geolocation_base_url: str | None = None,
        exchange_rate_base_url: str | None = None,
    ) -> None:
        self._client = client
        self._cache = cache if cache is not None else get_query_cache(CURRENCY_NAMESPACE)
        self._geo_url = (geolocation_base_url or settings.geolocation_base_url).rstrip("/")
        self._rates_url = (exchange_rate_base_url or settings.exchange_rate_base_url).rstrip("/")

    async def _http(self) -> httpx.AsyncClient:
        if self._client is not None:
            return self._client
        return await get_http_client()

    async def _get_json(self, url: str, params: dict[str, str] | None = None) -> dict[str, Any]:
        client = await self._http()
        response = await client.get(url, params=params)
        response.raise_for_status()
        body = response.json()
        return body if isinstance(body, dict) else {}

    async def detect_currency(self, ip: str | None = None) -> str:
        """Currency code for the caller's country (``ip`` None means the server's own)."""

        async def load() -> str:
            path = f"{self._geo_url}/{ip}/json/" if ip else f"{self._geo_url}/json/"
            body = await self._get_json(path)
            return currency_for_country(body.get("country_code"))

        return await self._cache.get_or_set(query_key("geo", ip or "self"), load)

    async def exchange_rate(self, currency_code: str) -> float:
        """USD -> ``currency_code`` rate; 1.0 for USD or when the API omits it."""
        if currency_code == DEFAULT_CURRENCY:
            return 1.0

        async def load() -> float:
            body = await self._get_json(
                f"{self._rates_url}/latest",
                params={"base": DEFAULT_CURRENCY, "symbols": currency_code},
            )
            rate = (body.get("rates") or {}).get(currency_code)
            return float(rate) if rate else 1.0

        return await self._cache.get_or_set(
            query_key("rate", DEFAULT_CURRENCY, currency_code), load
        )

    async def quote(self, usd_price: float, ip: str | None = None) -> CurrencyQuote:
        try:
            currency_code = await self.detect_currency(ip)
            rate = await self.exchange_rate(currency_code)
        except (httpx.HTTPError, TypeError, ValueError) as exc:
            logger.warning("currency_detection_failed", error=str(exc))
            return usd_quote(usd_price)

        return CurrencyQuote(
            local_price=usd_price * rate,
            currency_code=currency_code,
            currency_symbol=symbol_for_currency(currency_code),
            exchange_rate=rate,
        )


_currency_service: CurrencyService | None = None


def get_currency_service() -> CurrencyService:
    """Get the global currency service instance."""
    global _currency_service
    if _currency_service is None:
        _currency_service = CurrencyService()
    return _currency_service
