"""Async client for a keyless public exchange-rate API (open.er-api.com)."""

from __future__ import annotations

import logging

import httpx

from ..config import settings
from . import ExchangeRateApiError

logger = logging.getLogger(__name__)


class ExchangeRateClient:
    """Fetch the latest rates for a base currency.

    Response format::

        {"result": "success", "base_code": "USD", "rates": {"JPY": 151.2, ...}}
    """

    def __init__(self, base_url: str | None = None, timeout: float | None = None) -> None:
        self._base_url = (base_url or settings.exchange_rate_api_url).rstrip("/")
        self._client = httpx.AsyncClient(timeout=timeout or settings.exchange_rate_timeout)

    async def latest(self, base: str) -> dict[str, float]:
        """Return ``{currency: rate}`` meaning 1 ``base`` = rate ``currency``."""
        try:
            resp = await self._client.get(f"{self._base_url}/{base.upper()}")
        except httpx.HTTPError as e:
            raise ExchangeRateApiError(f"Exchange rate HTTP error: {e}") from e

        if resp.status_code != 200:
            raise ExchangeRateApiError(
                f"Exchange rate API returned {resp.status_code}: {resp.text}",
                status_code=resp.status_code,
            )

        data = resp.json()
        if data.get("result") not in (None, "success"):
            raise ExchangeRateApiError(
                f"Exchange rate API error: {data.get('error-type', 'unknown')}"
            )

        rates = data.get("rates") or {}
        cleaned = {
            code: float(value)
            for code, value in rates.items()
            if isinstance(value, (int, float)) and value > 0
        }
        if not cleaned:
            raise ExchangeRateApiError(f"No rates returned for base {base}")
        return cleaned

    async def rate(self, from_currency: str, to_currency: str) -> float:
        rates = await self.latest(from_currency)
        value = rates.get(to_currency.upper())
        if value is None:
            raise ExchangeRateApiError(f"No {from_currency}->{to_currency} rate in response")
        return value

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()
