"""
Infrastructure adapter: stock-exchange REST API → IQuoteProvider.

All httpx and payload-shape details are confined here; the rest of the
codebase depends only on IQuoteProvider.  Every request carries the bearer
credential given at construction.  Failures are not retried.
"""

import logging
from typing import Any, Optional

import httpx

from src.domain.entities.price_series import PricePoint, PriceSeries
from src.domain.errors import ProviderUnavailable, UnknownTicker
from src.domain.ports.quote_provider_port import IQuoteProvider

logger = logging.getLogger(__name__)


class HttpQuoteProvider(IQuoteProvider):
    """Fetches tickers and price samples from the upstream stocks API."""

    def __init__(
        self,
        base_url: str,
        access_token: str = "",
        timeout: float = 10.0,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._access_token = access_token
        self._timeout = httpx.Timeout(timeout)
        self._transport = transport

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self._access_token:
            headers["Authorization"] = f"Bearer {self._access_token}"
        return headers

    async def _get(
        self,
        path: str,
        params: Optional[dict[str, Any]] = None,
        ticker: Optional[str] = None,
    ) -> Any:
        try:
            async with httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self._timeout,
                transport=self._transport,
            ) as client:
                response = await client.get(path, params=params, headers=self._headers())
        except httpx.HTTPError as exc:
            logger.warning("Quote API request %s failed: %s", path, exc)
            raise ProviderUnavailable(f"Quote API unreachable for {path}: {exc}") from exc

        if response.status_code == 404 and ticker is not None:
            raise UnknownTicker(ticker)
        if response.is_error:
            logger.warning("Quote API %s returned HTTP %s", path, response.status_code)
            raise ProviderUnavailable(
                f"Quote API returned HTTP {response.status_code} for {path}"
            )
        try:
            payload = response.json()
        except ValueError as exc:
            raise ProviderUnavailable(f"Quote API returned malformed JSON for {path}") from exc
        logger.debug("Quote API %s -> %s", path, payload)
        return payload

    async def list_tickers(self) -> set[str]:
        payload = await self._get("/stocks")
        stocks = payload.get("stocks") if isinstance(payload, dict) else None
        # Upstream maps company name -> ticker; a bare list is accepted too.
        if isinstance(stocks, dict):
            return {str(ticker) for ticker in stocks.values()}
        if isinstance(stocks, list):
            return {str(ticker) for ticker in stocks}
        raise ProviderUnavailable("Quote API returned an unexpected ticker list payload")

    async def get_series(self, ticker: str, window_minutes: int) -> PriceSeries:
        payload = await self._get(
            f"/stocks/{ticker}", params={"minutes": window_minutes}, ticker=ticker
        )
        if not isinstance(payload, list):
            raise ProviderUnavailable(
                f"Quote API returned an unexpected history payload for {ticker!r}"
            )
        return PriceSeries(
            ticker=ticker,
            points=tuple(_parse_point(ticker, entry) for entry in payload),
        )

    async def get_latest_price(self, ticker: str) -> PricePoint:
        payload = await self._get(f"/stocks/{ticker}", ticker=ticker)
        stock = payload.get("stock") if isinstance(payload, dict) else None
        if stock is None:
            raise UnknownTicker(ticker)
        return _parse_point(ticker, stock)


def _parse_point(ticker: str, entry: Any) -> PricePoint:
    try:
        return PricePoint(price=float(entry["price"]), observed_at=str(entry["lastUpdatedAt"]))
    except (KeyError, TypeError, ValueError) as exc:
        raise ProviderUnavailable(
            f"Quote API returned a malformed price sample for {ticker!r}: {entry!r}"
        ) from exc
