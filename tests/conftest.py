import asyncio
from typing import Iterable, Optional, Sequence

import pytest

from src.domain.entities.price_series import PricePoint, PriceSeries
from src.domain.errors import AnalyticsError, UnknownTicker
from src.domain.ports.quote_provider_port import IQuoteProvider


def make_series(ticker: str, prices: Iterable[float]) -> PriceSeries:
    points = tuple(
        PricePoint(price=float(price), observed_at=f"2025-05-08T04:{index:02d}:00.000Z")
        for index, price in enumerate(prices)
    )
    return PriceSeries(ticker=ticker, points=points)


class FakeQuoteProvider(IQuoteProvider):
    """In-memory provider recording every call it receives."""

    def __init__(
        self,
        prices: Optional[dict[str, Sequence[float]]] = None,
        failures: Optional[dict[str, AnalyticsError]] = None,
        delays: Optional[dict[str, float]] = None,
    ) -> None:
        self._prices = {ticker: list(values) for ticker, values in (prices or {}).items()}
        self._failures = dict(failures or {})
        self._delays = dict(delays or {})
        self.series_calls: list[tuple[str, int]] = []
        self.cancelled: list[str] = []

    async def list_tickers(self) -> set[str]:
        return set(self._prices) | set(self._failures)

    async def get_series(self, ticker: str, window_minutes: int) -> PriceSeries:
        self.series_calls.append((ticker, window_minutes))
        try:
            await asyncio.sleep(self._delays.get(ticker, 0))
        except asyncio.CancelledError:
            self.cancelled.append(ticker)
            raise
        if ticker in self._failures:
            raise self._failures[ticker]
        if ticker not in self._prices:
            raise UnknownTicker(ticker)
        return make_series(ticker, self._prices[ticker])

    async def get_latest_price(self, ticker: str) -> PricePoint:
        if ticker not in self._prices:
            raise UnknownTicker(ticker)
        return make_series(ticker, self._prices[ticker]).points[-1]


@pytest.fixture
def provider() -> FakeQuoteProvider:
    return FakeQuoteProvider(
        prices={
            "NVDA": [10, 12, 14, 16, 18],
            "PYPL": [20, 19, 18, 17, 16],
            "AAPL": [3, 1, 4, 1, 5, 9],
            "FLAT": [5, 5, 5, 5],
        }
    )
