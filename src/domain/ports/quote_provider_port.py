"""
Port (interface) for upstream stock-quote providers.
Infrastructure adapters (e.g. HttpQuoteProvider) must implement this interface.
"""

from abc import ABC, abstractmethod

from src.domain.entities.price_series import PricePoint, PriceSeries


class IQuoteProvider(ABC):
    @abstractmethod
    async def list_tickers(self) -> set[str]:
        """Return every ticker id the provider knows.

        Raises:
            ProviderUnavailable: upstream unreachable or non-success status.
        """
        ...

    @abstractmethod
    async def get_series(self, ticker: str, window_minutes: int) -> PriceSeries:
        """Return the price samples of *ticker* over the trailing window.

        Raises:
            ProviderUnavailable: network failure or non-2xx status.
            UnknownTicker: upstream reports no such symbol.
        """
        ...

    @abstractmethod
    async def get_latest_price(self, ticker: str) -> PricePoint: ...
