"""
Use-case: retrieve the most recent price sample for a given ticker.
Depends only on Domain ports and entities; no infrastructure imports.
"""

from src.application.use_cases.request_validation import normalize_ticker
from src.domain.entities.price_series import PricePoint
from src.domain.ports.quote_provider_port import IQuoteProvider


class GetLatestPriceUseCase:
    def __init__(self, provider: IQuoteProvider) -> None:
        self._provider = provider

    async def execute(self, ticker: str) -> PricePoint:
        """Fetch the latest price for *ticker* (uppercased).

        Raises:
            InvalidRequest: if *ticker* is blank.
            Any exception propagated from the IQuoteProvider on API failure.
        """
        return await self._provider.get_latest_price(normalize_ticker(ticker))
