"""
Use-case: list the ticker ids known to the quote provider.
Depends only on Domain ports and entities; no infrastructure imports.
"""

from src.domain.ports.quote_provider_port import IQuoteProvider


class ListTickersUseCase:
    def __init__(self, provider: IQuoteProvider) -> None:
        self._provider = provider

    async def execute(self) -> list[str]:
        return sorted(await self._provider.list_tickers())
