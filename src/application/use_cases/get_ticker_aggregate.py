"""
Use-case: price history of one ticker over a trailing window, optionally
reduced to its average.
Depends only on Domain ports and entities; no infrastructure imports.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from src.application.use_cases.request_validation import normalize_ticker, validate_window
from src.domain.entities.price_series import PriceSeries
from src.domain.errors import InvalidRequest
from src.domain.ports.quote_provider_port import IQuoteProvider
from src.domain.services.aggregator import average


class AggregationMode(str, Enum):
    AVERAGE = "average"
    RAW = "raw"

    @classmethod
    def parse(cls, value: Optional[str]) -> "AggregationMode":
        if value is None or value == "":
            return cls.RAW
        try:
            return cls(value.strip().lower())
        except ValueError as exc:
            raise InvalidRequest(
                f"Unsupported aggregation {value!r}; expected 'average' or 'raw'"
            ) from exc


@dataclass(frozen=True)
class TickerAggregate:
    ticker: str
    window_minutes: int
    mode: AggregationMode
    series: PriceSeries
    average_price: Optional[float] = None


class GetTickerAggregateUseCase:
    def __init__(self, provider: IQuoteProvider) -> None:
        self._provider = provider

    async def execute(
        self,
        ticker: str,
        minutes: Union[int, str, None],
        aggregation: Union[AggregationMode, str, None] = None,
    ) -> TickerAggregate:
        """Fetch the history of *ticker* over the last *minutes*.

        Args:
            ticker:      Ticker symbol (case-insensitive).
            minutes:     Positive window length in minutes.
            aggregation: 'average' to reduce the series to its mean; 'raw' or
                         None to return the history as delivered.

        Raises:
            InvalidRequest: blank ticker, bad window or unknown aggregation.
            EmptySeries: average requested over a window with no samples.
            Any exception propagated from IQuoteProvider on API failure.
        """
        symbol = normalize_ticker(ticker)
        window = validate_window(minutes)
        mode = aggregation if isinstance(aggregation, AggregationMode) else AggregationMode.parse(aggregation)

        series = await self._provider.get_series(symbol, window)
        if mode is AggregationMode.AVERAGE:
            return TickerAggregate(symbol, window, mode, series, average_price=average(series))
        return TickerAggregate(symbol, window, mode, series)
