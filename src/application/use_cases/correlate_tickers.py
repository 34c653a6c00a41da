"""
Use-case: Pearson correlation between exactly two tickers over a window.
Depends only on Domain ports and entities; no infrastructure imports.

Both series are fetched concurrently.  A zero-variance series is not a
failure: it yields a CorrelationResult whose status is "undefined".
"""

from dataclasses import dataclass
from typing import Sequence, Union

from src.application.use_cases.request_validation import normalize_tickers, validate_window
from src.domain.entities.price_series import (
    CORRELATION_DEFINED,
    CORRELATION_UNDEFINED,
    CorrelationResult,
    PriceSeries,
)
from src.domain.errors import InvalidRequest
from src.domain.ports.quote_provider_port import IQuoteProvider
from src.domain.services.aggregator import ticker_stats
from src.domain.services.correlation_engine import AlignmentPolicy, align, try_correlate
from src.domain.services.matrix_builder import fetch_concurrently


@dataclass(frozen=True)
class CorrelationReport:
    result: CorrelationResult
    series_a: PriceSeries
    series_b: PriceSeries


class CorrelateTickersUseCase:
    def __init__(self, provider: IQuoteProvider) -> None:
        self._provider = provider

    async def execute(
        self,
        tickers: Sequence[str],
        minutes: Union[int, str, None],
        alignment: AlignmentPolicy = AlignmentPolicy.POSITIONAL_TRUNCATION,
    ) -> CorrelationReport:
        """Correlate the two *tickers* over the last *minutes*.

        The per-ticker stats are taken over the aligned samples, the same
        samples the coefficient is computed from.

        Raises:
            InvalidRequest: not exactly two tickers, or a bad window.
            EmptySeries / InsufficientSamples: fewer than 2 aligned samples.
            Any exception propagated from IQuoteProvider on API failure.
        """
        if tickers is None or len(tickers) != 2:
            raise InvalidRequest(
                "Provide exactly 2 tickers as query params like ?ticker=NVDA&ticker=PYPL"
            )
        ticker_a, ticker_b = normalize_tickers(tickers)
        window = validate_window(minutes)

        async def _fetch(ticker: str) -> PriceSeries:
            return await self._provider.get_series(ticker, window)

        fetched, _ = await fetch_concurrently(list(dict.fromkeys((ticker_a, ticker_b))), _fetch)
        series_a, series_b = fetched[ticker_a], fetched[ticker_b]

        aligned_a, aligned_b = align(series_a, series_b, alignment)
        # Already equal in length, so positional alignment leaves them untouched.
        coefficient = try_correlate(aligned_a, aligned_b, AlignmentPolicy.POSITIONAL_TRUNCATION)
        result = CorrelationResult(
            ticker_a=ticker_a,
            ticker_b=ticker_b,
            coefficient=coefficient,
            status=CORRELATION_DEFINED if coefficient is not None else CORRELATION_UNDEFINED,
            stats_a=ticker_stats(aligned_a),
            stats_b=ticker_stats(aligned_b),
        )
        return CorrelationReport(result=result, series_a=series_a, series_b=series_b)
