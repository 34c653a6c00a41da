"""
Use-case: correlation matrix and per-ticker statistics for a set of tickers.
Depends only on Domain ports and entities; no infrastructure imports.
"""

from typing import Sequence, Union

from src.application.use_cases.request_validation import normalize_tickers, validate_window
from src.domain.entities.price_series import CorrelationMatrix, PriceSeries
from src.domain.ports.quote_provider_port import IQuoteProvider
from src.domain.services.correlation_engine import AlignmentPolicy
from src.domain.services.matrix_builder import MatrixFailurePolicy, build_matrix


class BuildCorrelationMatrixUseCase:
    def __init__(self, provider: IQuoteProvider) -> None:
        self._provider = provider

    async def execute(
        self,
        tickers: Sequence[str],
        minutes: Union[int, str, None],
        failure_policy: MatrixFailurePolicy = MatrixFailurePolicy.WHOLE_OR_NOTHING,
        alignment: AlignmentPolicy = AlignmentPolicy.POSITIONAL_TRUNCATION,
    ) -> CorrelationMatrix:
        """Build the matrix for *tickers* over the last *minutes*.

        Raises:
            InvalidRequest: blank ticker, bad window or fewer than 2 distinct tickers.
            AnalyticsError: the first failure, when *failure_policy* is WHOLE_OR_NOTHING.
        """
        symbols = normalize_tickers(tickers or [])
        window = validate_window(minutes)

        async def _fetch(ticker: str) -> PriceSeries:
            return await self._provider.get_series(ticker, window)

        return await build_matrix(symbols, _fetch, failure_policy, alignment)
