"""
Domain service: symmetric correlation matrix plus per-ticker statistics.

Series are fetched concurrently inside an asyncio.TaskGroup; the coefficients
are then computed in lexicographic pair order.  Under WHOLE_OR_NOTHING the
first failure cancels the sibling fetches and is re-raised as-is.
"""

import asyncio
import logging
from enum import Enum
from typing import Awaitable, Callable, Optional, Sequence

from src.domain.entities.price_series import CorrelationMatrix, PriceSeries, TickerStats
from src.domain.errors import AnalyticsError, InvalidRequest, UndefinedCorrelation
from src.domain.services.aggregator import ticker_stats
from src.domain.services.correlation_engine import AlignmentPolicy, correlate

logger = logging.getLogger(__name__)

SeriesFetcher = Callable[[str], Awaitable[PriceSeries]]


class MatrixFailurePolicy(str, Enum):
    WHOLE_OR_NOTHING = "whole"
    NULL_CELLS = "null"


def distinct_tickers(tickers: Sequence[str]) -> list[str]:
    return list(dict.fromkeys(tickers))


def pair_key(ticker_a: str, ticker_b: str) -> str:
    return f"{ticker_a}|{ticker_b}"


async def fetch_concurrently(
    tickers: Sequence[str],
    fetch: SeriesFetcher,
    failure_policy: MatrixFailurePolicy = MatrixFailurePolicy.WHOLE_OR_NOTHING,
) -> tuple[dict[str, PriceSeries], dict[str, str]]:
    """Fetch one series per ticker, all at once.

    Returns the fetched series and, under NULL_CELLS, the error kind of every
    ticker that could not be fetched.
    """
    series: dict[str, PriceSeries] = {}
    errors: dict[str, str] = {}

    async def _fetch_one(ticker: str) -> None:
        try:
            series[ticker] = await fetch(ticker)
        except AnalyticsError as exc:
            if failure_policy is MatrixFailurePolicy.WHOLE_OR_NOTHING:
                raise
            logger.warning("Fetching %s failed, leaving its cells empty: %s", ticker, exc)
            errors[ticker] = exc.kind

    try:
        async with asyncio.TaskGroup() as group:
            for ticker in tickers:
                group.create_task(_fetch_one(ticker))
    except BaseExceptionGroup as group_error:
        raise _first_error(group_error)

    return series, errors


def _first_error(group_error: BaseExceptionGroup) -> BaseException:
    error: BaseException = group_error
    while isinstance(error, BaseExceptionGroup):
        error = error.exceptions[0]
    return error


async def build_matrix(
    tickers: Sequence[str],
    fetch: SeriesFetcher,
    failure_policy: MatrixFailurePolicy = MatrixFailurePolicy.WHOLE_OR_NOTHING,
    alignment: AlignmentPolicy = AlignmentPolicy.POSITIONAL_TRUNCATION,
) -> CorrelationMatrix:
    """Correlate every unordered pair of *tickers*.

    Args:
        tickers:        Ticker ids; duplicates are dropped, first occurrence wins.
        fetch:          Coroutine function returning the series of one ticker.
        failure_policy: Fail the whole matrix on the first error, or record it
                        and leave the affected cells as None.
        alignment:      How each pair of series is aligned before correlating.

    Raises:
        InvalidRequest: fewer than two distinct tickers.
        AnalyticsError: any fetch or computation failure under WHOLE_OR_NOTHING.
    """
    ordered = distinct_tickers(tickers)
    if len(ordered) < 2:
        raise InvalidRequest(f"A correlation matrix needs at least 2 distinct tickers, got {ordered}")

    series, errors = await fetch_concurrently(ordered, fetch, failure_policy)
    whole_or_nothing = failure_policy is MatrixFailurePolicy.WHOLE_OR_NOTHING

    stats: dict[str, TickerStats] = {}
    for ticker in ordered:
        if ticker not in series:
            continue
        try:
            stats[ticker] = ticker_stats(series[ticker])
        except AnalyticsError as exc:
            if whole_or_nothing:
                raise
            errors[ticker] = exc.kind

    n = len(ordered)
    cells: list[list[Optional[float]]] = [[None] * n for _ in range(n)]
    for i in range(n):
        cells[i][i] = 1.0

    undefined_pairs: list[tuple[str, str]] = []
    for i in range(n - 1):
        for j in range(i + 1, n):
            a, b = ordered[i], ordered[j]
            if a not in series or b not in series:
                continue
            try:
                coefficient = correlate(series[a], series[b], alignment)
            except UndefinedCorrelation:
                undefined_pairs.append((a, b))
                continue
            except AnalyticsError as exc:
                if whole_or_nothing:
                    raise
                errors[pair_key(a, b)] = exc.kind
                continue
            cells[i][j] = coefficient
            cells[j][i] = coefficient

    logger.debug(
        "Built %dx%d correlation matrix (%d undefined, %d errors)",
        n, n, len(undefined_pairs), len(errors),
    )
    return CorrelationMatrix(
        tickers=tuple(ordered),
        matrix=tuple(tuple(row) for row in cells),
        stats=stats,
        undefined_pairs=tuple(undefined_pairs),
        errors=errors,
    )
