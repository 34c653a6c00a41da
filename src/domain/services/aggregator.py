"""
Domain service: reduce a PriceSeries to scalar statistics.
Pure functions over immutable entities, free of I/O and third-party imports.
"""

import math
from typing import Sequence

from src.domain.entities.price_series import PriceSeries, TickerStats
from src.domain.errors import EmptySeries, InsufficientSamples


def mean(prices: Sequence[float]) -> float:
    return sum(prices) / len(prices)


def is_constant(prices: Sequence[float]) -> bool:
    return min(prices) == max(prices)


def sample_std_dev(prices: Sequence[float], avg: float) -> float:
    """Standard deviation with Bessel's correction around a precomputed *avg*.

    A constant series is exactly 0.0: the float mean of repeated prices such
    as 0.1 is not always the price itself.
    """
    if is_constant(prices):
        return 0.0
    return math.sqrt(sum((p - avg) ** 2 for p in prices) / (len(prices) - 1))


def average(series: PriceSeries) -> float:
    """Arithmetic mean of every price in *series*, in delivery order.

    Raises:
        EmptySeries: if *series* has no samples.
    """
    if len(series) == 0:
        raise EmptySeries(f"Cannot average an empty series for {series.ticker!r}")
    return mean(series.prices)


def ticker_stats(series: PriceSeries) -> TickerStats:
    """Average and sample standard deviation over the full *series*.

    Raises:
        EmptySeries: if *series* has no samples.
        InsufficientSamples: if *series* has a single sample.
    """
    avg = average(series)
    if len(series) < 2:
        raise InsufficientSamples(
            f"Standard deviation of {series.ticker!r} needs at least 2 samples, got {len(series)}"
        )
    return TickerStats(
        ticker=series.ticker,
        average_price=avg,
        std_dev=sample_std_dev(series.prices, avg),
        series_length=len(series),
    )
