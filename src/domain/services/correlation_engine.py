"""
Domain service: Pearson correlation between two price series.

Series of unequal length are aligned before anything is computed. The default
policy keeps the first ``min(len(a), len(b))`` samples of each by position;
matching on sample timestamps is a separate, opt-in policy because it changes
numeric results.
"""

import math
from decimal import ROUND_HALF_EVEN, Decimal
from enum import Enum
from typing import Optional

from src.domain.entities.price_series import PriceSeries
from src.domain.errors import EmptySeries, InsufficientSamples, UndefinedCorrelation
from src.domain.services.aggregator import is_constant, mean, sample_std_dev


class AlignmentPolicy(str, Enum):
    POSITIONAL_TRUNCATION = "positional"
    TIMESTAMP_JOIN = "timestamp"


def align(
    a: PriceSeries,
    b: PriceSeries,
    policy: AlignmentPolicy = AlignmentPolicy.POSITIONAL_TRUNCATION,
) -> tuple[PriceSeries, PriceSeries]:
    """Return the pairwise-comparable parts of *a* and *b*, equal in length."""
    if policy is AlignmentPolicy.TIMESTAMP_JOIN:
        return _join_on_timestamp(a, b)
    length = min(len(a), len(b))
    return a.head(length), b.head(length)


def _join_on_timestamp(a: PriceSeries, b: PriceSeries) -> tuple[PriceSeries, PriceSeries]:
    # First occurrence of each timestamp wins; output follows the order of a.
    by_time = {}
    for point in b:
        by_time.setdefault(point.observed_at, point)

    left, right = [], []
    for point in a:
        match = by_time.pop(point.observed_at, None)
        if match is not None:
            left.append(point)
            right.append(match)
    return (
        PriceSeries(ticker=a.ticker, points=tuple(left)),
        PriceSeries(ticker=b.ticker, points=tuple(right)),
    )


def correlate(
    a: PriceSeries,
    b: PriceSeries,
    policy: AlignmentPolicy = AlignmentPolicy.POSITIONAL_TRUNCATION,
) -> float:
    """Sample Pearson correlation coefficient of *a* and *b* after alignment.

    Raises:
        EmptySeries: nothing left to compare after alignment.
        InsufficientSamples: a single aligned sample.
        UndefinedCorrelation: either aligned series is constant.
    """
    aligned_a, aligned_b = align(a, b, policy)
    n = len(aligned_a)
    if n == 0:
        raise EmptySeries(f"No aligned samples for {a.ticker!r} and {b.ticker!r}")
    if n < 2:
        raise InsufficientSamples(
            f"Correlating {a.ticker!r} and {b.ticker!r} needs at least 2 aligned samples, got {n}"
        )

    prices_a = aligned_a.prices
    prices_b = aligned_b.prices
    # Decided on the prices, not on a float std dev that may come out as 1e-17.
    if is_constant(prices_a) or is_constant(prices_b):
        raise UndefinedCorrelation(
            f"Correlation of {a.ticker!r} and {b.ticker!r} is undefined: zero variance",
            ticker_a=a.ticker,
            ticker_b=b.ticker,
        )

    avg_a = mean(prices_a)
    avg_b = mean(prices_b)

    covariance = sum((x - avg_a) * (y - avg_b) for x, y in zip(prices_a, prices_b)) / (n - 1)
    std_dev_a = sample_std_dev(prices_a, avg_a)
    std_dev_b = sample_std_dev(prices_b, avg_b)
    return covariance / (std_dev_a * std_dev_b)


def try_correlate(
    a: PriceSeries,
    b: PriceSeries,
    policy: AlignmentPolicy = AlignmentPolicy.POSITIONAL_TRUNCATION,
) -> Optional[float]:
    """Like correlate(), but returns None when the correlation is undefined."""
    try:
        return correlate(a, b, policy)
    except UndefinedCorrelation:
        return None


def round_coefficient(value: float, places: int = 4) -> float:
    """Round half-to-even on the shortest decimal form of *value*.

    Working from ``repr`` keeps 0.12345 -> 0.1234 regardless of how the
    binary float happens to sit around the tie.
    """
    if not math.isfinite(value):
        raise ValueError(f"Cannot round non-finite coefficient {value!r}")
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_EVEN))
