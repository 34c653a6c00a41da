"""
Domain entities for price-history series and the analytics derived from them.
Zero external dependencies: pure Python dataclasses only.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterator, Mapping, Optional


@dataclass(frozen=True)
class PricePoint:
    price: float
    observed_at: str


@dataclass(frozen=True)
class PriceSeries:
    """Samples for one ticker, in the order the provider delivered them."""

    ticker: str
    points: tuple[PricePoint, ...]

    def __len__(self) -> int:
        return len(self.points)

    def __iter__(self) -> Iterator[PricePoint]:
        return iter(self.points)

    @property
    def prices(self) -> list[float]:
        return [point.price for point in self.points]

    def head(self, length: int) -> "PriceSeries":
        return PriceSeries(ticker=self.ticker, points=self.points[:length])


@dataclass(frozen=True)
class TickerStats:
    ticker: str
    average_price: float
    std_dev: float
    series_length: int


CORRELATION_DEFINED = "defined"
CORRELATION_UNDEFINED = "undefined"


@dataclass(frozen=True)
class CorrelationResult:
    """Outcome of correlating two tickers.

    ``coefficient`` is None exactly when ``status`` is ``"undefined"``
    (one of the aligned series had zero variance).
    """

    ticker_a: str
    ticker_b: str
    coefficient: Optional[float]
    status: str
    stats_a: Optional[TickerStats] = None
    stats_b: Optional[TickerStats] = None

    @property
    def is_defined(self) -> bool:
        return self.status == CORRELATION_DEFINED


@dataclass(frozen=True)
class CorrelationMatrix:
    tickers: tuple[str, ...]
    matrix: tuple[tuple[Optional[float], ...], ...]
    stats: Mapping[str, TickerStats]
    undefined_pairs: tuple[tuple[str, str], ...] = ()
    errors: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "stats", MappingProxyType(dict(self.stats)))
        object.__setattr__(self, "errors", MappingProxyType(dict(self.errors)))

    def coefficient(self, ticker_a: str, ticker_b: str) -> Optional[float]:
        i = self.tickers.index(ticker_a)
        j = self.tickers.index(ticker_b)
        return self.matrix[i][j]
