"""
Pydantic response models for the HTTP API.
Field names are the camelCase keys the dashboard consumes.
"""

from typing import Optional

from pydantic import BaseModel

from src.application.use_cases.correlate_tickers import CorrelationReport
from src.application.use_cases.get_ticker_aggregate import TickerAggregate
from src.domain.entities.price_series import CorrelationMatrix, PricePoint, PriceSeries, TickerStats
from src.domain.services.correlation_engine import round_coefficient


class PricePointModel(BaseModel):
    price: float
    lastUpdatedAt: str

    @classmethod
    def from_point(cls, point: PricePoint) -> "PricePointModel":
        return cls(price=point.price, lastUpdatedAt=point.observed_at)


def _history(series: PriceSeries) -> list[PricePointModel]:
    return [PricePointModel.from_point(point) for point in series]


def _rounded(value: Optional[float]) -> Optional[float]:
    return None if value is None else round_coefficient(value)


class TickerListResponse(BaseModel):
    stocks: list[str]


class LatestPriceResponse(BaseModel):
    ticker: str
    price: float
    lastUpdatedAt: str


class AveragePriceResponse(BaseModel):
    ticker: str
    aggregation: str
    minutes: int
    averagePrice: float


class PriceHistoryResponse(BaseModel):
    ticker: str
    priceHistory: list[PricePointModel]


def aggregate_response(aggregate: TickerAggregate) -> BaseModel:
    if aggregate.average_price is not None:
        return AveragePriceResponse(
            ticker=aggregate.ticker,
            aggregation=aggregate.mode.value,
            minutes=aggregate.window_minutes,
            averagePrice=aggregate.average_price,
        )
    return PriceHistoryResponse(ticker=aggregate.ticker, priceHistory=_history(aggregate.series))


class StockSummary(BaseModel):
    averagePrice: float
    priceHistory: list[PricePointModel]


class CorrelationResponse(BaseModel):
    correlation: Optional[float]
    status: str
    stocks: dict[str, StockSummary]

    @classmethod
    def from_report(cls, report: CorrelationReport) -> "CorrelationResponse":
        result = report.result
        stocks = {
            result.ticker_a: StockSummary(
                averagePrice=result.stats_a.average_price,
                priceHistory=_history(report.series_a),
            ),
            result.ticker_b: StockSummary(
                averagePrice=result.stats_b.average_price,
                priceHistory=_history(report.series_b),
            ),
        }
        return cls(correlation=_rounded(result.coefficient), status=result.status, stocks=stocks)


class TickerStatsModel(BaseModel):
    averagePrice: float
    stdDev: float
    seriesLength: int

    @classmethod
    def from_stats(cls, stats: TickerStats) -> "TickerStatsModel":
        return cls(
            averagePrice=stats.average_price,
            stdDev=stats.std_dev,
            seriesLength=stats.series_length,
        )


class CorrelationMatrixResponse(BaseModel):
    tickers: list[str]
    matrix: list[list[Optional[float]]]
    stats: dict[str, TickerStatsModel]
    undefinedPairs: list[list[str]]
    errors: dict[str, str]

    @classmethod
    def from_matrix(cls, matrix: CorrelationMatrix) -> "CorrelationMatrixResponse":
        return cls(
            tickers=list(matrix.tickers),
            matrix=[[_rounded(cell) for cell in row] for row in matrix.matrix],
            stats={ticker: TickerStatsModel.from_stats(s) for ticker, s in matrix.stats.items()},
            undefinedPairs=[list(pair) for pair in matrix.undefined_pairs],
            errors=dict(matrix.errors),
        )


class ErrorResponse(BaseModel):
    error: str
    kind: str
