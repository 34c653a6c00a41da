"""
FastAPI entry point for the stock analytics HTTP API.

This module is the Composition Root: it loads configuration, configures
logging, wires the HttpQuoteProvider adapter into the application use-cases
and maps the analytics error taxonomy onto HTTP status codes.

Run locally:
    uvicorn src.infrastructure.entrypoints.fastapi_app:app --reload --port 3001
"""

import logging
from enum import Enum
from typing import Optional, TypeVar

from dotenv import load_dotenv
from fastapi import FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

load_dotenv()

from src.application.use_cases.build_correlation_matrix import BuildCorrelationMatrixUseCase  # noqa: E402
from src.application.use_cases.correlate_tickers import CorrelateTickersUseCase  # noqa: E402
from src.application.use_cases.get_latest_price import GetLatestPriceUseCase  # noqa: E402
from src.application.use_cases.get_ticker_aggregate import GetTickerAggregateUseCase  # noqa: E402
from src.application.use_cases.list_tickers import ListTickersUseCase  # noqa: E402
from src.domain.errors import (  # noqa: E402
    AnalyticsError,
    EmptySeries,
    InsufficientSamples,
    InvalidRequest,
    ProviderUnavailable,
    UndefinedCorrelation,
    UnknownTicker,
)
from src.domain.ports.quote_provider_port import IQuoteProvider  # noqa: E402
from src.domain.services.correlation_engine import AlignmentPolicy  # noqa: E402
from src.domain.services.matrix_builder import MatrixFailurePolicy  # noqa: E402
from src.infrastructure.config.settings import Settings  # noqa: E402
from src.infrastructure.entrypoints.api_schemas import (  # noqa: E402
    CorrelationMatrixResponse,
    CorrelationResponse,
    LatestPriceResponse,
    TickerListResponse,
    aggregate_response,
)
from src.infrastructure.observability.logging_config import configure_logging  # noqa: E402
from src.infrastructure.quote_provider.http_quote_provider import HttpQuoteProvider  # noqa: E402

logger = logging.getLogger(__name__)

STATUS_BY_KIND = {
    InvalidRequest.kind: 400,
    UnknownTicker.kind: 404,
    EmptySeries.kind: 422,
    InsufficientSamples.kind: 422,
    UndefinedCorrelation.kind: 422,
    ProviderUnavailable.kind: 502,
}

E = TypeVar("E", bound=Enum)


def _parse_option(enum_cls: type[E], value: Optional[str], name: str, default: E) -> E:
    if value is None or value == "":
        return default
    try:
        return enum_cls(value.strip().lower())
    except ValueError as exc:
        allowed = ", ".join(repr(member.value) for member in enum_cls)
        raise InvalidRequest(f"Unsupported {name} {value!r}; expected one of {allowed}") from exc


def create_app(
    provider: Optional[IQuoteProvider] = None,
    settings: Optional[Settings] = None,
) -> FastAPI:
    """Wire the use-cases to *provider* and return the FastAPI application.

    Args:
        provider: IQuoteProvider implementation; defaults to an HttpQuoteProvider
                  built from *settings*.
        settings: Runtime configuration; defaults to Settings.from_env().
    """
    settings = settings or Settings.from_env()
    if provider is None:
        if not settings.access_token:
            logger.warning("ACCESS_TOKEN is not set; upstream requests will be unauthenticated")
        provider = HttpQuoteProvider(
            base_url=settings.quote_api_base_url,
            access_token=settings.access_token,
            timeout=settings.quote_api_timeout_seconds,
        )

    list_tickers_uc = ListTickersUseCase(provider)
    latest_price_uc = GetLatestPriceUseCase(provider)
    aggregate_uc = GetTickerAggregateUseCase(provider)
    correlate_uc = CorrelateTickersUseCase(provider)
    matrix_uc = BuildCorrelationMatrixUseCase(provider)

    app = FastAPI(title="Stock Correlation API")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_allow_origins),
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    @app.exception_handler(AnalyticsError)
    async def handle_analytics_error(request: Request, exc: AnalyticsError) -> JSONResponse:
        status_code = STATUS_BY_KIND.get(exc.kind, 500)
        log = logger.error if status_code >= 500 else logger.warning
        log("%s %s failed with %s: %s", request.method, request.url.path, exc.kind, exc.message)
        return JSONResponse(status_code=status_code, content={"error": exc.message, "kind": exc.kind})

    @app.get("/", response_class=PlainTextResponse)
    async def root() -> str:
        return "Backend is running. Try /stocks/{ticker} or /stockcorrelation."

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    @app.get("/stocks", response_model=TickerListResponse)
    async def list_stocks():
        return TickerListResponse(stocks=await list_tickers_uc.execute())

    @app.get("/stocks/{ticker}")
    async def stock_data(
        ticker: str,
        minutes: Optional[str] = None,
        aggregation: Optional[str] = None,
    ):
        """Latest price without *minutes*; history or its average with it."""
        if minutes is None or minutes == "":
            point = await latest_price_uc.execute(ticker)
            return LatestPriceResponse(
                ticker=ticker.strip().upper(),
                price=point.price,
                lastUpdatedAt=point.observed_at,
            )
        return aggregate_response(await aggregate_uc.execute(ticker, minutes, aggregation))

    @app.get("/stockcorrelation", response_model=CorrelationResponse)
    async def stock_correlation(
        ticker: list[str] = Query(default=[]),
        minutes: Optional[str] = None,
        alignment: Optional[str] = None,
    ):
        policy = _parse_option(
            AlignmentPolicy, alignment, "alignment", AlignmentPolicy.POSITIONAL_TRUNCATION
        )
        report = await correlate_uc.execute(ticker, minutes, alignment=policy)
        return CorrelationResponse.from_report(report)

    @app.get("/stockcorrelation/matrix", response_model=CorrelationMatrixResponse)
    async def stock_correlation_matrix(
        ticker: list[str] = Query(default=[]),
        minutes: Optional[str] = None,
        failure_policy: Optional[str] = Query(default=None, alias="failurePolicy"),
        alignment: Optional[str] = None,
    ):
        on_failure = _parse_option(
            MatrixFailurePolicy, failure_policy, "failurePolicy", MatrixFailurePolicy.WHOLE_OR_NOTHING
        )
        policy = _parse_option(
            AlignmentPolicy, alignment, "alignment", AlignmentPolicy.POSITIONAL_TRUNCATION
        )
        matrix = await matrix_uc.execute(ticker, minutes, failure_policy=on_failure, alignment=policy)
        return CorrelationMatrixResponse.from_matrix(matrix)

    return app


# ---------------------------------------------------------------------------
# Composition Root: wire all dependencies once at startup
# ---------------------------------------------------------------------------
_settings = Settings.from_env()
configure_logging(_settings.log_level)
app = create_app(settings=_settings)
