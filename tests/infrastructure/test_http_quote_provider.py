from typing import Any

import httpx
import pytest

from src.domain.errors import ProviderUnavailable, UnknownTicker
from src.infrastructure.quote_provider.http_quote_provider import HttpQuoteProvider

BASE_URL = "http://stocks.example/evaluation-service"

HISTORY = [
    {"price": 231.95, "lastUpdatedAt": "2025-05-08T04:11:42.465706306Z"},
    {"price": 229.81, "lastUpdatedAt": "2025-05-08T04:12:05.465706306Z"},
]


def _provider(handler, token: str = "secret-token") -> HttpQuoteProvider:
    return HttpQuoteProvider(BASE_URL, access_token=token, transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_get_series_forwards_bearer_token_and_window() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=HISTORY)

    series = await _provider(handler).get_series("NVDA", 50)

    assert series.ticker == "NVDA"
    assert series.prices == [231.95, 229.81]
    assert series.points[1].observed_at == "2025-05-08T04:12:05.465706306Z"
    assert seen[0].headers["Authorization"] == "Bearer secret-token"
    assert seen[0].url.path == "/evaluation-service/stocks/NVDA"
    assert seen[0].url.params["minutes"] == "50"


@pytest.mark.asyncio
async def test_missing_token_sends_no_authorization_header() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=[])

    series = await _provider(handler, token="").get_series("NVDA", 5)

    assert len(series) == 0
    assert "Authorization" not in seen[0].headers


@pytest.mark.asyncio
async def test_list_tickers_reads_name_to_symbol_mapping() -> None:
    payload: dict[str, Any] = {"stocks": {"Nvidia Corporation": "NVDA", "PayPal Holdings, Inc.": "PYPL"}}

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/evaluation-service/stocks"
        return httpx.Response(200, json=payload)

    assert await _provider(handler).list_tickers() == {"NVDA", "PYPL"}


@pytest.mark.asyncio
async def test_list_tickers_accepts_plain_list() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"stocks": ["AAPL", "MSFT"]})

    assert await _provider(handler).list_tickers() == {"AAPL", "MSFT"}


@pytest.mark.asyncio
async def test_list_tickers_non_success_is_provider_unavailable() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, json={"message": "maintenance"})

    with pytest.raises(ProviderUnavailable, match="503"):
        await _provider(handler).list_tickers()


@pytest.mark.asyncio
async def test_get_latest_price() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert "minutes" not in request.url.params
        return httpx.Response(200, json={"stock": HISTORY[0]})

    point = await _provider(handler).get_latest_price("NVDA")

    assert point.price == 231.95


@pytest.mark.asyncio
async def test_not_found_is_unknown_ticker() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json={"message": "stock not found"})

    with pytest.raises(UnknownTicker) as excinfo:
        await _provider(handler).get_series("ZZZZ", 10)

    assert excinfo.value.ticker == "ZZZZ"


@pytest.mark.asyncio
async def test_network_error_is_provider_unavailable() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(ProviderUnavailable) as excinfo:
        await _provider(handler).get_series("NVDA", 10)

    assert isinstance(excinfo.value.__cause__, httpx.ConnectError)


@pytest.mark.asyncio
async def test_timeout_is_provider_unavailable() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("too slow", request=request)

    with pytest.raises(ProviderUnavailable):
        await _provider(handler).get_series("NVDA", 10)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload",
    [
        {"stock": HISTORY[0]},
        [{"price": "not-a-number", "lastUpdatedAt": "t"}],
        [{"lastUpdatedAt": "t"}],
    ],
)
async def test_malformed_history_is_provider_unavailable(payload: Any) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=payload)

    with pytest.raises(ProviderUnavailable):
        await _provider(handler).get_series("NVDA", 10)


@pytest.mark.asyncio
async def test_invalid_json_is_provider_unavailable() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=b"<html>oops</html>")

    with pytest.raises(ProviderUnavailable, match="malformed JSON"):
        await _provider(handler).get_series("NVDA", 10)
