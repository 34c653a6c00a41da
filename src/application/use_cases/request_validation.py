"""
Input checks shared by the use-cases.
Everything here raises InvalidRequest before any upstream call is made.
"""

from typing import Sequence, Union

from src.domain.errors import InvalidRequest


def normalize_ticker(ticker: str) -> str:
    if not ticker or not ticker.strip():
        raise InvalidRequest("ticker must be a non-empty string")
    return ticker.strip().upper()


def normalize_tickers(tickers: Sequence[str]) -> list[str]:
    return [normalize_ticker(ticker) for ticker in tickers]


def validate_window(minutes: Union[int, str, None]) -> int:
    """Parse *minutes* into a positive whole number of minutes."""
    if minutes is None or isinstance(minutes, bool):
        raise InvalidRequest("Provide a valid 'minutes' parameter")
    try:
        window = int(str(minutes).strip())
    except ValueError as exc:
        raise InvalidRequest(f"'minutes' must be a whole number, got {minutes!r}") from exc
    if window <= 0:
        raise InvalidRequest(f"'minutes' must be positive, got {window}")
    return window
