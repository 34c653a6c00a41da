"""
Error taxonomy shared by the analytics engine, its use-cases and adapters.
Every error carries a stable ``kind`` so callers can tell the cases apart
without inspecting messages.
"""


class AnalyticsError(Exception):
    kind = "AnalyticsError"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidRequest(AnalyticsError, ValueError):
    """Malformed input, rejected before any upstream call is made."""

    kind = "InvalidRequest"


class EmptySeries(AnalyticsError, ValueError):
    kind = "EmptySeries"


class InsufficientSamples(AnalyticsError, ValueError):
    """Fewer than two aligned samples; sample statistics need n - 1 >= 1."""

    kind = "InsufficientSamples"


class UndefinedCorrelation(AnalyticsError):
    """At least one aligned series has zero variance."""

    kind = "UndefinedCorrelation"

    def __init__(self, message: str, ticker_a: str = "", ticker_b: str = "") -> None:
        super().__init__(message)
        self.ticker_a = ticker_a
        self.ticker_b = ticker_b


class ProviderUnavailable(AnalyticsError):
    kind = "ProviderUnavailable"


class UnknownTicker(AnalyticsError):
    kind = "UnknownTicker"

    def __init__(self, ticker: str) -> None:
        super().__init__(f"Unknown ticker: {ticker!r}")
        self.ticker = ticker
