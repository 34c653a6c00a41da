"""
Runtime configuration read from environment variables.

The composition root calls load_dotenv() first, so values may also come from a
local .env file.  The upstream bearer credential lives here and is injected into
HttpQuoteProvider at construction; nothing else reads it.
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

DEFAULT_QUOTE_API_BASE_URL = "http://20.244.56.144/evaluation-service"
DEFAULT_TIMEOUT_SECONDS = 10.0


@dataclass(frozen=True)
class Settings:
    access_token: str = ""
    quote_api_base_url: str = DEFAULT_QUOTE_API_BASE_URL
    quote_api_timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    log_level: str = "INFO"
    cors_allow_origins: tuple[str, ...] = ("*",)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """Build settings from *environ* (defaults to os.environ).

        Raises:
            ValueError: if QUOTE_API_TIMEOUT_SECONDS is not a positive number.
        """
        env = os.environ if environ is None else environ

        raw_timeout = env.get("QUOTE_API_TIMEOUT_SECONDS", str(DEFAULT_TIMEOUT_SECONDS))
        try:
            timeout = float(raw_timeout)
        except ValueError as exc:
            raise ValueError(
                f"QUOTE_API_TIMEOUT_SECONDS must be a number, got {raw_timeout!r}"
            ) from exc
        if timeout <= 0:
            raise ValueError(f"QUOTE_API_TIMEOUT_SECONDS must be positive, got {timeout}")

        origins = tuple(
            origin.strip()
            for origin in env.get("CORS_ALLOW_ORIGINS", "*").split(",")
            if origin.strip()
        )
        return cls(
            access_token=env.get("ACCESS_TOKEN", ""),
            quote_api_base_url=env.get("QUOTE_API_BASE_URL", DEFAULT_QUOTE_API_BASE_URL).rstrip("/"),
            quote_api_timeout_seconds=timeout,
            log_level=env.get("LOG_LEVEL", "INFO").upper(),
            cors_allow_origins=origins or ("*",),
        )
