"""
Process-wide logging setup, called once from the composition root.
Modules log through logging.getLogger(__name__) and never configure handlers.
"""

import logging

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Install the root handler at *level* (a standard level name).

    Raises:
        ValueError: if *level* is not a known logging level name.
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        raise ValueError(f"Unknown log level: {level!r}")
    logging.basicConfig(level=numeric_level, format=LOG_FORMAT)
    logging.getLogger("httpx").setLevel(max(numeric_level, logging.WARNING))
