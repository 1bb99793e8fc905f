"""
Logging utilities for the OAuth proxy.

Provides a consistent logging format and keeps credentials out of log lines.
"""

import logging
import sys

# httpx logs full request URLs at INFO, which would leak authorization codes.
_NOISY_LOGGERS = ("httpx", "httpcore")


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging with a sensible default format."""
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        stream=sys.stdout,
    )
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def mask_secret(value: str | None, visible: int = 8) -> str:
    """Shorten a code, token or secret to a recognisable but unusable prefix."""
    if not value:
        return "<none>"
    if len(value) <= visible:
        return "***"
    return f"{value[:visible]}***"


__all__ = ["configure_logging", "mask_secret"]
