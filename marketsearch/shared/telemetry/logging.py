"""Logging configuration for the application."""

import logging
import sys

from marketsearch.core.config import get_settings

# Client libraries that log full request URLs at INFO. Store URLs carry the
# user's search term in the filter query string, so keep them at WARNING.
_QUIET_LOGGERS = ("httpx", "httpcore")


def setup_logging() -> None:
    """Configure application-wide logging.

    Level is DEBUG when settings.debug is True, otherwise INFO. Output goes
    to stdout. HTTP client loggers stay at WARNING unless debugging so
    search terms do not end up in request logs.
    """
    settings = get_settings()
    log_level = logging.DEBUG if settings.debug else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(log_level if settings.debug else logging.WARNING)
