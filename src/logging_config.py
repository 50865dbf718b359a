"""Structured logging setup shared by the decoder, builder and CLI."""

from __future__ import annotations

import logging
import os
import sys
from typing import Optional

import structlog


def configure_logging(level: Optional[str] = None, *, json_output: Optional[bool] = None) -> None:
    """Configure stdlib logging and structlog for the whole process.

    The level defaults to ``ATIS_LOG_LEVEL`` (INFO when unset) and JSON output
    is enabled with ``ATIS_LOG_JSON=1``.
    """
    level_name = (level or os.getenv("ATIS_LOG_LEVEL", "INFO")).upper()
    log_level = getattr(logging, level_name, logging.INFO)
    if json_output is None:
        json_output = os.getenv("ATIS_LOG_JSON", "0").lower() in ("1", "true", "yes")

    logging.basicConfig(
        level=log_level,
        format="%(message)s",
        stream=sys.stderr,
        force=True,
    )

    # aiohttp access/client chatter is only useful when debugging downloads
    if log_level > logging.DEBUG:
        logging.getLogger("aiohttp").setLevel(logging.WARNING)

    renderer = structlog.processors.JSONRenderer() if json_output else structlog.dev.ConsoleRenderer()
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
