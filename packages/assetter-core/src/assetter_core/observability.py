"""Structured logging setup for assetter.

Library modules only call ``structlog.get_logger(__name__)``; applications
(the CLI, a web server mounting the pipeline) decide where events go by
calling configure_logging() once at startup.
"""

from __future__ import annotations

import logging
import sys
from typing import IO, Any

import structlog


def configure_logging(
    *,
    log_level: str = "INFO",
    json_format: bool = False,
    add_timestamp: bool = True,
    stream: IO[str] | None = None,
) -> None:
    """Configure structured logging for assetter.

    Args:
        log_level: Minimum log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        json_format: If True, output JSON lines. If False, output human-readable.
        add_timestamp: If True, add ISO timestamp to log entries.
        stream: Destination of log lines. Defaults to the current stderr.

    Example:
        >>> configure_logging(log_level="DEBUG", json_format=True)
    """
    processors: list[Any] = [
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if add_timestamp:
        processors.insert(0, structlog.processors.TimeStamper(fmt="iso"))

    if json_format:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(log_level.upper())
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=stream or sys.stderr),
        cache_logger_on_first_use=False,
    )
