"""
Structured logging for programlens.

structlog configured once at import. LOG_LEVEL picks the threshold
(default WARNING, so CLI output stays readable) and LOG_FORMAT picks the
renderer: "console" for humans, "json" for log aggregation.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Any

import structlog

LOG_LEVEL = os.getenv("LOG_LEVEL", "WARNING").upper()
LOG_LEVEL_VALUE = getattr(logging, LOG_LEVEL, logging.WARNING)

LOG_FORMAT = os.getenv("LOG_FORMAT", "console").strip().lower()


def configure_structlog() -> None:
    """Configure structlog processors, level filter and renderer."""
    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]
    if LOG_FORMAT == "json":
        processors.append(structlog.processors.format_exc_info)
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))
    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(LOG_LEVEL_VALUE),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


if not structlog.is_configured():
    configure_structlog()


def get_logger(name: str | None = None) -> Any:
    """Return a structlog logger bound to the given module name."""
    logger = structlog.get_logger()
    if name:
        return logger.bind(logger=name)
    return logger
