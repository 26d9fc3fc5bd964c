"""Structured logging for SearchBlocker.

Two streams share one processor chain:

  - the application log (stdout), configured by ``configure_logging()``
  - the search log (a dedicated JSON-lines file), built by
    ``searchblocker.audit.search_log.SearchLog`` from ``file_processors()``

The request ID bound by RequestIdMiddleware lives in structlog's context
variables, so lines in both streams carry it without it being passed around.
"""

import logging
import sys
from typing import Any, Optional

import structlog
from structlog.types import Processor

REQUEST_ID_KEY = "request_id"


def _base_processors() -> list[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]


def file_processors() -> list[Processor]:
    """Processor chain for append-only JSON-lines file sinks."""
    return [*_base_processors(), structlog.processors.JSONRenderer()]


def configure_logging(
    log_level: str = "INFO",
    json_output: bool = True
) -> None:
    """Configure the application log stream.

    Args:
        log_level: Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
                   Unknown names fall back to INFO.
        json_output: JSON lines when True, colored console output when False.
    """
    processors: list[Processor] = [
        *_base_processors(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if json_output:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    level = getattr(logging, log_level.upper(), None)
    if not isinstance(level, int):
        level = logging.INFO

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str = "searchblocker") -> Any:
    """Return a structlog logger named after the calling module."""
    return structlog.get_logger(name)


# ─── Request ID context ──────────────────────────────────────────────────────


def set_request_id(request_id: str) -> None:
    structlog.contextvars.bind_contextvars(**{REQUEST_ID_KEY: request_id})


def clear_request_id() -> None:
    structlog.contextvars.unbind_contextvars(REQUEST_ID_KEY)


def current_request_id() -> Optional[str]:
    return structlog.contextvars.get_contextvars().get(REQUEST_ID_KEY)


# Defaults until main.py reconfigures from the environment.
configure_logging()
