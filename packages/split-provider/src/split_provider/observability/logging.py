"""Structured logging configuration for split-provider.

Event naming convention: dot.notation, ``domain.entity.verb`` (for example
``split.http.request`` or ``split.users.find.page``).

Usage:
    from split_provider.observability import configure_logging, get_logger

    configure_logging("DEBUG")  # defaults to WARNING on stderr when never called
    log = get_logger(__name__)
    log.info("split.users.find.started", email=email)
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

SENSITIVE_KEYS = frozenset({"api_key", "authorization", "token", "password"})

_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def _get_log_level(level_str: str) -> int:
    return _LEVELS.get(level_str.upper(), logging.WARNING)


def _redact_sensitive(
    _logger: Any,
    _method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Structlog processor replacing credential-like values with a marker."""
    for key in list(event_dict):
        if key.lower() in SENSITIVE_KEYS:
            event_dict[key] = "<REDACTED>"
    return event_dict


def _stderr_logger(*_args: Any) -> structlog.PrintLogger:
    # Resolve sys.stderr per logger so redirected streams are honoured.
    return structlog.PrintLogger(file=sys.stderr)


def configure_logging(level: str = "WARNING", *, json: bool = False) -> None:
    """Configure structlog for console output on stderr.

    Args:
        level: Minimum level name; unknown names fall back to WARNING.
        json: Render JSON lines instead of the human-readable console format.
    """
    renderers: list[Any]
    if json:
        renderers = [structlog.processors.dict_tracebacks, structlog.processors.JSONRenderer()]
    else:
        renderers = [structlog.dev.ConsoleRenderer(colors=False)]

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            _redact_sensitive,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            *renderers,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(_get_log_level(level)),
        logger_factory=_stderr_logger,
        cache_logger_on_first_use=False,
    )


def get_logger(name: str | None = None) -> structlog.typing.FilteringBoundLogger:
    if name:
        return structlog.get_logger(name)
    return structlog.get_logger()


def _configure_default() -> None:
    # structlog's own defaults print every level to stdout.
    if not structlog.is_configured():
        configure_logging()


_configure_default()
