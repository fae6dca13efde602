"""
Structured logging for the registry: event_type, subject, profiler, caller.

Configured once on first import from LOG_LEVEL / LOG_FORMAT, read after the
project .env is loaded. configure_logging() can be called again with explicit
values; loggers bound earlier keep the configuration they were created with.

Depends only on structlog and config/env.py (dotenv), never on the ledger.
"""

from __future__ import annotations

import logging
import sys
from datetime import datetime, timezone
from typing import Any

import structlog

from identity_registry.config.env import env_str, load_registry_env

LOG_FORMATS = ("json", "console")

# Effective values of the last configure_logging() call
LOG_LEVEL = "INFO"
LOG_FORMAT = "json"


def _timestamp(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    event_dict.setdefault("timestamp", datetime.now(timezone.utc).isoformat())
    return event_dict


def _event_type(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """structlog's positional 'event' becomes event_type; message mirrors it when absent."""
    if "event" in event_dict and "event_type" not in event_dict:
        event_dict["event_type"] = event_dict.pop("event")
    if "event_type" in event_dict:
        event_dict.setdefault("message", str(event_dict["event_type"]))
    return event_dict


def _resolve(level: str | None, fmt: str | None) -> tuple[str, str]:
    load_registry_env()
    level = (level or env_str("LOG_LEVEL", "INFO")).strip().upper()
    if not isinstance(getattr(logging, level, None), int):
        level = "INFO"
    fmt = (fmt or env_str("LOG_FORMAT", "json")).strip().lower()
    if fmt not in LOG_FORMATS:
        fmt = "json"
    return level, fmt


def configure_logging(level: str | None = None, fmt: str | None = None) -> None:
    """
    Configure structlog for the process.

    level / fmt override LOG_LEVEL / LOG_FORMAT; unknown values fall back to
    INFO and json.
    """
    global LOG_LEVEL, LOG_FORMAT
    LOG_LEVEL, LOG_FORMAT = _resolve(level, fmt)

    renderer: Any
    if LOG_FORMAT == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            _timestamp,
            _event_type,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, LOG_LEVEL)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=True,
    )


if not structlog.is_configured():
    configure_logging()


def get_logger(name: str) -> structlog.BoundLogger:
    """
    Structured logger for a module.

        logger = get_logger(__name__)
        logger.info("token_created", subject=addr, caller=issuer)
    """
    return structlog.get_logger(name).bind(logger=name)


def bind_subject(logger: structlog.BoundLogger, subject: str) -> structlog.BoundLogger:
    """logger with subject attached to every call."""
    return logger.bind(subject=subject)
