"""Logging infrastructure for job-invoker."""

from __future__ import annotations

import logging
import logging.config
import socket
import sys
from typing import Any

import structlog
from structlog.typing import EventDict, WrappedLogger

__all__ = [
    "configure_logging",
    "console_formatter",
    "get_logger",
    "json_formatter",
]


def _add_hostname(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Add hostname to log context if not already present."""
    if "hostname" not in event_dict:
        event_dict["hostname"] = socket.gethostname()
    return event_dict


def _shared_processors() -> list[Any]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        _add_hostname,
        structlog.processors.StackInfoRenderer(),
    ]


def json_formatter() -> structlog.stdlib.ProcessorFormatter:
    """Formatter rendering one JSON object per line.

    Usable as a ``()`` factory from a dictConfig document.
    """
    return structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        foreign_pre_chain=_shared_processors(),
    )


def console_formatter(colors: bool = False) -> structlog.stdlib.ProcessorFormatter:
    """Human-readable formatter, usable as a ``()`` factory from a dictConfig document."""
    return structlog.stdlib.ProcessorFormatter(
        processor=structlog.dev.ConsoleRenderer(colors=colors),
        foreign_pre_chain=_shared_processors(),
    )


def configure_logging(level: int = logging.INFO, dict_config: dict[str, Any] | None = None) -> None:
    """Configure structlog to render through stdlib logging handlers.

    Args:
        level: Minimum level of the default stderr handler
        dict_config: Optional ``logging.config.dictConfig`` document replacing
            the default handler setup

    Without ``dict_config`` a single stderr handler with the console renderer
    is installed on the root logger.
    """
    structlog.configure(
        processors=_shared_processors()
        + [
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    if dict_config is not None:
        logging.config.dictConfig(dict_config)
        return

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(console_formatter(colors=sys.stderr.isatty()))

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)


def get_logger(name: str, **context: Any) -> structlog.stdlib.BoundLogger:
    """Get a logger with bound context.

    Args:
        name: Logger name (typically the module or job name)
        **context: Additional context to bind (e.g., job, source)

    Returns:
        BoundLogger with context
    """
    logger = structlog.get_logger(name)
    if context:
        logger = logger.bind(**context)
    return logger
