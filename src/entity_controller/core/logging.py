"""
Structured logging for entity-controller.

Manifesto:
    Persistence calls are where production incidents surface first, so
    DAO writes and controller branches log structured events that a log
    pipeline can filter by entity and operation.

    - **Structures:** JSON output for log aggregation
    - **Correlates:** request or unit-of-work ids via bound context
    - **Flexes:** Console output for development, JSON for production

Architecture:
    ::

        configure_logging(level="INFO", json_format=True, service="billing")
            ↓
        structlog processor chain:
            1. TimeStamper(iso)
            2. merge_contextvars
            3. add_log_level
            4. add_service_metadata
            5. JSONRenderer (or ConsoleRenderer for dev)

Examples:
    >>> from entity_controller.core.logging import configure_logging, get_logger
    >>> configure_logging(level="DEBUG", json_format=True, service="billing")
    >>> logger = get_logger(__name__)
    >>> logger.debug("entity_saved", entity="Invoice", entity_id=7)

Tags:
    logging, structlog, observability, entity-controller
"""

from __future__ import annotations

import logging
import sys
from typing import Any, TextIO

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

from entity_controller.core.errors import ConfigError
from entity_controller.core.settings import LOG_LEVELS, ControllerSettings, get_settings

_SERVICE_NAME = "entity-controller"


def _add_service_metadata(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Add service-level metadata to all logs."""
    event_dict.setdefault("service.name", _SERVICE_NAME)
    return event_dict


def _elasticsearch_compatible(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Make field names Elasticsearch/ECS compatible."""
    if "timestamp" in event_dict:
        event_dict["@timestamp"] = event_dict.pop("timestamp")
    if "level" in event_dict:
        event_dict["log.level"] = event_dict.pop("level")
    if "logger_name" in event_dict:
        event_dict["log.logger"] = event_dict.pop("logger_name")
    return event_dict


def configure_logging(
    level: str = "INFO",
    json_format: bool | None = None,
    service: str = "entity-controller",
    add_timestamp: bool = True,
    stream: TextIO | None = None,
    cache_logger_on_first_use: bool = True,
) -> None:
    """Configure structured logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: True for JSON, False for console, None for auto (JSON if not tty)
        service: Service name to include in logs
        add_timestamp: Include ISO timestamp in logs
        stream: Output stream (default: ``sys.stdout`` at call time)
        cache_logger_on_first_use: Freeze module-level loggers on first use.
            Pass False when logging is reconfigured later, e.g. in tests.

    Raises:
        ConfigError: If ``level`` is not a known log level.
    """
    normalized = level.upper()
    if normalized not in LOG_LEVELS:
        raise ConfigError(
            f"Unknown log level {level!r}, expected one of {sorted(LOG_LEVELS)}"
        )
    numeric_level = getattr(logging, normalized)

    global _SERVICE_NAME
    _SERVICE_NAME = service

    if stream is None:
        stream = sys.stdout
    if json_format is None:
        json_format = not stream.isatty()

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        _add_service_metadata,
    ]

    if add_timestamp:
        shared_processors.insert(0, structlog.processors.TimeStamper(fmt="iso"))

    if json_format:
        shared_processors.append(_elasticsearch_compatible)
        renderer: Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=True)

    structlog.configure(
        processors=shared_processors + [renderer],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(stream),
        cache_logger_on_first_use=cache_logger_on_first_use,
    )

    # SQLAlchemy and other stdlib loggers go to the same stream
    logging.basicConfig(format="%(message)s", stream=stream, level=numeric_level)


def configure_logging_from_settings(
    settings: ControllerSettings | None = None, **kwargs: Any
) -> None:
    """Configure logging from ``log_level`` / ``json_logs`` in *settings*.

    Falls back to :func:`~entity_controller.core.settings.get_settings`.
    Extra keyword arguments go to :func:`configure_logging`.
    """
    if settings is None:
        settings = get_settings()
    configure_logging(level=settings.log_level, json_format=settings.json_logs, **kwargs)


def get_logger(name: str | None = None) -> Any:
    """Get a structured logger (usually ``get_logger(__name__)``).

    The name travels as the ``logger_name`` initial value (``log.logger`` in
    JSON output); the configured processors are resolved lazily, on first use.
    """
    if name:
        return structlog.get_logger(logger_name=name)
    return structlog.get_logger()


def bind_context(**kwargs: Any) -> None:
    """Bind context to include in all subsequent logs.

    Example:
        bind_context(request_id="abc123")
        logger.info("entity_saved")  # Includes request_id
    """
    structlog.contextvars.bind_contextvars(**kwargs)


def unbind_context(*keys: str) -> None:
    """Remove specific keys from logging context."""
    structlog.contextvars.unbind_contextvars(*keys)


def clear_context() -> None:
    """Clear all bound context."""
    structlog.contextvars.clear_contextvars()


class LogContext:
    """Context manager for scoped logging context.

    Example:
        with LogContext(unit_of_work="checkout", request_id="abc123"):
            controller.save_or_update(order)
        # Context cleared here
    """

    def __init__(self, **kwargs: Any):
        self._context = kwargs

    def __enter__(self) -> LogContext:
        bind_context(**self._context)
        return self

    def __exit__(self, *args: Any) -> None:
        unbind_context(*self._context.keys())


__all__ = [
    "configure_logging",
    "configure_logging_from_settings",
    "get_logger",
    "bind_context",
    "unbind_context",
    "clear_context",
    "LogContext",
]
