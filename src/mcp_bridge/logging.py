"""Structured logging configuration using structlog.

The bridge logs one event per lifecycle step, each tagged with ``server``:
``mcp_connect_start``, ``mcp_connect``, ``mcp_connect_failed``,
``mcp_already_connected``, ``mcp_discovery``, ``mcp_discovery_failed``,
``mcp_call``, ``mcp_disconnect`` and ``mcp_disconnect_failed``. Info events
drop to debug unless the manager was created with ``trace=True``.
"""

import logging

import structlog
from structlog.contextvars import merge_contextvars
from structlog.dev import ConsoleRenderer
from structlog.processors import JSONRenderer, TimeStamper, add_log_level

_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

_log_level = logging.INFO


def _filter_by_level(logger, method_name, event_dict):
    """Drop events below the configured level."""
    method_level = _LEVELS.get(method_name.upper(), logging.INFO)
    if method_level >= _log_level:
        return event_dict
    raise structlog.DropEvent()


def configure_logging(json_output: bool = False, level: str = "INFO"):
    """Configure structlog for bridge lifecycle events.

    Args:
        json_output: If True, render one JSON object per line. If False, use the console renderer.
        level: Minimum level name ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL").
    """
    global _log_level
    _log_level = _LEVELS.get(level.upper(), logging.INFO)

    processors = [
        merge_contextvars,
        _filter_by_level,
        add_log_level,
        TimeStamper(fmt="iso"),
        JSONRenderer() if json_output else ConsoleRenderer(),
    ]

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str):
    """Get a bound logger instance with the given name.

    Args:
        name: Logger name (typically __name__ of calling module).

    Returns:
        A structlog bound logger instance.
    """
    return structlog.get_logger(name)
