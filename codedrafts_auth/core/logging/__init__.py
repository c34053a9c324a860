"""
Logging configuration module for structured logging.

This module configures the application's logging system using structlog.
It provides structured logging with JSON formatting for production and
human-readable console output for development.

The logging configuration includes:
- Timestamp formatting
- Log level inclusion and filtering
- JSON/Console output based on environment
- Context-variable merging so request-scoped fields reach every event
"""

import logging
import sys

import structlog

from codedrafts_auth.core.config.settings import settings


def configure_logging(log_level: str = settings.LOG_LEVEL, json_logs: bool = settings.LOG_JSON) -> None:
    """
    Configures the application's logging system.

    Sets up the standard library root handler at ``log_level`` and routes
    structlog through it with ISO timestamps, the log level and either a JSON
    or a console renderer.

    Args:
        log_level: Minimum level name (e.g. ``"INFO"``).
        json_logs: Render events as JSON instead of the coloured console format.
    """
    level = getattr(logging, log_level.upper(), logging.INFO)
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer() if json_logs else structlog.dev.ConsoleRenderer(),
    ]

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


logger = structlog.get_logger()
