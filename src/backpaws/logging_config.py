"""
Structured logging for backpaws.

Every module logs through structlog on top of the stdlib ``logging`` module,
so Werkzeug's request log and our events share one stream and one level.
Events are snake_case names with keyword context, e.g.::

    logger.info("photo_uploaded", filename="cat.jpg")
"""

import logging
import os
import sys
from typing import Any

import structlog

DEVELOPMENT_ENVIRONMENTS = ("development", "dev", "local")


def get_log_level(level_name: str | None = None) -> int:
    """Numeric level for level_name (default ``$LOG_LEVEL``); unknown names give INFO."""
    name = (level_name or os.getenv("LOG_LEVEL", "INFO")).upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO


def is_development_environment() -> bool:
    return os.getenv("ENVIRONMENT", "development").lower() in DEVELOPMENT_ENVIRONMENTS


def build_processors(json_output: bool, colors: bool) -> list[Any]:
    """Processor chain ending in the console or JSON renderer."""
    processors: list[Any] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]
    if json_output:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=colors))
    return processors


def configure_structured_logging(level: str | None = None, json_output: bool | None = None) -> None:
    """
    Configure structlog and the stdlib root logger.

    Args:
        level: Level name, defaults to ``$LOG_LEVEL`` or INFO
        json_output: Render JSON lines; defaults to True outside development
    """
    log_level = get_log_level(level)
    if json_output is None:
        json_output = not is_development_environment()
    colors = not json_output and sys.stderr.isatty()

    logging.basicConfig(level=log_level, format="%(message)s", stream=sys.stderr)
    logging.getLogger().setLevel(log_level)
    logging.getLogger("werkzeug").setLevel(log_level)

    structlog.configure(
        processors=build_processors(json_output, colors),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    get_logger("backpaws.logging").debug(
        "logging_configured", log_level=logging.getLevelName(log_level), json_output=json_output
    )


def get_logger(name: str = "backpaws") -> Any:
    return structlog.get_logger(name)


def log_performance(operation: str, duration: float, **context: Any) -> None:
    """
    Log how long an operation took.

    Args:
        operation: Operation name, e.g. ``photo_upload``
        duration: Elapsed time in seconds
        **context: Extra fields for the event
    """
    get_logger("backpaws.performance").info(
        "operation_timed", operation=operation, duration_ms=round(duration * 1000, 2), **context
    )


def log_error(error: Exception, context: dict[str, Any] | None = None, level: int = logging.ERROR) -> None:
    """
    Log an exception as an ``error_occurred`` event.

    Args:
        error: The exception
        context: Extra fields for the event
        level: stdlib level; client mistakes are logged as WARNING
    """
    get_logger("backpaws.errors").log(
        level,
        "error_occurred",
        error_type=type(error).__name__,
        error_message=str(error),
        **(context or {}),
    )
