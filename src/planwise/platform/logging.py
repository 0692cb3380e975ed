"""
Planwise Structured Logging

structlog setup shared by the API and the analyzers.

Usage:
    configure_logging()
    logger = get_logger(__name__)

    # Tag every line logged while handling one analysis request
    bind_analysis_context("velocity", sprints=12)
    logger.info("Velocity analyzed", average=21.5)
"""

import logging
import sys
from typing import Any, List, Optional

import structlog

from planwise.platform.config import settings


def build_processors(json_logs: bool) -> List[Any]:
    """
    Processor chain ending in the renderer.

    JSON lines for log shippers, a console renderer for humans. Colours are
    only used when developing locally.
    """
    renderer = (
        structlog.processors.JSONRenderer()
        if json_logs
        else structlog.dev.ConsoleRenderer(colors=settings.APP_ENV == "development")
    )
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        renderer,
    ]


def configure_logging(level: Optional[str] = None, json_logs: Optional[bool] = None) -> None:
    """
    Configure structlog and the stdlib root logger.

    Args:
        level: Level name; defaults to LOG_LEVEL
        json_logs: Force JSON output; defaults to on in production
    """
    level_name = (level or settings.LOG_LEVEL).upper()
    log_level = getattr(logging, level_name, logging.INFO)
    if json_logs is None:
        json_logs = settings.APP_ENV == "production"

    structlog.configure(
        processors=build_processors(json_logs),
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=log_level)


def bind_analysis_context(operation: str, **values: Any) -> None:
    """Replace the request-scoped log context with one analysis operation."""
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(operation=operation, **values)


def get_logger(name: str | None = None) -> structlog.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)
