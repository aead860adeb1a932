"""
Structured logging for Warehouse Analytics.

structlog renders through the stdlib ``logging`` root handler so that
uvicorn, prefect and SQLAlchemy records share one format.
"""

import logging
import sys
from typing import List, Optional

import structlog
from structlog.processors import JSONRenderer, TimeStamper
from structlog.stdlib import ProcessorFormatter, add_log_level

from warehouse_analytics.config.settings import get_settings

# Third-party loggers whose own handlers are replaced by the root handler
ROUTED_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")


def _shared_processors() -> List:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        add_log_level,
        TimeStamper(fmt="iso"),
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]


def _build_handler(log_format: str, level: int) -> logging.Handler:
    if log_format == "json":
        renderer = JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(
        ProcessorFormatter(processor=renderer, foreign_pre_chain=_shared_processors())
    )
    return handler


def configure_logging(log_level: Optional[str] = None) -> None:
    """
    Configure structured logging for the application.

    Args:
        log_level: Override of ``MONITORING_LOG_LEVEL`` (DEBUG, INFO, WARNING, ERROR)
    """
    settings = get_settings()
    level_name = (log_level or settings.monitoring.log_level).upper()
    level = getattr(logging, level_name, logging.INFO)

    structlog.configure(
        processors=_shared_processors() + [ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = _build_handler(settings.monitoring.log_format, level)

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(level)

    for name in ROUTED_LOGGERS:
        routed = logging.getLogger(name)
        routed.handlers = [handler]
        routed.setLevel(level)
        routed.propagate = False

    if settings.database.echo:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO)

    structlog.get_logger(__name__).info(
        "Logging configured",
        level=level_name,
        format=settings.monitoring.log_format,
        environment=settings.app_env,
    )
