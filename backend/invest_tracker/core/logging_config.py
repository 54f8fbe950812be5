"""
Structured logging setup.

structlog sits on top of stdlib logging so that library loggers (uvicorn,
SQLAlchemy, httpx) and application loggers share one output stream. JSON
lines in production, coloured console output everywhere else.

    from invest_tracker.core.logging_config import get_logger

    logger = get_logger(__name__)
    logger.info("holding_reconciled", category_id=str(category_id), quantity="15")
"""

import logging
import sys

import structlog
from pythonjsonlogger import jsonlogger

from invest_tracker.config import settings

# Loggers that are chatty at INFO and only useful when debugging
_QUIET_IN_PRODUCTION = ("uvicorn.access", "httpx", "httpcore", "sqlalchemy.engine")


def _json_enabled() -> bool:
    return settings.LOG_FORMAT == "json" or settings.ENVIRONMENT == "production"


def _processors(use_json: bool) -> list:
    processors = [
        structlog.contextvars.merge_contextvars,  # request_id from RequestLoggingMiddleware
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    if use_json:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())
    return processors


def _route_library_loggers(use_json: bool) -> None:
    """Give uvicorn's own loggers the same JSON shape as application lines."""
    if not use_json:
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        jsonlogger.JsonFormatter(
            "%(asctime)s %(name)s %(levelname)s %(message)s",
            rename_fields={"asctime": "timestamp", "levelname": "level"},
        )
    )
    for name in ("uvicorn", "uvicorn.access", "uvicorn.error"):
        library_logger = logging.getLogger(name)
        library_logger.handlers.clear()
        library_logger.addHandler(handler)


def setup_logging() -> None:
    """Configure stdlib logging and structlog. Safe to call more than once."""
    use_json = _json_enabled()

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    )

    structlog.configure(
        processors=_processors(use_json),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    _route_library_loggers(use_json)

    if settings.ENVIRONMENT == "production":
        for name in _QUIET_IN_PRODUCTION:
            logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Structured logger bound to ``name``."""
    return structlog.get_logger(name)
