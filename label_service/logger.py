"""
Structured logging for the label service.

Every module logs through `get_logger(__name__)` with stdlib-style
`extra={...}` fields; structlog renders them as a console line in development
and as one JSON object per event elsewhere.
"""

import logging
import sys
from typing import Any

import structlog
from label_service.config import settings

# Pillow logs every PNG chunk it writes at DEBUG; one sheet is thousands of lines
QUIET_LOGGERS = ("PIL",)


def configure_logging(log_level: str | None = None, development: bool | None = None) -> None:
    """
    Configure structlog over stdlib logging.

    Args:
        log_level: debug / info / warning / error (defaults to settings.log_level)
        development: Console output if True, JSON if False
            (defaults to settings.is_development)
    """
    level = getattr(logging, (log_level or settings.log_level).upper())
    if development is None:
        development = settings.is_development

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)
    # basicConfig is a no-op once uvicorn or pytest has installed handlers
    logging.getLogger().setLevel(level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.INFO))

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]
    if development:
        processors.append(structlog.dev.ConsoleRenderer())
    else:
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> Any:
    """
    Get a structured logger.

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info("Batch allocated", extra={"prefix": "T", "count": 3})
    """
    return structlog.get_logger(name)


configure_logging()
