"""
Structured Logging Configuration

permguard logs through stdlib loggers under the ``permguard`` namespace,
so a host application keeps control of the root logger.
"""

import logging
import sys
from typing import Optional

import structlog

from permguard.core.config import settings

LOGGER_NAMESPACE = "permguard"


def setup_logging(level: Optional[str] = None, json_logs: Optional[bool] = None) -> logging.Logger:
    """
    Configure structured logging for permguard

    Args:
        level: Overrides settings.LOG_LEVEL for the permguard loggers
        json_logs: Overrides the JSON-in-production default

    Returns:
        The ``permguard`` stdlib logger
    """
    if json_logs is None:
        json_logs = settings.ENVIRONMENT == "production"

    package_logger = logging.getLogger(LOGGER_NAMESPACE)
    package_logger.setLevel(getattr(logging, (level or settings.LOG_LEVEL).upper()))
    if not package_logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter("%(message)s"))
        package_logger.addHandler(handler)
    package_logger.propagate = False

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer() if json_logs
            else structlog.dev.ConsoleRenderer(colors=settings.DEBUG)
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    return package_logger
