"""
Structured logging setup.

The SDK logs through structlog and never configures logging on import.
Applications call setup_logging() once at startup to route SDK events
through the standard library with JSON or console rendering.

Example:
    >>> from hollaex_sdk.config import LoggingConfig, LogFormat
    >>> setup_logging(LoggingConfig(format=LogFormat.TEXT, level="DEBUG"))
"""

import logging
import sys
from typing import Optional

import structlog

from hollaex_sdk.config.models import LogFormat, LoggingConfig


def setup_logging(config: Optional[LoggingConfig] = None) -> None:
    """
    Configure structlog and the root stdlib logger.

    Args:
        config: Logging configuration (default: JSON at INFO).
    """
    config = config or LoggingConfig()

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, config.level.value),
        force=True,
    )

    if config.format == LogFormat.JSON:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
