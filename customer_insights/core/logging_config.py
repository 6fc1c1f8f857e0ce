# customer_insights/core/logging_config.py
import logging
import sys

import structlog

from customer_insights.core.settings import settings


def setup_logging(level: str | None = None) -> None:
    """
    Configure structlog on top of the standard logging module.
    Logs go to stdout as JSON lines, one event per line.
    """
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, (level or settings.LOG_LEVEL).upper(), logging.INFO),
    )

    structlog.configure(
        processors=[
            structlog.stdlib.add_logger_name,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


# Service-wide logger, importable from anywhere
logger = structlog.get_logger("customer_insights")
