"""structlog configuration.

Learn: structlog renders key/value events. merge_contextvars pulls in
anything bound for the current request (the request id from
RequestIdMiddleware), so every log line of a request can be correlated.
"""

import logging

import structlog

from laika.config import settings


def configure_logging() -> None:
    """Configure structlog + stdlib logging once, at app startup."""
    level = logging.getLevelName(settings.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    logging.basicConfig(format="%(message)s", level=level)

    renderer = (
        structlog.processors.JSONRenderer()
        if settings.log_json
        else structlog.dev.ConsoleRenderer()
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        # Hand rendered lines to stdlib logging so they share its handlers
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
