from __future__ import annotations

import logging
import sys

import structlog

from sukuk_tracker.core.config import settings
from sukuk_tracker.shared.enums import Env


def configure_logging(level: str | None = None) -> None:
    """
    Structured logging for request handlers and the status sweeper.

    JSON lines everywhere except local development, where the console renderer
    is easier to read. `request_id` and other bound contextvars are merged into
    every event.
    """
    log_level = getattr(logging, (level or settings.log_level).upper(), logging.INFO)
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=log_level)

    renderer = structlog.dev.ConsoleRenderer() if settings.env == Env.dev else structlog.processors.JSONRenderer()
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None):
    return structlog.get_logger(name)
