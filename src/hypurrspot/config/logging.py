"""Logging configuration using structlog.

Every event carries ``service`` and ``version`` so JSON logs from the API
and the background sync pass can be told apart from other processes.
"""

import logging
import sys

import structlog
from structlog.typing import EventDict, Processor, WrappedLogger

from hypurrspot.config.settings import Settings, get_settings

# Third-party loggers that log one line per upstream request at INFO
NOISY_LOGGERS = ("httpx", "httpcore", "hpack", "apscheduler.executors.default")


def _service_fields(settings: Settings) -> Processor:
    def add_service_fields(
        _logger: WrappedLogger, _method: str, event_dict: EventDict
    ) -> EventDict:
        event_dict.setdefault("service", settings.app_name)
        event_dict.setdefault("version", settings.app_version)
        return event_dict

    return add_service_fields


def configure_logging() -> None:
    """Configure structlog and stdlib logging for the application."""
    settings = get_settings()
    log_level = getattr(logging, settings.log_level)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            _service_fields(settings),
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer()
            if settings.debug
            else structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level,
    )

    # Request-level chatter only in debug
    if not settings.debug:
        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(max(log_level, logging.WARNING))
