"""
Structured logging configuration using structlog.
Outputs JSON in production, pretty-printed in development.
Request and participant ids bound by the middleware ride along on every record.
"""

import logging
import sys

import structlog
from structlog.types import EventDict, WrappedLogger

from waitlist.core.config import get_settings


def _add_service_info(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    settings = get_settings()
    event_dict.setdefault("service", settings.APP_NAME)
    event_dict.setdefault("environment", settings.ENVIRONMENT)
    return event_dict


def _renderer(environment: str):
    if environment == "production":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())


def setup_logging() -> None:
    settings = get_settings()

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]
    if settings.ENVIRONMENT == "production":
        shared_processors += [_add_service_info, structlog.processors.format_exc_info]

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared_processors,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _renderer(settings.ENVIRONMENT),
            ],
        )
    )

    root_logger = logging.getLogger()
    # Lifespan may run more than once in a process (tests, reloads)
    root_logger.handlers = [
        h for h in root_logger.handlers
        if not isinstance(h.formatter, structlog.stdlib.ProcessorFormatter)
    ]
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))

    for noisy in ("uvicorn.access", "redis"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def get_logger(name: str = __name__) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)
