"""Structured logging configuration with structlog.

Production emits one JSON object per line; every other environment
renders a console view (colored when attached to a terminal). Each
entry carries the service name and environment, the same values the
metrics are labelled with, plus the request context when one is bound:

    {
        "timestamp": "2026-01-15T10:00:00.000000Z",
        "level": "info",
        "event": "ratings_published",
        "service": "judgment-tally",
        "environment": "production",
        "correlation_id": "0194...",
        "signer_address": "0xAbC...",
        "component": "subject_rating_state_machine",
        "positive_count": 3,
        ...
    }

Usage:
    from judgment_tally.infrastructure.observability import configure_structlog

    configure_structlog(environment="production")
"""

import logging
import os
import sys
from typing import Any

import structlog
from structlog.typing import EventDict, Processor

LOG_LEVEL_ENV = "LOG_LEVEL"
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_SERVICE_NAME = "judgment-tally"


def _get_log_level() -> int:
    level_name = os.getenv(LOG_LEVEL_ENV, DEFAULT_LOG_LEVEL).upper()
    return getattr(logging, level_name, logging.INFO)


def _service_fields(service: str, environment: str) -> Processor:
    """Processor stamping service and environment onto every entry."""

    def add_service_fields(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
        event_dict.setdefault("service", service)
        event_dict.setdefault("environment", environment)
        return event_dict

    return add_service_fields


def configure_structlog(environment: str = "production") -> None:
    """Configure structlog once at startup.

    Args:
        environment: 'production' for JSON output, anything else for
            console output. Defaults to 'production'.

    Loggers are cached on first use in production only, so tests can
    reconfigure (or capture) logging after the API has started.
    """
    production = environment == "production"
    service = os.getenv("SERVICE_NAME", DEFAULT_SERVICE_NAME)

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        _service_fields(service, environment),
        structlog.processors.StackInfoRenderer(),
    ]
    if production:
        processors += [
            structlog.processors.dict_tracebacks,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(_get_log_level()),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=production,
    )
