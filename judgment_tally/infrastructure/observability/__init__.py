"""Structured logging and per-request log context.

Usage:
    from judgment_tally.infrastructure.observability import (
        bind_request_context,
        configure_structlog,
    )

    configure_structlog(environment="production")
    bind_request_context(correlation_id, signer_address=signer)
"""

from judgment_tally.infrastructure.observability.logging import configure_structlog
from judgment_tally.infrastructure.observability.request_context import (
    bind_request_context,
    clear_request_context,
    generate_correlation_id,
    get_correlation_id,
)

__all__: list[str] = [
    "bind_request_context",
    "clear_request_context",
    "configure_structlog",
    "generate_correlation_id",
    "get_correlation_id",
]
