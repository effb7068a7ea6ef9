"""Per-request log context.

The API binds a correlation ID, and the caller's signer address when
one is sent, at the start of each request. Both live in structlog's
context variables, so every entry logged while serving the request
carries them. Tally passes run in child tasks, which copy the context
when they are created.

Usage:
    bind_request_context(
        request.headers.get("X-Correlation-ID") or generate_correlation_id(),
        signer_address=request.headers.get("X-Signer-Address"),
    )
"""

import structlog
from uuid6 import uuid7

CORRELATION_ID_KEY = "correlation_id"
SIGNER_ADDRESS_KEY = "signer_address"


def generate_correlation_id() -> str:
    """New correlation ID (UUIDv7, so IDs sort by request start)."""
    return str(uuid7())


def bind_request_context(correlation_id: str, signer_address: str | None = None) -> None:
    """Replace the log context of the current task with a request's.

    Args:
        correlation_id: ID shared by every entry of the request.
        signer_address: Caller identity as sent; blank values are not bound.
    """
    structlog.contextvars.clear_contextvars()
    context = {CORRELATION_ID_KEY: correlation_id}
    if signer_address and signer_address.strip():
        context[SIGNER_ADDRESS_KEY] = signer_address.strip()
    structlog.contextvars.bind_contextvars(**context)


def get_correlation_id() -> str:
    """Correlation ID of the current request, or "" outside one."""
    return structlog.contextvars.get_contextvars().get(CORRELATION_ID_KEY, "")


def clear_request_context() -> None:
    structlog.contextvars.clear_contextvars()
