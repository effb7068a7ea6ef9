"""Bootstrap wiring for logging."""

from __future__ import annotations

import os

import structlog

from judgment_tally.config.tally_config import TallyConfig
from judgment_tally.infrastructure.observability import configure_structlog

DEFAULT_ENVIRONMENT = "development"


def configure_logging(config: TallyConfig, environment: str | None = None) -> None:
    """Configure structlog and log which pipelines are active.

    Args:
        config: Tally configuration the process runs with.
        environment: Overrides the ENVIRONMENT variable.
    """
    environment = environment or os.environ.get("ENVIRONMENT", DEFAULT_ENVIRONMENT)
    configure_structlog(environment=environment)

    log = structlog.get_logger(__name__)
    log.info(
        "logging_configured",
        site_ratings_enabled=config.safety_rating_schema_id is not None,
        comment_votes_enabled=config.comment_vote_schema_id is not None,
        attestation_backend="http" if config.attestation_service_url else "in_memory",
        resolution_strategy=config.resolution_strategy.value,
    )
    if not config.schema_kinds():
        log.warning("no_judgment_schema_configured")
