"""Judgment tally configuration.

This module defines configuration for the two judgment pipelines (site
safety ratings and comment votes) and the attestation service they
query, with environment variable overrides.

A pipeline whose schema identifier is absent is a no-op: it yields a
neutral tally and refuses submissions, it never fails hard.

Environment Variables:
- ATTESTATION_SAFETY_RATING_ID: Schema id for site safety ratings (default: unset)
- ATTESTATION_VOTE_ID: Schema id for comment votes (default: unset)
- ATTESTATION_SERVICE_URL: Base URL of the attestation indexer (default: unset,
  the in-memory stub is used)
- ATTESTATION_REQUEST_TIMEOUT: HTTP timeout in seconds (default: 10.0)
- TALLY_RESOLUTION_STRATEGY: "bulk" or "per_signer" (default: bulk)
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum

from judgment_tally.domain.models.attestation_record import JudgmentKind

DEFAULT_REQUEST_TIMEOUT_SECONDS = 10.0
MAX_REQUEST_TIMEOUT_SECONDS = 120.0


class ResolutionStrategy(Enum):
    """How raw records are retrieved before resolution.

    Strategies:
        BULK: One list_records call, resolved locally
        PER_SIGNER: list_records, then a concurrent latest-record lookup
            per distinct signer
    """

    BULK = "bulk"
    PER_SIGNER = "per_signer"


def _get_optional_str_env(key: str) -> str | None:
    """Get a string environment variable, treating blank as absent.

    Args:
        key: Environment variable name.

    Returns:
        Stripped value, or None if unset or blank.
    """
    value = os.environ.get(key)
    if value is None or not value.strip():
        return None
    return value.strip()


def _get_float_env(key: str, default: float) -> float:
    """Get float environment variable with default.

    Args:
        key: Environment variable name.
        default: Default value if not set or invalid.

    Returns:
        Parsed float value or default.
    """
    value = os.environ.get(key)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _get_strategy_env(key: str, default: ResolutionStrategy) -> ResolutionStrategy:
    value = os.environ.get(key)
    if value is None:
        return default
    try:
        return ResolutionStrategy(value.strip().lower())
    except ValueError:
        return default


@dataclass(frozen=True)
class TallyConfig:
    """Configuration for judgment tally pipelines.

    Attributes:
        safety_rating_schema_id: Schema id for site safety ratings.
                                 None disables the site rating pipeline.
        comment_vote_schema_id: Schema id for comment votes.
                                None disables the comment vote pipeline.
        attestation_service_url: Base URL of the attestation indexer.
                                 None selects the in-memory stub.
        request_timeout_seconds: Timeout for attestation service calls.
        resolution_strategy: Retrieval strategy for resolution passes.
    """

    safety_rating_schema_id: str | None = None
    comment_vote_schema_id: str | None = None
    attestation_service_url: str | None = None
    request_timeout_seconds: float = DEFAULT_REQUEST_TIMEOUT_SECONDS
    resolution_strategy: ResolutionStrategy = ResolutionStrategy.BULK

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if not 0 < self.request_timeout_seconds <= MAX_REQUEST_TIMEOUT_SECONDS:
            raise ValueError(
                f"request_timeout_seconds must be in (0, {MAX_REQUEST_TIMEOUT_SECONDS}], "
                f"got {self.request_timeout_seconds}"
            )
        if (
            self.safety_rating_schema_id is not None
            and self.safety_rating_schema_id == self.comment_vote_schema_id
        ):
            raise ValueError(
                "safety_rating_schema_id and comment_vote_schema_id must differ"
            )

    def schema_id_for(self, kind: JudgmentKind) -> str | None:
        """Get the schema identifier configured for a judgment kind."""
        if kind is JudgmentKind.SAFETY:
            return self.safety_rating_schema_id
        return self.comment_vote_schema_id

    def schema_kinds(self) -> dict[str, JudgmentKind]:
        """Map each configured schema identifier to its judgment kind."""
        kinds: dict[str, JudgmentKind] = {}
        for kind in JudgmentKind:
            schema_id = self.schema_id_for(kind)
            if schema_id is not None:
                kinds[schema_id] = kind
        return kinds

    @classmethod
    def from_environment(cls) -> TallyConfig:
        """Create config from environment variables with defaults.

        Returns:
            TallyConfig with values from environment or defaults.
        """
        return cls(
            safety_rating_schema_id=_get_optional_str_env("ATTESTATION_SAFETY_RATING_ID"),
            comment_vote_schema_id=_get_optional_str_env("ATTESTATION_VOTE_ID"),
            attestation_service_url=_get_optional_str_env("ATTESTATION_SERVICE_URL"),
            request_timeout_seconds=_get_float_env(
                "ATTESTATION_REQUEST_TIMEOUT", DEFAULT_REQUEST_TIMEOUT_SECONDS
            ),
            resolution_strategy=_get_strategy_env(
                "TALLY_RESOLUTION_STRATEGY", ResolutionStrategy.BULK
            ),
        )


# Pre-defined configurations for common use cases

# Nothing configured: both pipelines are no-ops
UNCONFIGURED_TALLY_CONFIG = TallyConfig()

# Testing config with both schemas set and the in-memory service
TEST_TALLY_CONFIG = TallyConfig(
    safety_rating_schema_id="schema-site-safety",
    comment_vote_schema_id="schema-comment-vote",
)
