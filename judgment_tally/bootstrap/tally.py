"""Bootstrap wiring for tally dependencies.

The attestation service is process-wide: the HTTP adapter when
ATTESTATION_SERVICE_URL is set, the in-memory stub otherwise. Sessions
and vote services are built per viewer on top of an identity-scoped
view of it.
"""

from __future__ import annotations

import structlog

from judgment_tally.application.ports.attestation_service import (
    IdentityScopedAttestationServiceProtocol,
)
from judgment_tally.application.ports.identity_context import IdentityContextProtocol
from judgment_tally.application.ports.notification_channel import (
    NotificationChannelProtocol,
)
from judgment_tally.application.services.comment_votes_service import (
    CommentVotesService,
)
from judgment_tally.application.services.site_ratings_session import (
    SiteRatingsSession,
)
from judgment_tally.application.services.subject_rating_state_machine import (
    SubjectRatingStateMachine,
)
from judgment_tally.bootstrap.metrics import get_metrics_collector
from judgment_tally.config.tally_config import TallyConfig
from judgment_tally.domain.models.attestation_record import JudgmentKind
from judgment_tally.infrastructure.adapters.attestation import (
    HttpAttestationServiceAdapter,
)
from judgment_tally.infrastructure.stubs.attestation_service_stub import (
    AttestationServiceStub,
)

logger = structlog.get_logger(__name__)

_tally_config: TallyConfig | None = None
_attestation_service: IdentityScopedAttestationServiceProtocol | None = None


def get_tally_config() -> TallyConfig:
    """Get tally configuration (read from the environment once)."""
    global _tally_config
    if _tally_config is None:
        _tally_config = TallyConfig.from_environment()
    return _tally_config


def get_attestation_service() -> IdentityScopedAttestationServiceProtocol:
    """Get the process-wide attestation service."""
    global _attestation_service
    if _attestation_service is None:
        config = get_tally_config()
        if config.attestation_service_url:
            logger.info(
                "attestation_service_http",
                base_url=config.attestation_service_url,
                strategy=config.resolution_strategy.value,
            )
            _attestation_service = HttpAttestationServiceAdapter(
                base_url=config.attestation_service_url,
                schema_kinds=config.schema_kinds(),
                timeout_seconds=config.request_timeout_seconds,
                metrics_collector=get_metrics_collector(),
            )
        else:
            logger.warning("attestation_service_in_memory_stub")
            _attestation_service = AttestationServiceStub()
    return _attestation_service


def build_state_machine(
    judgment_kind: JudgmentKind,
    identity_context: IdentityContextProtocol,
    notification_channel: NotificationChannelProtocol | None = None,
) -> SubjectRatingStateMachine:
    """Build a state machine for one viewer and judgment kind."""
    config = get_tally_config()
    return SubjectRatingStateMachine(
        judgment_kind=judgment_kind,
        schema_id=config.schema_id_for(judgment_kind),
        attestation_service=get_attestation_service().for_identity(identity_context),
        identity_context=identity_context,
        notification_channel=notification_channel,
        strategy=config.resolution_strategy,
        metrics_collector=get_metrics_collector(),
    )


def build_site_ratings_session(
    identity_context: IdentityContextProtocol,
    notification_channel: NotificationChannelProtocol | None = None,
) -> SiteRatingsSession:
    """Build a site ratings session for one viewer."""
    return SiteRatingsSession(
        build_state_machine(JudgmentKind.SAFETY, identity_context, notification_channel)
    )


def build_comment_votes_service(
    identity_context: IdentityContextProtocol,
    notification_channel: NotificationChannelProtocol | None = None,
) -> CommentVotesService:
    """Build a comment votes service for one viewer."""
    config = get_tally_config()
    return CommentVotesService(
        schema_id=config.comment_vote_schema_id,
        attestation_service=get_attestation_service().for_identity(identity_context),
        identity_context=identity_context,
        notification_channel=notification_channel,
        strategy=config.resolution_strategy,
        metrics_collector=get_metrics_collector(),
    )


async def shutdown_tally_dependencies() -> None:
    """Close the attestation service's client, if it owns one."""
    if isinstance(_attestation_service, HttpAttestationServiceAdapter):
        await _attestation_service.aclose()


def set_tally_config(config: TallyConfig) -> None:
    """Set custom tally configuration for testing."""
    global _tally_config
    _tally_config = config


def set_attestation_service(service: IdentityScopedAttestationServiceProtocol) -> None:
    """Set custom attestation service for testing."""
    global _attestation_service
    _attestation_service = service


def reset_tally_dependencies() -> None:
    """Reset all singleton instances for testing."""
    global _tally_config
    global _attestation_service
    _tally_config = None
    _attestation_service = None
