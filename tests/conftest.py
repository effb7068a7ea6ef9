"""
Pytest configuration and shared fixtures for judgment-tally tests.

Testing Standards:
- All async tests use pytest.mark.asyncio (auto mode enabled in pyproject.toml)
- Use AsyncMock for async function mocking
- Unit tests go in tests/unit/
- Integration tests go in tests/integration/
"""

from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient
from prometheus_client import CollectorRegistry

from judgment_tally.api.main import create_app
from judgment_tally.application.services.subject_rating_state_machine import (
    SubjectRatingStateMachine,
)
from judgment_tally.bootstrap.metrics import reset_metrics, set_metrics_collector
from judgment_tally.bootstrap.tally import (
    reset_tally_dependencies,
    set_attestation_service,
    set_tally_config,
)
from judgment_tally.config.tally_config import TEST_TALLY_CONFIG
from judgment_tally.domain.models.attestation_record import JudgmentKind
from judgment_tally.infrastructure.monitoring.tally_metrics import (
    TallyMetricsCollector,
)
from judgment_tally.infrastructure.stubs import (
    AttestationServiceStub,
    IdentityContextStub,
    NotificationChannelStub,
)

SAFETY_SCHEMA = TEST_TALLY_CONFIG.safety_rating_schema_id
VOTE_SCHEMA = TEST_TALLY_CONFIG.comment_vote_schema_id
VIEWER = "0xViewer"


@pytest.fixture
def anyio_backend() -> str:
    """Use asyncio as the async backend."""
    return "asyncio"


@pytest.fixture
def project_version() -> str:
    """Provide the current project version for tests."""
    from judgment_tally import __version__

    return __version__


@pytest.fixture
def identity() -> IdentityContextStub:
    """Provide an identity context with the viewer signed in."""
    return IdentityContextStub(identity=VIEWER)


@pytest.fixture
def attestations(identity: IdentityContextStub) -> AttestationServiceStub:
    """Provide an empty in-memory attestation service."""
    return AttestationServiceStub(identity)


@pytest.fixture
def channel() -> NotificationChannelStub:
    """Provide a recording notification channel."""
    return NotificationChannelStub()


@pytest.fixture
def metrics() -> TallyMetricsCollector:
    """Provide a metrics collector with an isolated registry."""
    return TallyMetricsCollector(registry=CollectorRegistry())


@pytest.fixture
def safety_machine(
    attestations: AttestationServiceStub,
    identity: IdentityContextStub,
    channel: NotificationChannelStub,
    metrics: TallyMetricsCollector,
) -> SubjectRatingStateMachine:
    """Provide a site safety state machine over the stubs."""
    return SubjectRatingStateMachine(
        judgment_kind=JudgmentKind.SAFETY,
        schema_id=SAFETY_SCHEMA,
        attestation_service=attestations,
        identity_context=identity,
        notification_channel=channel,
        metrics_collector=metrics,
    )


@pytest.fixture
def vote_machine(
    attestations: AttestationServiceStub,
    identity: IdentityContextStub,
    channel: NotificationChannelStub,
    metrics: TallyMetricsCollector,
) -> SubjectRatingStateMachine:
    """Provide a comment vote state machine over the stubs."""
    return SubjectRatingStateMachine(
        judgment_kind=JudgmentKind.VOTE,
        schema_id=VOTE_SCHEMA,
        attestation_service=attestations,
        identity_context=identity,
        notification_channel=channel,
        metrics_collector=metrics,
    )


@pytest.fixture
def api_attestations() -> AttestationServiceStub:
    """Provide the process-wide attestation service seen by the API.

    Requests sign through identity-scoped views of this stub, so it has
    no identity of its own.
    """
    return AttestationServiceStub()


@pytest.fixture
def client(
    api_attestations: AttestationServiceStub,
    metrics: TallyMetricsCollector,
) -> Iterator[TestClient]:
    """Provide a test client wired to the stubs and TEST_TALLY_CONFIG."""
    set_tally_config(TEST_TALLY_CONFIG)
    set_attestation_service(api_attestations)
    set_metrics_collector(metrics)

    yield TestClient(create_app())

    reset_tally_dependencies()
    reset_metrics()
