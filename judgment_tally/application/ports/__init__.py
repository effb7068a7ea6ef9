"""Application ports (Protocols) for judgment-tally."""

from judgment_tally.application.ports.attestation_service import (
    AttestationServiceProtocol,
    IdentityScopedAttestationServiceProtocol,
)
from judgment_tally.application.ports.identity_context import (
    IdentityContextProtocol,
    UserProfile,
)
from judgment_tally.application.ports.notification_channel import (
    NotificationChannelProtocol,
)
from judgment_tally.application.ports.tally_metrics import (
    TallyMetricsCollectorProtocol,
)

__all__ = [
    "AttestationServiceProtocol",
    "IdentityContextProtocol",
    "IdentityScopedAttestationServiceProtocol",
    "NotificationChannelProtocol",
    "TallyMetricsCollectorProtocol",
    "UserProfile",
]
