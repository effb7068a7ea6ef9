"""In-memory stubs of the application ports.

Used for development wiring and as test doubles.
"""

from judgment_tally.infrastructure.stubs.attestation_service_stub import (
    AttestationServiceStub,
)
from judgment_tally.infrastructure.stubs.identity_context_stub import (
    IdentityContextStub,
)
from judgment_tally.infrastructure.stubs.notification_channel_stub import (
    NotificationChannelStub,
)

__all__ = [
    "AttestationServiceStub",
    "IdentityContextStub",
    "NotificationChannelStub",
]
