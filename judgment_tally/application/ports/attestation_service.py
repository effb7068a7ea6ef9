"""Attestation service port.

This module defines the abstract interface to the external attestation
service that signs, persists and returns judgment records. The service
owns transport, signing and storage; this package only consumes it.

Developer Golden Rules:
1. Adapters raise AttestationServiceError for every transport or
   service failure, never raw client exceptions
2. Returned records are immutable snapshots
3. Subject keys passed in are already normalized
"""

from __future__ import annotations

from typing import Protocol

from judgment_tally.application.ports.identity_context import IdentityContextProtocol
from judgment_tally.domain.models.attestation_record import (
    AttestationRecord,
    Judgment,
)


class AttestationServiceProtocol(Protocol):
    """Protocol for attestation retrieval and issuance.

    Implementations:
    - AttestationServiceStub: in-memory, for development and tests
    - HttpAttestationServiceAdapter: REST attestation indexer over httpx
    """

    async def list_records(
        self,
        schema_id: str,
        subject_key: str,
    ) -> list[AttestationRecord]:
        """Return every record ever issued for a subject under a schema.

        The result may hold several records per signer, in any order.

        Args:
            schema_id: Schema identifier selecting the judgment type.
            subject_key: Normalized subject key.

        Returns:
            All records for the subject.

        Raises:
            AttestationServiceError: If the service call fails.
        """
        ...

    async def latest_record_for_signer(
        self,
        schema_id: str,
        subject_key: str,
        signer: str,
    ) -> AttestationRecord | None:
        """Return a signer's latest record for a subject.

        Equivalent to resolving that single signer from list_records,
        without fetching the full set. Signer matching is case-insensitive.

        Args:
            schema_id: Schema identifier selecting the judgment type.
            subject_key: Normalized subject key.
            signer: Signer identity.

        Returns:
            The latest record, or None if the signer has none.

        Raises:
            AttestationServiceError: If the service call fails.
        """
        ...

    async def submit_record(
        self,
        schema_id: str,
        subject_key: str,
        judgment: Judgment,
    ) -> AttestationRecord:
        """Issue and persist a new signed record for the current identity.

        Args:
            schema_id: Schema identifier selecting the judgment type.
            subject_key: Normalized subject key.
            judgment: Payload to attest.

        Returns:
            The issued record.

        Raises:
            AttestationServiceError: If the caller identity is unavailable
                or the service call fails.
        """
        ...


class IdentityScopedAttestationServiceProtocol(AttestationServiceProtocol, Protocol):
    """Attestation service that can be re-bound to another signer.

    A long-lived service (one HTTP client, one in-memory store) serves
    many viewers; for_identity returns a view that signs submissions as
    the given viewer and shares everything else.
    """

    def for_identity(
        self, identity_context: IdentityContextProtocol
    ) -> AttestationServiceProtocol:
        """Return a view submitting as the identity context's viewer."""
        ...
