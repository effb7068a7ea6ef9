"""Attestation service adapters."""

from judgment_tally.infrastructure.adapters.attestation.http_attestation_service import (
    HttpAttestationServiceAdapter,
)

__all__ = ["HttpAttestationServiceAdapter"]
