"""Wire models of the attestation indexer REST API.

Attestation objects on the wire:

    {
        "uid": "0x5e7a...",
        "attester": "0xAbC...",
        "attestTimestamp": 1714000000,
        "decodedData": {"url": "example.com", "isSafe": true}
    }

Timestamps may be unix seconds or ISO 8601 strings.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class AttestationWire(BaseModel):
    """One attestation as returned by the indexer."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    uid: str = Field(min_length=1)
    attester: str
    attest_timestamp: datetime = Field(alias="attestTimestamp")
    decoded_data: dict[str, Any] = Field(default_factory=dict, alias="decodedData")


class SubmitAttestationWire(BaseModel):
    """Body of an attestation issuance request."""

    model_config = ConfigDict(populate_by_name=True)

    attester: str
    subject: str
    data: dict[str, Any]
