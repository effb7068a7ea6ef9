"""HTTP adapter for the attestation indexer.

Implements AttestationServiceProtocol over a REST indexer:

    GET  {base}/schemas/{schema_id}/attestations?subject=...
    GET  {base}/schemas/{schema_id}/attestations/latest?subject=...&attester=...
    POST {base}/schemas/{schema_id}/attestations

Transport errors, non-2xx responses and unparseable envelopes become
AttestationServiceError. Individual attestations that fail wire
validation are skipped with a warning, the same way the resolver skips
records it cannot decode.
"""

from __future__ import annotations

import time
from typing import Any

import httpx
import structlog
from pydantic import ValidationError

from judgment_tally.application.ports.identity_context import IdentityContextProtocol
from judgment_tally.domain.errors.attestation import AttestationServiceError
from judgment_tally.domain.models.attestation_record import (
    AttestationRecord,
    Judgment,
    JudgmentKind,
)
from judgment_tally.infrastructure.adapters.attestation.wire import (
    AttestationWire,
    SubmitAttestationWire,
)
from judgment_tally.infrastructure.monitoring.tally_metrics import (
    TallyMetricsCollector,
)

logger = structlog.get_logger(__name__)

DEFAULT_TIMEOUT_SECONDS = 10.0


class HttpAttestationServiceAdapter:
    """Attestation service client over httpx.AsyncClient.

    The adapter owns its client unless one is injected. Views created
    with for_identity() share the client and never close it.
    """

    def __init__(
        self,
        base_url: str,
        schema_kinds: dict[str, JudgmentKind],
        identity_context: IdentityContextProtocol | None = None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        client: httpx.AsyncClient | None = None,
        metrics_collector: TallyMetricsCollector | None = None,
    ) -> None:
        """Initialize the adapter.

        Args:
            base_url: Indexer base URL.
            schema_kinds: Judgment kind carried by each known schema id.
            identity_context: Provider of the attester for submissions.
            timeout_seconds: Per-request timeout.
            client: Optional preconfigured client (tests inject a
                MockTransport-backed client here).
            metrics_collector: Optional collector for request durations.
        """
        self._schema_kinds = dict(schema_kinds)
        self._identity_context = identity_context
        self._metrics_collector = metrics_collector
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=timeout_seconds,
        )

    def for_identity(
        self, identity_context: IdentityContextProtocol
    ) -> HttpAttestationServiceAdapter:
        """Return a view of this adapter that attests as another identity."""
        return HttpAttestationServiceAdapter(
            base_url=str(self._client.base_url),
            schema_kinds=self._schema_kinds,
            identity_context=identity_context,
            client=self._client,
            metrics_collector=self._metrics_collector,
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    # ------------------------------------------------------------------
    # AttestationServiceProtocol
    # ------------------------------------------------------------------

    async def list_records(
        self,
        schema_id: str,
        subject_key: str,
    ) -> list[AttestationRecord]:
        kind = self._kind_for(schema_id, "list_records")
        payload = await self._request(
            "list_records",
            "GET",
            f"/schemas/{schema_id}/attestations",
            params={"subject": subject_key},
        )

        items = payload.get("attestations") if isinstance(payload, dict) else None
        if not isinstance(items, list):
            raise AttestationServiceError("list_records", "response has no attestations list")

        records: list[AttestationRecord] = []
        for item in items:
            record = self._to_record(item, subject_key, kind)
            if record is not None:
                records.append(record)
        return records

    async def latest_record_for_signer(
        self,
        schema_id: str,
        subject_key: str,
        signer: str,
    ) -> AttestationRecord | None:
        kind = self._kind_for(schema_id, "latest_record_for_signer")
        payload = await self._request(
            "latest_record_for_signer",
            "GET",
            f"/schemas/{schema_id}/attestations/latest",
            params={"subject": subject_key, "attester": signer},
            allow_not_found=True,
        )
        if payload is None:
            return None

        item = payload.get("attestation") if isinstance(payload, dict) else None
        if item is None:
            return None
        return self._to_record(item, subject_key, kind)

    async def submit_record(
        self,
        schema_id: str,
        subject_key: str,
        judgment: Judgment,
    ) -> AttestationRecord:
        kind = self._kind_for(schema_id, "submit_record")
        attester = (
            self._identity_context.current_identity
            if self._identity_context is not None
            else None
        )
        if attester is None or not attester.strip():
            raise AttestationServiceError("submit_record", "no signer identity available")

        body = SubmitAttestationWire(
            attester=attester,
            subject=subject_key,
            data=judgment.to_data(subject_key),
        )
        payload = await self._request(
            "submit_record",
            "POST",
            f"/schemas/{schema_id}/attestations",
            json=body.model_dump(),
        )

        try:
            wire = AttestationWire.model_validate(payload)
        except ValidationError as e:
            raise AttestationServiceError(
                "submit_record", f"invalid attestation in response: {e.error_count()} errors"
            ) from e
        return self._wire_to_record(wire, subject_key, kind)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _kind_for(self, schema_id: str, operation: str) -> JudgmentKind:
        kind = self._schema_kinds.get(schema_id)
        if kind is None:
            raise AttestationServiceError(operation, f"unknown schema '{schema_id}'")
        return kind

    async def _request(
        self,
        operation: str,
        method: str,
        path: str,
        params: dict[str, str] | None = None,
        json: dict[str, Any] | None = None,
        allow_not_found: bool = False,
    ) -> Any:
        started = time.perf_counter()
        try:
            response = await self._client.request(method, path, params=params, json=json)
        except httpx.HTTPError as e:
            logger.warning("attestation_request_failed", operation=operation, error=str(e))
            raise AttestationServiceError(operation, f"transport error: {e}") from e
        finally:
            if self._metrics_collector is not None:
                self._metrics_collector.observe_attestation_request(
                    operation, time.perf_counter() - started
                )

        if allow_not_found and response.status_code == 404:
            return None
        if response.status_code >= 300:
            logger.warning(
                "attestation_request_rejected",
                operation=operation,
                status_code=response.status_code,
            )
            raise AttestationServiceError(
                operation, f"HTTP {response.status_code}: {response.text[:200]}"
            )

        try:
            return response.json()
        except ValueError as e:
            raise AttestationServiceError(operation, "response is not valid JSON") from e

    def _to_record(
        self,
        item: Any,
        subject_key: str,
        kind: JudgmentKind,
    ) -> AttestationRecord | None:
        try:
            wire = AttestationWire.model_validate(item)
        except ValidationError as e:
            uid = item.get("uid") if isinstance(item, dict) else None
            logger.warning(
                "attestation_wire_invalid",
                uid=uid,
                error_count=e.error_count(),
            )
            return None
        return self._wire_to_record(wire, subject_key, kind)

    @staticmethod
    def _wire_to_record(
        wire: AttestationWire,
        subject_key: str,
        kind: JudgmentKind,
    ) -> AttestationRecord:
        return AttestationRecord(
            uid=wire.uid,
            signer=wire.attester,
            subject=subject_key,
            timestamp=wire.attest_timestamp,
            kind=kind,
            data=wire.decoded_data,
        )
