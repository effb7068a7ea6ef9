"""Judgment tally pipeline service.

One pipeline serves one judgment kind under one schema identifier and
runs the fetch -> resolve -> aggregate sequence for a subject. Fetching
suspends; resolution and aggregation are pure and synchronous.

Retrieval strategies:
- BULK: a single list_records call, resolved locally
- PER_SIGNER: list_records to discover signers, then one concurrent
  latest_record_for_signer lookup per distinct signer, joined before
  resolution
"""

from __future__ import annotations

import asyncio

import structlog

from judgment_tally.application.ports.attestation_service import (
    AttestationServiceProtocol,
)
from judgment_tally.application.ports.tally_metrics import (
    TallyMetricsCollectorProtocol,
)
from judgment_tally.config.tally_config import ResolutionStrategy
from judgment_tally.domain.errors.attestation import (
    AttestationServiceError,
    ConfigurationMissingError,
    RetrievalFailureError,
)
from judgment_tally.domain.models.attestation_record import (
    AttestationRecord,
    JudgmentKind,
)
from judgment_tally.domain.models.subject import normalize_signer
from judgment_tally.domain.models.tally import ResolvedJudgmentSet, Tally
from judgment_tally.domain.services.latest_per_signer import resolve_latest_per_signer
from judgment_tally.domain.services.tally_aggregator import aggregate_tally

logger = structlog.get_logger(__name__)


class JudgmentTallyPipeline:
    """Fetch, resolve and aggregate judgments for a subject.

    Example:
        >>> pipeline = JudgmentTallyPipeline(
        ...     judgment_kind=JudgmentKind.SAFETY,
        ...     schema_id="schema-site-safety",
        ...     attestation_service=service,
        ... )
        >>> tally = await pipeline.compute("example.com", current_identity="0xabc")
    """

    def __init__(
        self,
        judgment_kind: JudgmentKind,
        schema_id: str | None,
        attestation_service: AttestationServiceProtocol,
        strategy: ResolutionStrategy = ResolutionStrategy.BULK,
        metrics_collector: TallyMetricsCollectorProtocol | None = None,
    ) -> None:
        """Initialize the pipeline.

        Args:
            judgment_kind: Kind of judgment this pipeline tallies.
            schema_id: Schema identifier, or None if not configured.
            attestation_service: Source of attestation records.
            strategy: Retrieval strategy.
            metrics_collector: Optional metrics collector for skipped records.
        """
        self._judgment_kind = judgment_kind
        self._schema_id = schema_id
        self._attestation_service = attestation_service
        self._strategy = strategy
        self._metrics_collector = metrics_collector
        self._log = logger.bind(
            component="tally_pipeline",
            judgment_kind=judgment_kind.value,
        )

    @property
    def judgment_kind(self) -> JudgmentKind:
        return self._judgment_kind

    @property
    def schema_id(self) -> str | None:
        return self._schema_id

    @property
    def is_configured(self) -> bool:
        return self._schema_id is not None

    def _require_schema(self) -> str:
        if self._schema_id is None:
            raise ConfigurationMissingError(self._judgment_kind)
        return self._schema_id

    async def fetch_records(self, subject_key: str) -> list[AttestationRecord]:
        """Retrieve raw records for a subject.

        Args:
            subject_key: Normalized subject key.

        Returns:
            Raw records (possibly several per signer).

        Raises:
            ConfigurationMissingError: If no schema identifier is configured.
            RetrievalFailureError: If the attestation service fails.
        """
        schema_id = self._require_schema()
        log = self._log.bind(subject=subject_key, strategy=self._strategy.value)

        try:
            records = await self._attestation_service.list_records(schema_id, subject_key)
            if self._strategy is ResolutionStrategy.PER_SIGNER:
                records = await self._fetch_latest_per_signer(schema_id, subject_key, records)
        except AttestationServiceError as e:
            log.warning("attestation_retrieval_failed", error=str(e))
            raise RetrievalFailureError(subject_key, str(e)) from e

        log.debug("attestations_retrieved", record_count=len(records))
        return records

    async def _fetch_latest_per_signer(
        self,
        schema_id: str,
        subject_key: str,
        records: list[AttestationRecord],
    ) -> list[AttestationRecord]:
        # One lookup per case-folded signer, first spelling seen is used
        signers: dict[str, str] = {}
        for record in records:
            if isinstance(record.signer, str) and record.signer.strip():
                signers.setdefault(normalize_signer(record.signer), record.signer)

        latest = await asyncio.gather(
            *(
                self._attestation_service.latest_record_for_signer(
                    schema_id, subject_key, signer
                )
                for signer in signers.values()
            )
        )
        return [record for record in latest if record is not None]

    def resolve(self, records: list[AttestationRecord]) -> ResolvedJudgmentSet:
        """Resolve raw records to one latest record per signer."""
        resolved = resolve_latest_per_signer(records)
        if resolved.skipped_count and self._metrics_collector is not None:
            self._metrics_collector.record_malformed(
                self._judgment_kind, resolved.skipped_count
            )
        return resolved

    async def compute(
        self,
        subject_key: str,
        current_identity: str | None = None,
    ) -> Tally:
        """Run fetch -> resolve -> aggregate for a subject.

        Args:
            subject_key: Normalized subject key.
            current_identity: Viewer identity for the own-judgment lookup.

        Returns:
            Tally for the subject.

        Raises:
            ConfigurationMissingError: If no schema identifier is configured.
            RetrievalFailureError: If the attestation service fails.
        """
        records = await self.fetch_records(subject_key)
        resolved = self.resolve(records)
        tally = aggregate_tally(resolved, current_identity)

        self._log.debug(
            "tally_computed",
            subject=subject_key,
            record_count=len(records),
            **tally.to_dict(),
        )
        return tally
