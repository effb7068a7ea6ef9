"""Unit tests for JudgmentTallyPipeline."""

from unittest.mock import AsyncMock

import pytest

from judgment_tally.application.services.tally_pipeline import JudgmentTallyPipeline
from judgment_tally.config.tally_config import TEST_TALLY_CONFIG, ResolutionStrategy
from judgment_tally.domain.errors.attestation import (
    AttestationServiceError,
    ConfigurationMissingError,
    RetrievalFailureError,
)
from judgment_tally.domain.models.attestation_record import JudgmentKind, SafetyJudgment
from judgment_tally.domain.models.tally import Tally
from judgment_tally.infrastructure.monitoring.tally_metrics import (
    TallyMetricsCollector,
)
from judgment_tally.infrastructure.stubs import AttestationServiceStub
from tests.helpers import T0, make_raw_record, metric_value

SCHEMA = TEST_TALLY_CONFIG.safety_rating_schema_id
SAFE = SafetyJudgment(is_safe=True)
UNSAFE = SafetyJudgment(is_safe=False)


def _pipeline(
    attestations: AttestationServiceStub,
    strategy: ResolutionStrategy = ResolutionStrategy.BULK,
    schema_id: str | None = SCHEMA,
    metrics: TallyMetricsCollector | None = None,
) -> JudgmentTallyPipeline:
    return JudgmentTallyPipeline(
        judgment_kind=JudgmentKind.SAFETY,
        schema_id=schema_id,
        attestation_service=attestations,
        strategy=strategy,
        metrics_collector=metrics,
    )


@pytest.fixture
def seeded(attestations: AttestationServiceStub) -> AttestationServiceStub:
    """Three signers, one of whom re-rated (with a different letter case)."""
    attestations.add_judgment(SCHEMA, "example.com", "0xAlice", SAFE)
    attestations.add_judgment(SCHEMA, "example.com", "0xBob", SAFE)
    attestations.add_judgment(SCHEMA, "example.com", "0xCarol", UNSAFE)
    attestations.add_judgment(SCHEMA, "example.com", "0xALICE", UNSAFE)
    return attestations


class TestCompute:
    """Tests for compute (fetch -> resolve -> aggregate)."""

    @pytest.mark.asyncio
    async def test_bulk_strategy(self, seeded: AttestationServiceStub) -> None:
        tally = await _pipeline(seeded).compute("example.com", current_identity="0xalice")

        assert (tally.positive_count, tally.negative_count, tally.total) == (1, 2, 3)
        assert tally.user_rating is False
        assert seeded.calls_to("list_records") == [("list_records", SCHEMA, "example.com")]
        assert seeded.calls_to("latest_record_for_signer") == []

    @pytest.mark.asyncio
    async def test_per_signer_strategy_matches_bulk(
        self, seeded: AttestationServiceStub
    ) -> None:
        bulk = await _pipeline(seeded).compute("example.com", "0xBob")
        per_signer = await _pipeline(seeded, ResolutionStrategy.PER_SIGNER).compute(
            "example.com", "0xBob"
        )
        assert per_signer == bulk

    @pytest.mark.asyncio
    async def test_per_signer_looks_up_each_distinct_signer_once(
        self, seeded: AttestationServiceStub
    ) -> None:
        await _pipeline(seeded, ResolutionStrategy.PER_SIGNER).compute("example.com")

        lookups = seeded.calls_to("latest_record_for_signer")
        assert len(lookups) == 3
        assert {call[3].lower() for call in lookups} == {"0xalice", "0xbob", "0xcarol"}

    @pytest.mark.asyncio
    async def test_empty_subject_gives_neutral_tally(
        self, attestations: AttestationServiceStub
    ) -> None:
        assert await _pipeline(attestations).compute("nobody.example") == Tally.empty()

    @pytest.mark.asyncio
    async def test_missing_schema_raises_without_io(
        self, attestations: AttestationServiceStub
    ) -> None:
        with pytest.raises(ConfigurationMissingError) as exc_info:
            await _pipeline(attestations, schema_id=None).compute("example.com")

        assert exc_info.value.judgment_kind is JudgmentKind.SAFETY
        assert attestations.calls == []

    @pytest.mark.asyncio
    async def test_service_failure_becomes_retrieval_failure(
        self, attestations: AttestationServiceStub
    ) -> None:
        attestations.set_available(False, reason="indexer down")

        with pytest.raises(RetrievalFailureError) as exc_info:
            await _pipeline(attestations).compute("example.com")

        assert exc_info.value.subject == "example.com"
        assert "indexer down" in exc_info.value.reason

    @pytest.mark.asyncio
    async def test_per_signer_lookup_failure_becomes_retrieval_failure(
        self, seeded: AttestationServiceStub
    ) -> None:
        seeded.latest_record_for_signer = AsyncMock(  # type: ignore[method-assign]
            side_effect=AttestationServiceError("latest_record_for_signer", "timeout")
        )
        pipeline = _pipeline(seeded, ResolutionStrategy.PER_SIGNER)

        with pytest.raises(RetrievalFailureError, match="timeout"):
            await pipeline.fetch_records("example.com")

    @pytest.mark.asyncio
    async def test_malformed_records_counted(
        self,
        seeded: AttestationServiceStub,
        metrics: TallyMetricsCollector,
    ) -> None:
        seeded.add_record(SCHEMA, make_raw_record("bad-1", "0xDave", {"isSafe": 1}))
        seeded.add_record(SCHEMA, make_raw_record("bad-2", "", {"isSafe": True}))

        tally = await _pipeline(seeded, metrics=metrics).compute("example.com")

        assert tally.total == 3
        assert (
            metric_value(metrics, "malformed_attestations_total", judgment_kind="SAFETY")
            == 2
        )


class TestResolve:
    """Tests for the resolve step."""

    @pytest.mark.asyncio
    async def test_resolve_returns_one_record_per_signer(
        self, seeded: AttestationServiceStub
    ) -> None:
        pipeline = _pipeline(seeded)
        resolved = pipeline.resolve(await pipeline.fetch_records("example.com"))
        assert len(resolved) == 3
        assert resolved.get("0xalice").issued_at > T0
