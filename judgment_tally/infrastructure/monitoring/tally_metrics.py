"""Prometheus metrics for tally passes and judgment submissions.

Labels: service, environment, judgment_kind, plus an outcome label.

Pass outcomes:
- ready: a pass published a freshly computed tally
- unconfigured: a pass published a neutral tally (no schema)
- failed: a pass ended in FAILED or kept a prior tally
- stale: a superseded pass discarded its result

Submission outcomes: success, failure, rejected.
"""

import os
import threading

from prometheus_client import CollectorRegistry, Counter, Histogram, generate_latest

from judgment_tally.domain.models.attestation_record import JudgmentKind

METRICS_CONTENT_TYPE = "text/plain; version=0.0.4; charset=utf-8"

# Attestation service round trips (10ms to 10s)
DEFAULT_HISTOGRAM_BUCKETS = (0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0)

_collector_lock = threading.Lock()


class TallyMetricsCollector:
    """Collects tally and submission metrics in its own registry.

    Attributes:
        tally_passes_total: Counter of resolution passes by outcome.
        malformed_attestations_total: Counter of records skipped during
            resolution.
        judgment_submissions_total: Counter of submissions by outcome.
        attestation_request_duration_seconds: Histogram of attestation
            service round trips by operation.
    """

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        """Initialize the collector.

        Args:
            registry: Optional custom registry for testing isolation.
        """
        self._registry = registry or CollectorRegistry()
        self._environment = os.environ.get("ENVIRONMENT", "development")
        self._service_name = os.environ.get("SERVICE_NAME", "judgment-tally")

        self.tally_passes_total = Counter(
            name="tally_passes_total",
            documentation="Total tally resolution passes",
            labelnames=["service", "environment", "judgment_kind", "outcome"],
            registry=self._registry,
        )

        self.malformed_attestations_total = Counter(
            name="malformed_attestations_total",
            documentation="Total attestation records skipped as malformed",
            labelnames=["service", "environment", "judgment_kind"],
            registry=self._registry,
        )

        self.judgment_submissions_total = Counter(
            name="judgment_submissions_total",
            documentation="Total judgment submissions",
            labelnames=["service", "environment", "judgment_kind", "outcome"],
            registry=self._registry,
        )

        self.attestation_request_duration_seconds = Histogram(
            name="attestation_request_duration_seconds",
            documentation="Attestation service request duration in seconds",
            labelnames=["service", "environment", "operation"],
            buckets=DEFAULT_HISTOGRAM_BUCKETS,
            registry=self._registry,
        )

    def record_pass(self, judgment_kind: JudgmentKind, outcome: str) -> None:
        self.tally_passes_total.labels(
            service=self._service_name,
            environment=self._environment,
            judgment_kind=judgment_kind.value,
            outcome=outcome,
        ).inc()

    def record_malformed(self, judgment_kind: JudgmentKind, count: int) -> None:
        """Add skipped records for a judgment kind.

        Args:
            judgment_kind: Kind whose resolution skipped the records.
            count: Number of skipped records (ignored unless positive).
        """
        if count <= 0:
            return
        self.malformed_attestations_total.labels(
            service=self._service_name,
            environment=self._environment,
            judgment_kind=judgment_kind.value,
        ).inc(count)

    def record_submission(self, judgment_kind: JudgmentKind, outcome: str) -> None:
        self.judgment_submissions_total.labels(
            service=self._service_name,
            environment=self._environment,
            judgment_kind=judgment_kind.value,
            outcome=outcome,
        ).inc()

    def observe_attestation_request(self, operation: str, duration: float) -> None:
        """Record one attestation service round trip.

        Args:
            operation: list_records, latest_record_for_signer or submit_record.
            duration: Round trip in seconds.
        """
        self.attestation_request_duration_seconds.labels(
            service=self._service_name,
            environment=self._environment,
            operation=operation,
        ).observe(duration)

    def get_registry(self) -> CollectorRegistry:
        return self._registry


_metrics_collector: TallyMetricsCollector | None = None


def get_tally_metrics_collector() -> TallyMetricsCollector:
    """Get the singleton TallyMetricsCollector (thread-safe)."""
    global _metrics_collector
    if _metrics_collector is None:
        with _collector_lock:
            if _metrics_collector is None:
                _metrics_collector = TallyMetricsCollector()
    return _metrics_collector


def generate_metrics(collector: TallyMetricsCollector | None = None) -> bytes:
    """Metrics in Prometheus text format (singleton collector by default)."""
    collector = collector or get_tally_metrics_collector()
    return generate_latest(collector.get_registry())


def reset_tally_metrics_collector() -> None:
    """Reset the singleton collector (for testing only)."""
    global _metrics_collector
    with _collector_lock:
        _metrics_collector = None
