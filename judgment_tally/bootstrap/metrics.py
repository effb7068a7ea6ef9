"""Bootstrap wiring for tally metrics.

The API and every state machine it builds share one collector. Tests
install a collector with an isolated registry via set_metrics_collector.
"""

from __future__ import annotations

from judgment_tally.infrastructure.monitoring.tally_metrics import (
    METRICS_CONTENT_TYPE,
    TallyMetricsCollector,
    generate_metrics,
    get_tally_metrics_collector,
    reset_tally_metrics_collector,
)

_metrics_collector: TallyMetricsCollector | None = None


def get_metrics_collector() -> TallyMetricsCollector:
    """Get the active collector (the process-wide one unless overridden)."""
    global _metrics_collector
    if _metrics_collector is None:
        _metrics_collector = get_tally_metrics_collector()
    return _metrics_collector


def export_metrics() -> tuple[bytes, str]:
    """Exposition of the active collector and its content type."""
    return generate_metrics(get_metrics_collector()), METRICS_CONTENT_TYPE


def set_metrics_collector(collector: TallyMetricsCollector) -> None:
    """Set custom metrics collector (testing/override)."""
    global _metrics_collector
    _metrics_collector = collector


def reset_metrics() -> None:
    """Drop the override and the process-wide collector (testing cleanup)."""
    global _metrics_collector
    _metrics_collector = None
    reset_tally_metrics_collector()
