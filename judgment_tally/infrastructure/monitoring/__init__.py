"""Prometheus monitoring for judgment-tally."""

from judgment_tally.infrastructure.monitoring.tally_metrics import (
    METRICS_CONTENT_TYPE,
    TallyMetricsCollector,
    generate_metrics,
    get_tally_metrics_collector,
    reset_tally_metrics_collector,
)

__all__ = [
    "METRICS_CONTENT_TYPE",
    "TallyMetricsCollector",
    "generate_metrics",
    "get_tally_metrics_collector",
    "reset_tally_metrics_collector",
]
