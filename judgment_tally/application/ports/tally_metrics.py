"""Tally metrics collector port.

Optional dependency of the tally pipeline and the rating state machine.
"""

from __future__ import annotations

from typing import Protocol

from judgment_tally.domain.models.attestation_record import JudgmentKind


class TallyMetricsCollectorProtocol(Protocol):
    """Protocol for recording resolution and submission metrics."""

    def record_pass(self, judgment_kind: JudgmentKind, outcome: str) -> None:
        """Record a completed resolution pass.

        Args:
            judgment_kind: Kind of judgment tallied.
            outcome: One of "ready", "failed", "unconfigured", "stale".
        """
        ...

    def record_malformed(self, judgment_kind: JudgmentKind, count: int) -> None:
        """Record malformed attestations skipped during resolution."""
        ...

    def record_submission(self, judgment_kind: JudgmentKind, outcome: str) -> None:
        """Record a submission attempt.

        Args:
            judgment_kind: Kind of judgment submitted.
            outcome: One of "success", "failure", "rejected".
        """
        ...
