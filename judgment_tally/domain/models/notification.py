"""Submission notification domain model.

Notifications report the outcome of a judgment submission back to the
viewer. They are purely observational and never affect rating state.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from judgment_tally.domain.models.attestation_record import (
    Judgment,
    JudgmentKind,
    SafetyJudgment,
)


class NotificationKind(Enum):
    """Outcome carried by a notification."""

    SUCCESS = "success"
    ERROR = "error"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True, eq=True)
class SubmissionNotification:
    """Outcome of one judgment submission attempt.

    Attributes:
        kind: SUCCESS or ERROR.
        message: Human-readable message for the viewer.
        subject: Normalized subject of the submission.
        judgment_kind: Kind of judgment submitted.
        created_at: When the notification was created.
    """

    kind: NotificationKind
    message: str
    subject: str
    judgment_kind: JudgmentKind
    created_at: datetime = field(default_factory=_utc_now, compare=False)

    @classmethod
    def submission_succeeded(cls, subject: str, judgment: Judgment) -> SubmissionNotification:
        """Build the success notification for a submitted judgment."""
        if isinstance(judgment, SafetyJudgment):
            verdict = "safe" if judgment.is_safe else "unsafe"
            message = f"Site rated as {verdict} successfully!"
        else:
            message = "Vote recorded successfully!"
        return cls(
            kind=NotificationKind.SUCCESS,
            message=message,
            subject=subject,
            judgment_kind=judgment.kind,
        )

    @classmethod
    def submission_failed(
        cls, subject: str, judgment_kind: JudgmentKind, reason: str
    ) -> SubmissionNotification:
        """Build the error notification for a failed submission."""
        if judgment_kind is JudgmentKind.SAFETY:
            message = f"Failed to rate site: {reason}"
        else:
            message = f"Failed to vote: {reason}"
        return cls(
            kind=NotificationKind.ERROR,
            message=message,
            subject=subject,
            judgment_kind=judgment_kind,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "message": self.message,
            "subject": self.subject,
            "judgment_kind": self.judgment_kind.value,
            "created_at": self.created_at.isoformat(),
        }
