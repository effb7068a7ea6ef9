"""Resolved judgment set and tally domain models.

A ResolvedJudgmentSet holds exactly one attestation record per distinct
signer (their latest). A Tally is the aggregate of a resolved set:
positive and negative counts plus the viewer's own resolved judgment.

Both are derived values, recomputed from scratch on every load and
after every submission.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any

from judgment_tally.domain.models.attestation_record import (
    AttestationRecord,
    Judgment,
    SafetyJudgment,
    VoteJudgment,
)
from judgment_tally.domain.models.subject import normalize_signer


@dataclass(frozen=True, eq=True)
class ResolvedJudgmentSet:
    """One authoritative record per signer.

    Attributes:
        records: Map of case-folded signer to that signer's latest record.
        skipped_count: Number of malformed records excluded during
            resolution. Not part of equality.
    """

    records: Mapping[str, AttestationRecord] = field(default_factory=dict)
    skipped_count: int = field(default=0, compare=False)

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator[str]:
        return iter(self.records)

    def __contains__(self, signer: object) -> bool:
        return isinstance(signer, str) and normalize_signer(signer) in self.records

    def get(self, signer: str) -> AttestationRecord | None:
        """Get the resolved record for a signer (case-insensitive)."""
        return self.records.get(normalize_signer(signer))

    def items(self) -> Iterator[tuple[str, AttestationRecord]]:
        return iter(self.records.items())

    def as_records(self) -> list[AttestationRecord]:
        """Return the resolved records as a plain list."""
        return list(self.records.values())


@dataclass(frozen=True, eq=True)
class Tally:
    """Aggregated judgment counts for one subject.

    Attributes:
        positive_count: Signers whose latest judgment is safe / upvote.
        negative_count: Signers whose latest judgment is unsafe / downvote.
        current_user_judgment: The viewer's own resolved judgment, or None
            if the viewer has not judged this subject (or is anonymous).
    """

    positive_count: int = 0
    negative_count: int = 0
    current_user_judgment: Judgment | None = None

    def __post_init__(self) -> None:
        """Validate tally invariants."""
        if self.positive_count < 0 or self.negative_count < 0:
            raise ValueError(
                f"Tally counts must be non-negative, got "
                f"{self.positive_count}/{self.negative_count}"
            )

    @classmethod
    def empty(cls) -> Tally:
        """Neutral tally used when nothing can be loaded."""
        return cls()

    @property
    def total(self) -> int:
        return self.positive_count + self.negative_count

    @property
    def has_current_user_judgment(self) -> bool:
        return self.current_user_judgment is not None

    # Site rating view

    @property
    def safe_count(self) -> int:
        return self.positive_count

    @property
    def unsafe_count(self) -> int:
        return self.negative_count

    @property
    def user_rating(self) -> bool | None:
        """Viewer's own safety rating, or None if absent."""
        if isinstance(self.current_user_judgment, SafetyJudgment):
            return self.current_user_judgment.is_safe
        return None

    # Comment vote view

    @property
    def upvotes(self) -> int:
        return self.positive_count

    @property
    def downvotes(self) -> int:
        return self.negative_count

    @property
    def user_vote(self) -> int | None:
        """Viewer's own vote (+1 / -1), or None if absent."""
        if isinstance(self.current_user_judgment, VoteJudgment):
            return self.current_user_judgment.value
        return None

    def to_dict(self) -> dict[str, Any]:
        """Serialize for logging and API responses."""
        return {
            "positive_count": self.positive_count,
            "negative_count": self.negative_count,
            "total": self.total,
            "current_user_judgment": (
                None
                if self.current_user_judgment is None
                else self.current_user_judgment.is_positive
            ),
        }
