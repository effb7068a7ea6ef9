"""Attestation record domain models.

An AttestationRecord is one signed judgment by one identity about one
subject, as returned by the attestation service. Records are immutable
snapshots; the judgment payload is decoded on demand so that a record
with an undecodable body can be excluded from resolution without
aborting the rest of the batch.

Payload variants:
- SafetyJudgment: site rating, body {"url": ..., "isSafe": bool}
- VoteJudgment: comment vote, body {"commentId": ..., "vote": +1 | -1}
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, ClassVar, Union

from judgment_tally.domain.errors.attestation import MalformedRecordError
from judgment_tally.domain.models.subject import normalize_signer

UPVOTE = 1
DOWNVOTE = -1


class JudgmentKind(Enum):
    """Type of judgment an attestation schema carries.

    Kinds:
        SAFETY: Site safety rating (safe / unsafe)
        VOTE: Comment vote (upvote / downvote)
    """

    SAFETY = "SAFETY"
    VOTE = "VOTE"


@dataclass(frozen=True, eq=True)
class SafetyJudgment:
    """A site safety rating.

    Attributes:
        is_safe: True if the signer rated the site safe.
    """

    kind: ClassVar[JudgmentKind] = JudgmentKind.SAFETY

    is_safe: bool

    def __post_init__(self) -> None:
        if not isinstance(self.is_safe, bool):
            raise ValueError(f"is_safe must be a bool, got {self.is_safe!r}")

    @property
    def is_positive(self) -> bool:
        return self.is_safe

    def to_data(self, subject: str) -> dict[str, Any]:
        """Encode as an attestation body for the given subject."""
        return {"url": subject, "isSafe": self.is_safe}


@dataclass(frozen=True, eq=True)
class VoteJudgment:
    """A comment vote.

    Attributes:
        value: +1 for an upvote, -1 for a downvote.
    """

    kind: ClassVar[JudgmentKind] = JudgmentKind.VOTE

    value: int

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or self.value not in (UPVOTE, DOWNVOTE):
            raise ValueError(f"vote must be {UPVOTE} or {DOWNVOTE}, got {self.value!r}")

    @classmethod
    def from_bool(cls, is_upvote: bool) -> VoteJudgment:
        return cls(value=UPVOTE if is_upvote else DOWNVOTE)

    @property
    def is_positive(self) -> bool:
        return self.value == UPVOTE

    def to_data(self, subject: str) -> dict[str, Any]:
        """Encode as an attestation body for the given subject."""
        return {"commentId": subject, "vote": self.value}


Judgment = Union[SafetyJudgment, VoteJudgment]


def decode_judgment(kind: JudgmentKind, data: Mapping[str, Any], uid: str = "") -> Judgment:
    """Decode an attestation body into a judgment payload.

    Args:
        kind: The judgment kind the record's schema carries.
        data: Decoded attestation body.
        uid: Record identifier, used for error reporting.

    Returns:
        SafetyJudgment or VoteJudgment.

    Raises:
        MalformedRecordError: If the body does not hold a valid payload.
    """
    if not isinstance(data, Mapping):
        raise MalformedRecordError(uid, "attestation body is not a mapping")

    field_name = "isSafe" if kind is JudgmentKind.SAFETY else "vote"
    if field_name not in data:
        raise MalformedRecordError(uid, f"missing '{field_name}' field")

    try:
        if kind is JudgmentKind.SAFETY:
            return SafetyJudgment(is_safe=data["isSafe"])
        return VoteJudgment(value=data["vote"])
    except ValueError as e:
        raise MalformedRecordError(uid, str(e)) from e


@dataclass(frozen=True, eq=True)
class AttestationRecord:
    """One signed judgment retrieved from the attestation service.

    Attributes:
        uid: Attestation identifier issued by the service.
        signer: Identity of the issuer (compared case-insensitively).
        subject: Normalized subject key the record is about.
        timestamp: Issuance time. Naive values are read as UTC.
        kind: Judgment kind of the record's schema.
        data: Decoded attestation body.
    """

    uid: str
    signer: str
    subject: str
    timestamp: datetime
    kind: JudgmentKind
    data: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_judgment(
        cls,
        uid: str,
        signer: str,
        subject: str,
        timestamp: datetime,
        judgment: Judgment,
    ) -> AttestationRecord:
        """Build a record carrying the given judgment."""
        return cls(
            uid=uid,
            signer=signer,
            subject=subject,
            timestamp=timestamp,
            kind=judgment.kind,
            data=judgment.to_data(subject),
        )

    @property
    def signer_key(self) -> str:
        """Case-folded signer identity used for grouping."""
        return normalize_signer(self.signer)

    @property
    def issued_at(self) -> datetime:
        """Timestamp as an aware UTC datetime, comparable across records."""
        if self.timestamp.tzinfo is None:
            return self.timestamp.replace(tzinfo=timezone.utc)
        return self.timestamp

    def judgment(self) -> Judgment:
        """Decode and validate this record's payload.

        Returns:
            The judgment payload.

        Raises:
            MalformedRecordError: If the signer is blank, the timestamp is
                not a datetime, or the body cannot be decoded.
        """
        if not isinstance(self.signer, str) or not self.signer.strip():
            raise MalformedRecordError(self.uid, "blank signer")
        if not isinstance(self.timestamp, datetime):
            raise MalformedRecordError(self.uid, "missing timestamp")
        return decode_judgment(self.kind, self.data, self.uid)
