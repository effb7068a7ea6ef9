"""Domain models for judgment-tally."""

from judgment_tally.domain.models.attestation_record import (
    DOWNVOTE,
    UPVOTE,
    AttestationRecord,
    Judgment,
    JudgmentKind,
    SafetyJudgment,
    VoteJudgment,
    decode_judgment,
)
from judgment_tally.domain.models.notification import (
    NotificationKind,
    SubmissionNotification,
)
from judgment_tally.domain.models.rating_state import (
    IdentityChanged,
    RatingPhase,
    RatingSnapshot,
    RatingState,
    RatingTrigger,
    SubjectChanged,
    SubmissionCompleted,
)
from judgment_tally.domain.models.subject import (
    is_valid_flag_url,
    normalize_signer,
    normalize_subject,
    subject_from_url,
)
from judgment_tally.domain.models.tally import ResolvedJudgmentSet, Tally

__all__ = [
    "AttestationRecord",
    "DOWNVOTE",
    "IdentityChanged",
    "Judgment",
    "JudgmentKind",
    "NotificationKind",
    "RatingPhase",
    "RatingSnapshot",
    "RatingState",
    "RatingTrigger",
    "ResolvedJudgmentSet",
    "SafetyJudgment",
    "SubjectChanged",
    "SubmissionCompleted",
    "SubmissionNotification",
    "Tally",
    "UPVOTE",
    "VoteJudgment",
    "decode_judgment",
    "is_valid_flag_url",
    "normalize_signer",
    "normalize_subject",
    "subject_from_url",
]
