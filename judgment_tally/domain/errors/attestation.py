"""Attestation and rating domain errors.

This module defines the error taxonomy for loading, resolving and
submitting judgments. All errors inherit from TallyError.

Recovery policy:
- ConfigurationMissingError: recovered locally as a neutral tally
- RetrievalFailureError: logged, prior state for the subject preserved
- SubmissionPreconditionError: raised to the caller before any I/O
- SubmissionFailureError: notified and raised, state untouched
- MalformedRecordError: the record is skipped, the batch continues
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from judgment_tally.domain.exceptions import TallyError

if TYPE_CHECKING:
    from judgment_tally.domain.models.attestation_record import JudgmentKind
    from judgment_tally.domain.models.rating_state import RatingPhase


class AttestationError(TallyError):
    """Base class for attestation-related errors."""

    pass


class ConfigurationMissingError(AttestationError):
    """Raised when the schema identifier for a judgment kind is absent.

    Attributes:
        judgment_kind: The judgment kind whose schema is not configured.
    """

    def __init__(self, judgment_kind: JudgmentKind) -> None:
        """Initialize ConfigurationMissingError.

        Args:
            judgment_kind: The judgment kind whose schema is not configured.
        """
        self.judgment_kind = judgment_kind
        super().__init__(
            f"No schema identifier configured for {judgment_kind.value} judgments"
        )


class AttestationServiceError(AttestationError):
    """Raised by attestation service adapters on transport or service failure.

    Attributes:
        operation: The service operation that failed.
        reason: Description of the failure.
    """

    def __init__(self, operation: str, reason: str) -> None:
        self.operation = operation
        self.reason = reason
        super().__init__(f"Attestation service {operation} failed: {reason}")


class RetrievalFailureError(AttestationError):
    """Raised when records for a subject could not be retrieved.

    Attributes:
        subject: The normalized subject being loaded.
        reason: Description of the underlying failure.
    """

    def __init__(self, subject: str, reason: str) -> None:
        """Initialize RetrievalFailureError.

        Args:
            subject: The normalized subject being loaded.
            reason: Description of the underlying failure.
        """
        self.subject = subject
        self.reason = reason
        super().__init__(f"Failed to retrieve attestations for '{subject}': {reason}")


class SubmissionPreconditionError(AttestationError):
    """Raised when a submission is attempted without its prerequisites.

    No I/O is performed when this error is raised.

    Attributes:
        missing: Names of the missing prerequisites (identity, subject, schema_id).
        detail: Optional extra description (e.g. judgment kind mismatch).
    """

    def __init__(
        self,
        missing: tuple[str, ...] = (),
        detail: str | None = None,
    ) -> None:
        """Initialize SubmissionPreconditionError.

        Args:
            missing: Names of the missing prerequisites.
            detail: Optional extra description.
        """
        self.missing = missing
        self.detail = detail

        parts = []
        if missing:
            parts.append(f"missing {', '.join(missing)}")
        if detail:
            parts.append(detail)
        reason = "; ".join(parts) if parts else "precondition not met"
        super().__init__(f"Cannot submit judgment: {reason}")


class SubmissionFailureError(AttestationError):
    """Raised when the attestation service rejects or fails a submission.

    Attributes:
        subject: The normalized subject of the submission.
        reason: Description of the underlying failure.
    """

    def __init__(self, subject: str, reason: str) -> None:
        self.subject = subject
        self.reason = reason
        super().__init__(f"Failed to submit judgment for '{subject}': {reason}")


class MalformedRecordError(AttestationError):
    """Raised when an individual attestation record cannot be decoded.

    Attributes:
        uid: Identifier of the offending record (may be empty).
        reason: Why the record could not be decoded.
    """

    def __init__(self, uid: str, reason: str) -> None:
        self.uid = uid
        self.reason = reason
        super().__init__(f"Malformed attestation record '{uid}': {reason}")


class InvalidRatingTransitionError(TallyError):
    """Raised when the rating state machine is asked for an illegal transition.

    Attributes:
        from_phase: Current phase.
        to_phase: Attempted target phase.
    """

    def __init__(self, from_phase: RatingPhase, to_phase: RatingPhase) -> None:
        self.from_phase = from_phase
        self.to_phase = to_phase
        super().__init__(
            f"Invalid rating transition from {from_phase.value} to {to_phase.value}"
        )
