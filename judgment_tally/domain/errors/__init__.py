"""Domain errors for judgment-tally.

Provides specific exception classes for different failure scenarios.
All exceptions inherit from TallyError.
"""

from judgment_tally.domain.errors.attestation import (
    AttestationError,
    AttestationServiceError,
    ConfigurationMissingError,
    InvalidRatingTransitionError,
    MalformedRecordError,
    RetrievalFailureError,
    SubmissionFailureError,
    SubmissionPreconditionError,
)

__all__: list[str] = [
    "AttestationError",
    "AttestationServiceError",
    "ConfigurationMissingError",
    "InvalidRatingTransitionError",
    "MalformedRecordError",
    "RetrievalFailureError",
    "SubmissionFailureError",
    "SubmissionPreconditionError",
]
