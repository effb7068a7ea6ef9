"""RFC 7807 problem details for tally routes."""

from fastapi import HTTPException, Request

from judgment_tally.domain.errors.attestation import (
    SubmissionFailureError,
    SubmissionPreconditionError,
)


def problem(
    request: Request, status: int, type_suffix: str, title: str, detail: str
) -> HTTPException:
    """Build an HTTPException carrying an RFC 7807 body."""
    return HTTPException(
        status_code=status,
        detail={
            "type": f"urn:judgment-tally:{type_suffix}",
            "title": title,
            "status": status,
            "detail": detail,
            "instance": str(request.url),
        },
    )


def precondition_failed(request: Request, error: SubmissionPreconditionError) -> HTTPException:
    return problem(
        request,
        400,
        "submission:precondition-failed",
        "Submission Precondition Failed",
        str(error),
    )


def submission_failed(request: Request, error: SubmissionFailureError) -> HTTPException:
    return problem(
        request,
        502,
        "submission:attestation-failed",
        "Attestation Service Rejected Submission",
        str(error),
    )
