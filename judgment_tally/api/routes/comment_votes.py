"""Comment vote API routes."""

from fastapi import APIRouter, Depends, Query, Request

from judgment_tally.api.dependencies.tally import (
    get_comment_votes_service,
    get_notification_channel,
)
from judgment_tally.api.models.tally import (
    CommentVoteRequest,
    CommentVoteResult,
    CommentVotesResponse,
    CommentVoteTally,
    NotificationResponse,
    TallyErrorResponse,
)
from judgment_tally.api.routes.problems import precondition_failed, submission_failed
from judgment_tally.application.services.comment_votes_service import (
    CommentVotesService,
)
from judgment_tally.domain.errors.attestation import (
    SubmissionFailureError,
    SubmissionPreconditionError,
)
from judgment_tally.domain.models.subject import normalize_subject
from judgment_tally.domain.models.tally import Tally
from judgment_tally.infrastructure.adapters.notification import (
    LoggingNotificationChannel,
)

router = APIRouter(prefix="/v1/comments", tags=["comment-votes"])


def _vote_tally(tally: Tally) -> CommentVoteTally:
    return CommentVoteTally(
        upvotes=tally.upvotes,
        downvotes=tally.downvotes,
        user_vote=tally.user_vote,
    )


@router.get("/votes", response_model=CommentVotesResponse, summary="Get comment votes")
async def get_comment_votes(
    comment_id: list[str] = Query(default=[]),
    service: CommentVotesService = Depends(get_comment_votes_service),
) -> CommentVotesResponse:
    """Load vote tallies for a batch of comments.

    Comments that could not be loaded are listed under ``failed``.
    """
    votes = await service.get_votes_for_comments(comment_id)
    return CommentVotesResponse(
        votes={key: _vote_tally(tally) for key, tally in votes.items()},
        failed=service.failed_comments(),
    )


@router.post(
    "/{comment_id}/votes",
    response_model=CommentVoteResult,
    status_code=201,
    responses={
        400: {"model": TallyErrorResponse, "description": "Missing identity or schema"},
        502: {"model": TallyErrorResponse, "description": "Attestation service rejected the vote"},
    },
    summary="Vote on a comment",
)
async def vote_on_comment(
    comment_id: str,
    request_data: CommentVoteRequest,
    request: Request,
    service: CommentVotesService = Depends(get_comment_votes_service),
    channel: LoggingNotificationChannel = Depends(get_notification_channel),
) -> CommentVoteResult:
    """Upvote or downvote a comment, replacing the caller's earlier vote.

    Raises:
        HTTPException 400: Submission preconditions not met.
        HTTPException 502: The attestation service failed the write.
    """
    try:
        snapshot = await service.vote_on_comment(comment_id, request_data.is_upvote)
    except SubmissionPreconditionError as e:
        raise precondition_failed(request, e) from None
    except SubmissionFailureError as e:
        raise submission_failed(request, e) from None

    return CommentVoteResult(
        comment_id=normalize_subject(comment_id),
        votes=_vote_tally(snapshot.tally) if snapshot is not None else None,
        notification=NotificationResponse.from_notification(channel.last_notification),
    )
