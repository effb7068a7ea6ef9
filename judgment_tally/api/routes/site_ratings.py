"""Site rating API routes.

GET reads the ratings of the site a URL belongs to; POST rates it.
The caller's identity comes from the X-Signer-Address header.
"""

from fastapi import APIRouter, Depends, Query, Request

from judgment_tally.api.dependencies.tally import (
    get_notification_channel,
    get_site_ratings_session,
)
from judgment_tally.api.models.tally import (
    NotificationResponse,
    SiteRatingRequest,
    SiteRatingResult,
    SiteRatingsResponse,
    TallyErrorResponse,
)
from judgment_tally.api.routes.problems import (
    precondition_failed,
    problem,
    submission_failed,
)
from judgment_tally.application.services.site_ratings_session import (
    SiteRatingsSession,
)
from judgment_tally.domain.errors.attestation import (
    SubmissionFailureError,
    SubmissionPreconditionError,
)
from judgment_tally.domain.models.rating_state import RatingPhase
from judgment_tally.infrastructure.adapters.notification import (
    LoggingNotificationChannel,
)

router = APIRouter(prefix="/v1/sites", tags=["site-ratings"])


def _ratings_view(session: SiteRatingsSession) -> SiteRatingsResponse:
    state = session.machine.state
    tally = session.site_ratings
    return SiteRatingsResponse(
        url=session.current_url or "",
        subject=session.current_subject,
        is_valid_url=session.is_valid_url,
        phase=state.phase.value if session.current_subject else RatingPhase.IDLE.value,
        safe_count=tally.safe_count if tally is not None else 0,
        unsafe_count=tally.unsafe_count if tally is not None else 0,
        user_rating=session.user_rating,
        last_error=state.last_error if session.current_subject else None,
    )


@router.get(
    "/ratings",
    response_model=SiteRatingsResponse,
    responses={502: {"model": TallyErrorResponse, "description": "Ratings could not be loaded"}},
    summary="Get site ratings",
)
async def get_site_ratings(
    request: Request,
    url: str = Query(..., min_length=1, description="Page URL"),
    session: SiteRatingsSession = Depends(get_site_ratings_session),
) -> SiteRatingsResponse:
    """Load the safe / unsafe tally of the site a URL belongs to.

    Raises:
        HTTPException 502: Ratings could not be loaded and none are known.
    """
    await session.open_url(url)

    if session.machine.state.phase is RatingPhase.FAILED:
        raise problem(
            request,
            502,
            "ratings:retrieval-failed",
            "Ratings Unavailable",
            session.machine.state.last_error or "ratings could not be loaded",
        ) from None

    return _ratings_view(session)


@router.post(
    "/ratings",
    response_model=SiteRatingResult,
    status_code=201,
    responses={
        400: {"model": TallyErrorResponse, "description": "Missing identity, schema or rateable URL"},
        502: {"model": TallyErrorResponse, "description": "Attestation service rejected the rating"},
    },
    summary="Rate a site as safe or unsafe",
)
async def rate_site(
    request_data: SiteRatingRequest,
    request: Request,
    session: SiteRatingsSession = Depends(get_site_ratings_session),
    channel: LoggingNotificationChannel = Depends(get_notification_channel),
) -> SiteRatingResult:
    """Rate the site of a URL, replacing the caller's earlier rating.

    Raises:
        HTTPException 400: Submission preconditions not met.
        HTTPException 502: The attestation service failed the write.
    """
    await session.open_url(request_data.url)
    try:
        await session.rate_site(request_data.is_safe)
    except SubmissionPreconditionError as e:
        raise precondition_failed(request, e) from None
    except SubmissionFailureError as e:
        raise submission_failed(request, e) from None

    return SiteRatingResult(
        ratings=_ratings_view(session),
        notification=NotificationResponse.from_notification(channel.last_notification),
    )
