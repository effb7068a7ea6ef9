"""Site rating and comment vote API request/response models.

Developer Golden Rules:
1. VALIDATE EARLY - Pydantic handles schema validation
2. FAIL LOUD - Rejected submissions return 400/502 with RFC 7807 bodies
3. Counts are never negative
"""

from datetime import datetime
from typing import Annotated

from pydantic import BaseModel, Field, PlainSerializer

from judgment_tally.domain.models.notification import SubmissionNotification

DateTimeWithZ = Annotated[
    datetime,
    PlainSerializer(
        lambda v: v.isoformat().replace("+00:00", "Z") if v else None, return_type=str
    ),
]


class SiteRatingRequest(BaseModel):
    """Request to rate a site as safe or unsafe.

    Attributes:
        url: Page URL; the site is its hostname.
        is_safe: True to rate safe, False to rate unsafe.
    """

    url: str = Field(..., min_length=1, description="Page URL being rated")
    is_safe: bool = Field(..., description="True to rate the site safe")


class CommentVoteRequest(BaseModel):
    """Request to vote on a comment."""

    is_upvote: bool = Field(..., description="True for an upvote, False for a downvote")


class NotificationResponse(BaseModel):
    """Outcome notification of a submission."""

    kind: str = Field(..., description="success or error")
    message: str
    created_at: DateTimeWithZ

    @classmethod
    def from_notification(
        cls, notification: SubmissionNotification | None
    ) -> "NotificationResponse | None":
        if notification is None:
            return None
        return cls(
            kind=notification.kind.value,
            message=notification.message,
            created_at=notification.created_at,
        )


class SiteRatingsResponse(BaseModel):
    """Ratings of the site a URL belongs to.

    Attributes:
        url: URL as requested.
        subject: Lowercase hostname, or None if the URL has none.
        is_valid_url: Whether the URL can be rated.
        phase: Rating phase after the load (IDLE, READY or FAILED).
        safe_count: Signers whose latest rating is safe.
        unsafe_count: Signers whose latest rating is unsafe.
        user_rating: Viewer's own latest rating, or None.
        last_error: Retrieval error kept alongside a prior tally, if any.
    """

    url: str
    subject: str | None = None
    is_valid_url: bool
    phase: str
    safe_count: int = Field(default=0, ge=0)
    unsafe_count: int = Field(default=0, ge=0)
    user_rating: bool | None = None
    last_error: str | None = None


class SiteRatingResult(BaseModel):
    """Result of rating a site: refreshed ratings plus the notification."""

    ratings: SiteRatingsResponse
    notification: NotificationResponse | None = None


class CommentVoteTally(BaseModel):
    """Vote tally of one comment."""

    upvotes: int = Field(default=0, ge=0)
    downvotes: int = Field(default=0, ge=0)
    user_vote: int | None = Field(
        default=None, description="Viewer's own vote (+1 / -1), or None"
    )


class CommentVotesResponse(BaseModel):
    """Vote tallies for a batch of comments.

    Attributes:
        votes: Tally per normalized comment id.
        failed: Comment ids that could not be loaded.
    """

    votes: dict[str, CommentVoteTally] = Field(default_factory=dict)
    failed: list[str] = Field(default_factory=list)


class CommentVoteResult(BaseModel):
    """Result of voting on a comment."""

    comment_id: str
    votes: CommentVoteTally | None = None
    notification: NotificationResponse | None = None


class TallyErrorResponse(BaseModel):
    """RFC 7807 problem details."""

    type: str
    title: str
    status: int
    detail: str
    instance: str
