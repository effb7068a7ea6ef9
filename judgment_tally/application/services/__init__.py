"""Application services for judgment-tally."""

from judgment_tally.application.services.comment_votes_service import (
    CommentVotesService,
)
from judgment_tally.application.services.site_ratings_session import (
    SiteRatingsSession,
)
from judgment_tally.application.services.subject_rating_state_machine import (
    SubjectRatingStateMachine,
)
from judgment_tally.application.services.tally_pipeline import JudgmentTallyPipeline

__all__ = [
    "CommentVotesService",
    "JudgmentTallyPipeline",
    "SiteRatingsSession",
    "SubjectRatingStateMachine",
]
