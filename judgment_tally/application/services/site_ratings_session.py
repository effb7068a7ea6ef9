"""Site ratings session service.

Owns the page the viewer currently has open and the state machine that
rates it. The subject of a page is its lowercase hostname, so every
page of a site shares one rating. Only http(s) pages can be rated.
"""

from __future__ import annotations

import structlog

from judgment_tally.application.services.subject_rating_state_machine import (
    SubjectRatingStateMachine,
)
from judgment_tally.domain.errors.attestation import SubmissionPreconditionError
from judgment_tally.domain.models.attestation_record import JudgmentKind, SafetyJudgment
from judgment_tally.domain.models.rating_state import (
    IdentityChanged,
    RatingSnapshot,
    SubjectChanged,
)
from judgment_tally.domain.models.subject import is_valid_flag_url, subject_from_url
from judgment_tally.domain.models.tally import Tally

logger = structlog.get_logger(__name__)


class SiteRatingsSession:
    """Site safety ratings for the currently open page.

    Usage:
        session = SiteRatingsSession(machine)
        await session.open_url("https://Example.com/some/page")
        session.site_ratings.safe_count
        await session.rate_site(is_safe=True)
    """

    def __init__(self, machine: SubjectRatingStateMachine) -> None:
        """Initialize the session.

        Args:
            machine: State machine for SAFETY judgments.

        Raises:
            ValueError: If the machine tallies a different judgment kind.
        """
        if machine.judgment_kind is not JudgmentKind.SAFETY:
            raise ValueError(
                f"SiteRatingsSession requires a SAFETY machine, "
                f"got {machine.judgment_kind.value}"
            )
        self._machine = machine
        self._current_url: str | None = None
        self._current_subject: str | None = None
        self._is_valid_url = False

    @property
    def machine(self) -> SubjectRatingStateMachine:
        return self._machine

    @property
    def current_url(self) -> str | None:
        return self._current_url

    @property
    def current_subject(self) -> str | None:
        """Hostname of the open page, or None."""
        return self._current_subject

    @property
    def is_valid_url(self) -> bool:
        return self._is_valid_url

    @property
    def loading(self) -> bool:
        return self._machine.state.is_loading

    @property
    def site_ratings(self) -> Tally | None:
        """Published tally for the open site, or None if not loaded."""
        state = self._machine.state
        if state.subject != self._current_subject:
            return None
        return state.tally

    @property
    def user_rating(self) -> bool | None:
        tally = self.site_ratings
        return tally.user_rating if tally is not None else None

    async def open_url(self, url: str) -> RatingSnapshot | None:
        """Make a page the open page and load its site's ratings.

        Args:
            url: Full page URL.

        Returns:
            Snapshot of the load, or None if the URL carries no hostname.
        """
        self._current_url = url
        self._current_subject = subject_from_url(url)
        self._is_valid_url = is_valid_flag_url(url)

        if self._current_subject is None:
            logger.info("site_session_url_without_hostname", url=url)
            return None

        return await self._machine.handle(SubjectChanged(subject=self._current_subject))

    async def identity_changed(self) -> RatingSnapshot | None:
        """Reload the open site after the viewer identity changed."""
        return await self._machine.handle(IdentityChanged())

    async def rate_site(self, is_safe: bool) -> RatingSnapshot | None:
        """Rate the open site.

        Args:
            is_safe: True to rate the site safe, False for unsafe.

        Returns:
            Snapshot of the refresh that follows the rating.

        Raises:
            SubmissionPreconditionError: No page is open, the page cannot be
                rated, or the machine's own preconditions fail.
            SubmissionFailureError: The attestation service failed the write.
        """
        if self._current_subject is None:
            raise SubmissionPreconditionError(missing=("subject",))
        if not self._is_valid_url:
            raise SubmissionPreconditionError(
                detail=f"'{self._current_url}' cannot be rated"
            )
        return await self._machine.submit_judgment(
            self._current_subject, SafetyJudgment(is_safe=is_safe)
        )

    async def close(self) -> None:
        await self._machine.aclose()
