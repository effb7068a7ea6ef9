"""Comment votes service.

Each comment is its own subject and gets its own state machine, the
way each comment widget owns its vote state. Votes for a page of
comments are loaded concurrently.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable

import structlog

from judgment_tally.application.ports.attestation_service import (
    AttestationServiceProtocol,
)
from judgment_tally.application.ports.identity_context import IdentityContextProtocol
from judgment_tally.application.ports.notification_channel import (
    NotificationChannelProtocol,
)
from judgment_tally.application.ports.tally_metrics import (
    TallyMetricsCollectorProtocol,
)
from judgment_tally.application.services.subject_rating_state_machine import (
    SubjectRatingStateMachine,
)
from judgment_tally.config.tally_config import ResolutionStrategy
from judgment_tally.domain.models.attestation_record import JudgmentKind, VoteJudgment
from judgment_tally.domain.models.rating_state import RatingPhase, RatingSnapshot
from judgment_tally.domain.models.subject import normalize_subject
from judgment_tally.domain.models.tally import Tally

logger = structlog.get_logger(__name__)


class CommentVotesService:
    """Upvote / downvote tallies for comments.

    Example:
        >>> service = CommentVotesService(
        ...     schema_id="schema-comment-vote",
        ...     attestation_service=attestations,
        ...     identity_context=identity,
        ... )
        >>> votes = await service.get_votes_for_comments(["c-1", "c-2"])
        >>> votes["c-1"].upvotes, votes["c-1"].user_vote
        (4, -1)
    """

    def __init__(
        self,
        schema_id: str | None,
        attestation_service: AttestationServiceProtocol,
        identity_context: IdentityContextProtocol,
        notification_channel: NotificationChannelProtocol | None = None,
        strategy: ResolutionStrategy = ResolutionStrategy.BULK,
        metrics_collector: TallyMetricsCollectorProtocol | None = None,
    ) -> None:
        """Initialize the service.

        Args:
            schema_id: Vote schema identifier, or None if not configured.
            attestation_service: Source and sink of attestation records.
            identity_context: Provider of the viewer identity.
            notification_channel: Optional receiver of vote outcomes.
            strategy: Retrieval strategy for resolution passes.
            metrics_collector: Optional metrics collector.
        """
        self._schema_id = schema_id
        self._attestation_service = attestation_service
        self._identity_context = identity_context
        self._notification_channel = notification_channel
        self._strategy = strategy
        self._metrics_collector = metrics_collector
        self._machines: dict[str, SubjectRatingStateMachine] = {}
        self._log = logger.bind(component="comment_votes")

    def machine_for(self, comment_id: str) -> SubjectRatingStateMachine:
        """Get (creating on first use) the state machine of a comment."""
        comment_key = normalize_subject(comment_id)
        machine = self._machines.get(comment_key)
        if machine is None:
            machine = SubjectRatingStateMachine(
                judgment_kind=JudgmentKind.VOTE,
                schema_id=self._schema_id,
                attestation_service=self._attestation_service,
                identity_context=self._identity_context,
                notification_channel=self._notification_channel,
                strategy=self._strategy,
                metrics_collector=self._metrics_collector,
            )
            self._machines[comment_key] = machine
        return machine

    async def get_votes_for_comments(
        self,
        comment_ids: Iterable[str],
    ) -> dict[str, Tally]:
        """Load vote tallies for several comments concurrently.

        Args:
            comment_ids: Comment identifiers (normalized here, blanks and
                duplicates dropped).

        Returns:
            Map of normalized comment id to tally. Empty when the vote
            schema is not configured. Comments whose retrieval failed
            without a prior tally are omitted.
        """
        if self._schema_id is None:
            self._log.info("vote_schema_not_configured")
            return {}

        keys = list(dict.fromkeys(k for k in map(normalize_subject, comment_ids) if k))
        if not keys:
            return {}

        snapshots = await asyncio.gather(
            *(self.machine_for(key).load_ratings(key) for key in keys)
        )

        votes: dict[str, Tally] = {}
        for key, snapshot in zip(keys, snapshots):
            if snapshot is None:
                continue
            votes[key] = snapshot.tally

        if len(votes) < len(keys):
            self._log.warning(
                "comment_votes_partially_loaded",
                requested=len(keys),
                loaded=len(votes),
            )
        return votes

    async def vote_on_comment(
        self,
        comment_id: str,
        is_upvote: bool,
    ) -> RatingSnapshot | None:
        """Vote on a comment, replacing any earlier vote by the viewer.

        Args:
            comment_id: Comment identifier.
            is_upvote: True for an upvote, False for a downvote.

        Returns:
            Snapshot of the refresh that follows the vote.

        Raises:
            SubmissionPreconditionError: Missing schema, comment id or identity.
            SubmissionFailureError: The attestation service failed the write.
        """
        machine = self.machine_for(comment_id)
        return await machine.submit_judgment(comment_id, VoteJudgment.from_bool(is_upvote))

    def failed_comments(self) -> list[str]:
        """Comment ids whose last load failed without a prior tally."""
        return [
            key
            for key, machine in self._machines.items()
            if machine.state.phase is RatingPhase.FAILED
        ]

    async def close(self) -> None:
        await asyncio.gather(*(machine.aclose() for machine in self._machines.values()))
        self._machines.clear()
