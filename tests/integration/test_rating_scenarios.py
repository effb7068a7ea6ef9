"""End-to-end rating scenarios over the in-memory attestation service.

Every judgment is submitted through a state machine signing as its own
identity, then read back by a separate viewer, the way several browser
sessions share one attestation store.

Scenarios:
1. Safety re-rating: the first signer's revision replaces their earlier rating
2. Vote revision: only each voter's latest vote counts
3. Missing configuration: neutral tally, no service calls, no error
4. Failed submission: prior tally untouched, exactly one error notification
"""

import pytest

from judgment_tally.application.services import (
    CommentVotesService,
    SiteRatingsSession,
    SubjectRatingStateMachine,
)
from judgment_tally.config.tally_config import TEST_TALLY_CONFIG, ResolutionStrategy
from judgment_tally.domain.errors.attestation import SubmissionFailureError
from judgment_tally.domain.models.attestation_record import (
    JudgmentKind,
    SafetyJudgment,
    VoteJudgment,
)
from judgment_tally.domain.models.notification import NotificationKind
from judgment_tally.domain.models.rating_state import RatingPhase
from judgment_tally.domain.models.tally import Tally
from judgment_tally.infrastructure.stubs import (
    AttestationServiceStub,
    IdentityContextStub,
    NotificationChannelStub,
)

pytestmark = pytest.mark.integration

SAFETY_SCHEMA = TEST_TALLY_CONFIG.safety_rating_schema_id
VOTE_SCHEMA = TEST_TALLY_CONFIG.comment_vote_schema_id


def _machine_for(
    attestations: AttestationServiceStub,
    signer: str | None,
    kind: JudgmentKind,
    channel: NotificationChannelStub | None = None,
    strategy: ResolutionStrategy = ResolutionStrategy.BULK,
) -> SubjectRatingStateMachine:
    identity = IdentityContextStub(identity=signer)
    return SubjectRatingStateMachine(
        judgment_kind=kind,
        schema_id=TEST_TALLY_CONFIG.schema_id_for(kind),
        attestation_service=attestations.for_identity(identity),
        identity_context=identity,
        notification_channel=channel,
        strategy=strategy,
    )


@pytest.mark.parametrize("strategy", list(ResolutionStrategy))
class TestSafetyReRating:
    """Three signers rate a site, then the first one changes their mind."""

    @pytest.mark.asyncio
    async def test_revision_replaces_earlier_rating(
        self, attestations: AttestationServiceStub, strategy: ResolutionStrategy
    ) -> None:
        for signer, is_safe in [("0xA", True), ("0xB", True), ("0xC", False), ("0xa", False)]:
            machine = _machine_for(attestations, signer, JudgmentKind.SAFETY)
            await machine.submit_judgment("Example.com", SafetyJudgment(is_safe=is_safe))

        viewer = _machine_for(attestations, "0xViewer", JudgmentKind.SAFETY, strategy=strategy)
        snapshot = await viewer.load_ratings("example.com")

        assert (snapshot.tally.positive_count, snapshot.tally.negative_count) == (1, 2)
        assert snapshot.tally.total == 3
        assert snapshot.tally.user_rating is None

        signer_a = _machine_for(attestations, "0xA", JudgmentKind.SAFETY, strategy=strategy)
        assert (await signer_a.load_ratings("example.com")).tally.user_rating is False

    @pytest.mark.asyncio
    async def test_session_sees_the_same_tally(
        self, attestations: AttestationServiceStub, strategy: ResolutionStrategy
    ) -> None:
        for signer, is_safe in [("0xA", True), ("0xB", True), ("0xC", False)]:
            session = SiteRatingsSession(_machine_for(attestations, signer, JudgmentKind.SAFETY))
            await session.open_url("https://example.com/")
            await session.rate_site(is_safe=is_safe)
        session_a = SiteRatingsSession(_machine_for(attestations, "0xA", JudgmentKind.SAFETY))
        await session_a.open_url("https://www.example.com/page")
        # www. is a different subject from example.com
        assert session_a.site_ratings.total == 0

        await session_a.open_url("https://EXAMPLE.com/other")
        await session_a.rate_site(is_safe=False)

        viewer = SiteRatingsSession(
            _machine_for(attestations, "0xViewer", JudgmentKind.SAFETY, strategy=strategy)
        )
        await viewer.open_url("https://example.com/")

        assert (viewer.site_ratings.safe_count, viewer.site_ratings.unsafe_count) == (1, 2)
        assert session_a.user_rating is False


class TestVoteRevision:
    """A votes up then down, B votes up."""

    @pytest.mark.asyncio
    async def test_only_latest_vote_counts(self, attestations: AttestationServiceStub) -> None:
        voter_a = _machine_for(attestations, "0xA", JudgmentKind.VOTE)
        voter_b = _machine_for(attestations, "0xB", JudgmentKind.VOTE)

        await voter_a.submit_judgment("c-1", VoteJudgment.from_bool(True))
        await voter_a.submit_judgment("c-1", VoteJudgment.from_bool(False))
        await voter_b.submit_judgment("c-1", VoteJudgment.from_bool(True))

        snapshot = await voter_a.load_ratings("c-1")

        assert (snapshot.tally.upvotes, snapshot.tally.downvotes) == (1, 1)
        assert snapshot.tally.user_vote == -1
        assert len(attestations.records_for(VOTE_SCHEMA, "c-1")) == 3

    @pytest.mark.asyncio
    async def test_votes_service_across_voters(
        self, attestations: AttestationServiceStub
    ) -> None:
        def service_for(signer: str) -> CommentVotesService:
            identity = IdentityContextStub(identity=signer)
            return CommentVotesService(
                schema_id=VOTE_SCHEMA,
                attestation_service=attestations.for_identity(identity),
                identity_context=identity,
            )

        alice, bob = service_for("0xA"), service_for("0xB")
        await alice.vote_on_comment("c-1", is_upvote=True)
        await alice.vote_on_comment("c-1", is_upvote=False)
        await bob.vote_on_comment("c-1", is_upvote=True)
        await bob.vote_on_comment("c-2", is_upvote=False)

        votes = await alice.get_votes_for_comments(["c-1", "c-2"])

        assert (votes["c-1"].upvotes, votes["c-1"].downvotes, votes["c-1"].user_vote) == (1, 1, -1)
        assert (votes["c-2"].upvotes, votes["c-2"].downvotes, votes["c-2"].user_vote) == (0, 1, None)


class TestMissingConfiguration:
    """No schema identifier configured."""

    @pytest.mark.asyncio
    async def test_neutral_tally_without_service_calls(
        self,
        attestations: AttestationServiceStub,
        identity: IdentityContextStub,
    ) -> None:
        attestations.add_judgment(SAFETY_SCHEMA, "example.com", "0xA", SafetyJudgment(is_safe=True))
        machine = SubjectRatingStateMachine(
            judgment_kind=JudgmentKind.SAFETY,
            schema_id=None,
            attestation_service=attestations,
            identity_context=identity,
        )
        votes = CommentVotesService(
            schema_id=None, attestation_service=attestations, identity_context=identity
        )

        snapshot = await machine.load_ratings("example.com")

        assert snapshot.tally == Tally.empty()
        assert (snapshot.tally.positive_count, snapshot.tally.negative_count, snapshot.tally.total) == (0, 0, 0)
        assert machine.state.phase is RatingPhase.READY
        assert await votes.get_votes_for_comments(["c-1"]) == {}
        assert attestations.calls == []


class TestFailedSubmission:
    """The attestation service rejects a new rating."""

    @pytest.mark.asyncio
    async def test_prior_tally_kept_and_one_error_notified(
        self,
        attestations: AttestationServiceStub,
        safety_machine: SubjectRatingStateMachine,
        channel: NotificationChannelStub,
    ) -> None:
        for signer, is_safe in [("0xA", True), ("0xB", True), ("0xC", False)]:
            attestations.add_judgment(
                SAFETY_SCHEMA, "example.com", signer, SafetyJudgment(is_safe=is_safe)
            )
        before = await safety_machine.load_ratings("example.com")
        attestations.fail_submissions("wallet disconnected")

        with pytest.raises(SubmissionFailureError):
            await safety_machine.submit_judgment("example.com", SafetyJudgment(is_safe=False))

        tally = safety_machine.state.tally
        assert (tally.positive_count, tally.negative_count, tally.total) == (2, 1, 3)
        assert safety_machine.state.snapshot == before
        assert [n.kind for n in channel.notifications] == [NotificationKind.ERROR]
        assert channel.messages == ["Failed to rate site: wallet disconnected"]
