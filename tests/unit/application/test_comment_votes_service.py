"""Unit tests for CommentVotesService."""

import pytest

from judgment_tally.application.services.comment_votes_service import (
    CommentVotesService,
)
from judgment_tally.config.tally_config import TEST_TALLY_CONFIG
from judgment_tally.domain.errors.attestation import SubmissionPreconditionError
from judgment_tally.domain.models.attestation_record import (
    DOWNVOTE,
    UPVOTE,
    JudgmentKind,
    VoteJudgment,
)
from judgment_tally.infrastructure.stubs import (
    AttestationServiceStub,
    IdentityContextStub,
    NotificationChannelStub,
)

SCHEMA = TEST_TALLY_CONFIG.comment_vote_schema_id


@pytest.fixture
def service(
    attestations: AttestationServiceStub,
    identity: IdentityContextStub,
    channel: NotificationChannelStub,
) -> CommentVotesService:
    return CommentVotesService(
        schema_id=SCHEMA,
        attestation_service=attestations,
        identity_context=identity,
        notification_channel=channel,
    )


class TestGetVotesForComments:
    """Tests for get_votes_for_comments."""

    @pytest.mark.asyncio
    async def test_loads_each_comment(
        self,
        service: CommentVotesService,
        attestations: AttestationServiceStub,
    ) -> None:
        attestations.add_judgment(SCHEMA, "c-1", "0xAlice", VoteJudgment(value=UPVOTE))
        attestations.add_judgment(SCHEMA, "c-1", "0xViewer", VoteJudgment(value=DOWNVOTE))
        attestations.add_judgment(SCHEMA, "c-2", "0xBob", VoteJudgment(value=UPVOTE))

        votes = await service.get_votes_for_comments(["c-1", "c-2", "c-3"])

        assert (votes["c-1"].upvotes, votes["c-1"].downvotes, votes["c-1"].user_vote) == (1, 1, -1)
        assert (votes["c-2"].upvotes, votes["c-2"].user_vote) == (1, None)
        assert votes["c-3"].total == 0

    @pytest.mark.asyncio
    async def test_ids_normalized_and_deduplicated(
        self,
        service: CommentVotesService,
        attestations: AttestationServiceStub,
    ) -> None:
        votes = await service.get_votes_for_comments([" C-1 ", "c-1", "", "   "])

        assert list(votes) == ["c-1"]
        assert len(attestations.calls_to("list_records")) == 1

    @pytest.mark.asyncio
    async def test_unconfigured_returns_empty(
        self,
        attestations: AttestationServiceStub,
        identity: IdentityContextStub,
    ) -> None:
        service = CommentVotesService(
            schema_id=None,
            attestation_service=attestations,
            identity_context=identity,
        )

        assert await service.get_votes_for_comments(["c-1"]) == {}
        assert attestations.calls == []

    @pytest.mark.asyncio
    async def test_failed_comments_omitted(
        self,
        service: CommentVotesService,
        attestations: AttestationServiceStub,
    ) -> None:
        attestations.add_judgment(SCHEMA, "c-1", "0xAlice", VoteJudgment(value=UPVOTE))
        attestations.fail_subject("c-2")

        votes = await service.get_votes_for_comments(["c-1", "c-2"])

        assert set(votes) == {"c-1"}
        assert service.failed_comments() == ["c-2"]


class TestVoteOnComment:
    """Tests for vote_on_comment."""

    @pytest.mark.asyncio
    async def test_revote_replaces_earlier_vote(
        self,
        service: CommentVotesService,
        channel: NotificationChannelStub,
    ) -> None:
        await service.vote_on_comment("c-1", is_upvote=True)
        snapshot = await service.vote_on_comment("c-1", is_upvote=False)

        assert (snapshot.tally.upvotes, snapshot.tally.downvotes) == (0, 1)
        assert snapshot.tally.user_vote == DOWNVOTE
        assert channel.messages == ["Vote recorded successfully!"] * 2

    @pytest.mark.asyncio
    async def test_anonymous_vote_rejected(
        self,
        service: CommentVotesService,
        identity: IdentityContextStub,
        attestations: AttestationServiceStub,
    ) -> None:
        identity.sign_out()

        with pytest.raises(SubmissionPreconditionError):
            await service.vote_on_comment("c-1", is_upvote=True)
        assert attestations.calls == []

    @pytest.mark.asyncio
    async def test_machine_per_comment(self, service: CommentVotesService) -> None:
        machine = service.machine_for("C-1")

        assert service.machine_for("c-1") is machine
        assert service.machine_for("c-2") is not machine
        assert machine.judgment_kind is JudgmentKind.VOTE

    @pytest.mark.asyncio
    async def test_close_forgets_machines(self, service: CommentVotesService) -> None:
        machine = service.machine_for("c-1")
        await service.close()
        assert service.machine_for("c-1") is not machine
