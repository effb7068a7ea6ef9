"""Unit tests for the tally aggregator and Tally model."""

import pytest

from judgment_tally.domain.models.attestation_record import (
    DOWNVOTE,
    UPVOTE,
    SafetyJudgment,
    VoteJudgment,
)
from judgment_tally.domain.models.tally import ResolvedJudgmentSet, Tally
from judgment_tally.domain.services.latest_per_signer import resolve_latest_per_signer
from judgment_tally.domain.services.tally_aggregator import aggregate_tally
from tests.helpers import make_record

SAFE = SafetyJudgment(is_safe=True)
UNSAFE = SafetyJudgment(is_safe=False)


def _resolve(*records):
    return resolve_latest_per_signer(records)


class TestAggregateTally:
    """Tests for aggregate_tally."""

    def test_empty_set_is_neutral(self) -> None:
        assert aggregate_tally(ResolvedJudgmentSet()) == Tally.empty()

    def test_counts_positive_and_negative(self) -> None:
        resolved = _resolve(
            make_record("u-1", "0xA", SAFE),
            make_record("u-2", "0xB", SAFE),
            make_record("u-3", "0xC", UNSAFE),
        )
        tally = aggregate_tally(resolved)
        assert (tally.safe_count, tally.unsafe_count) == (2, 1)

    def test_total_equals_distinct_signers(self) -> None:
        resolved = _resolve(
            make_record("u-1", "0xA", SAFE, at=1),
            make_record("u-2", "0xA", UNSAFE, at=2),
            make_record("u-3", "0xa", SAFE, at=3),
            make_record("u-4", "0xB", UNSAFE, at=1),
        )
        tally = aggregate_tally(resolved)
        assert tally.total == len(resolved) == 2

    def test_own_judgment_found_case_insensitively(self) -> None:
        resolved = _resolve(make_record("u-1", "0xViewer", UNSAFE))
        tally = aggregate_tally(resolved, current_user="0xVIEWER")
        assert tally.user_rating is False
        assert tally.has_current_user_judgment

    def test_absent_own_judgment_is_none_not_negative(self) -> None:
        resolved = _resolve(make_record("u-1", "0xOther", UNSAFE))
        tally = aggregate_tally(resolved, current_user="0xViewer")
        assert tally.current_user_judgment is None
        assert tally.user_rating is None

    def test_anonymous_viewer_has_no_own_judgment(self) -> None:
        resolved = _resolve(make_record("u-1", "0xViewer", SAFE))
        assert aggregate_tally(resolved, current_user=None).current_user_judgment is None

    def test_vote_view(self) -> None:
        resolved = _resolve(
            make_record("v-1", "0xA", VoteJudgment(value=UPVOTE), subject="c-1"),
            make_record("v-2", "0xB", VoteJudgment(value=DOWNVOTE), subject="c-1"),
            make_record("v-3", "0xViewer", VoteJudgment(value=DOWNVOTE), subject="c-1"),
        )
        tally = aggregate_tally(resolved, current_user="0xviewer")
        assert (tally.upvotes, tally.downvotes, tally.user_vote) == (1, 2, -1)
        assert tally.user_rating is None


class TestTally:
    """Tests for the Tally model."""

    def test_negative_counts_rejected(self) -> None:
        with pytest.raises(ValueError):
            Tally(positive_count=-1)

    def test_to_dict(self) -> None:
        tally = Tally(positive_count=2, negative_count=1, current_user_judgment=UNSAFE)
        assert tally.to_dict() == {
            "positive_count": 2,
            "negative_count": 1,
            "total": 3,
            "current_user_judgment": False,
        }
