"""Unit tests for attestation record and judgment payload models."""

from datetime import datetime, timezone

import pytest

from judgment_tally.domain.errors.attestation import MalformedRecordError
from judgment_tally.domain.models.attestation_record import (
    DOWNVOTE,
    UPVOTE,
    AttestationRecord,
    JudgmentKind,
    SafetyJudgment,
    VoteJudgment,
    decode_judgment,
)
from tests.helpers import T0, make_raw_record, make_record


class TestSafetyJudgment:
    """Tests for SafetyJudgment."""

    def test_safe_is_positive(self) -> None:
        assert SafetyJudgment(is_safe=True).is_positive is True
        assert SafetyJudgment(is_safe=False).is_positive is False

    def test_body_encoding(self) -> None:
        assert SafetyJudgment(is_safe=False).to_data("example.com") == {
            "url": "example.com",
            "isSafe": False,
        }

    def test_non_bool_rejected(self) -> None:
        with pytest.raises(ValueError):
            SafetyJudgment(is_safe="yes")  # type: ignore[arg-type]


class TestVoteJudgment:
    """Tests for VoteJudgment."""

    def test_from_bool(self) -> None:
        assert VoteJudgment.from_bool(True).value == UPVOTE
        assert VoteJudgment.from_bool(False).value == DOWNVOTE

    def test_body_encoding(self) -> None:
        assert VoteJudgment(value=UPVOTE).to_data("c-1") == {"commentId": "c-1", "vote": 1}

    @pytest.mark.parametrize("value", [0, 2, -2, True])
    def test_only_plus_or_minus_one(self, value: int) -> None:
        with pytest.raises(ValueError):
            VoteJudgment(value=value)


class TestDecodeJudgment:
    """Tests for decode_judgment."""

    def test_decodes_safety_body(self) -> None:
        judgment = decode_judgment(JudgmentKind.SAFETY, {"url": "x", "isSafe": True})
        assert judgment == SafetyJudgment(is_safe=True)

    def test_decodes_vote_body(self) -> None:
        judgment = decode_judgment(JudgmentKind.VOTE, {"commentId": "c", "vote": -1})
        assert judgment == VoteJudgment(value=DOWNVOTE)

    def test_missing_field_is_malformed(self) -> None:
        with pytest.raises(MalformedRecordError) as exc_info:
            decode_judgment(JudgmentKind.SAFETY, {"url": "x"}, uid="u-1")
        assert exc_info.value.uid == "u-1"
        assert "isSafe" in exc_info.value.reason

    def test_wrong_type_is_malformed(self) -> None:
        with pytest.raises(MalformedRecordError):
            decode_judgment(JudgmentKind.VOTE, {"vote": "up"})

    def test_non_mapping_is_malformed(self) -> None:
        with pytest.raises(MalformedRecordError):
            decode_judgment(JudgmentKind.SAFETY, ["isSafe", True])  # type: ignore[arg-type]


class TestAttestationRecord:
    """Tests for AttestationRecord."""

    def test_from_judgment_round_trips_payload(self) -> None:
        record = make_record("u-1", "0xAlice", SafetyJudgment(is_safe=False))
        assert record.kind is JudgmentKind.SAFETY
        assert record.judgment() == SafetyJudgment(is_safe=False)

    def test_signer_key_is_case_folded(self) -> None:
        record = make_record("u-1", "0xAlIcE", VoteJudgment(value=UPVOTE))
        assert record.signer_key == "0xalice"

    def test_naive_timestamp_read_as_utc(self) -> None:
        record = AttestationRecord(
            uid="u-1",
            signer="0xAlice",
            subject="example.com",
            timestamp=datetime(2026, 1, 15, 10, 0, 0),
            kind=JudgmentKind.SAFETY,
            data={"isSafe": True},
        )
        assert record.issued_at == T0
        assert record.issued_at.tzinfo is timezone.utc

    def test_blank_signer_is_malformed(self) -> None:
        record = make_raw_record("u-1", "  ", {"isSafe": True})
        with pytest.raises(MalformedRecordError, match="blank signer"):
            record.judgment()

    def test_missing_timestamp_is_malformed(self) -> None:
        record = make_raw_record("u-1", "0xAlice", {"isSafe": True}, at=None)
        with pytest.raises(MalformedRecordError, match="timestamp"):
            record.judgment()

    def test_records_are_immutable(self) -> None:
        record = make_record("u-1", "0xAlice", SafetyJudgment(is_safe=True))
        with pytest.raises(AttributeError):
            record.uid = "u-2"  # type: ignore[misc]
