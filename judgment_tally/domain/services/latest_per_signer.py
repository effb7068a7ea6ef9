"""Latest-per-signer resolver domain service.

Collapses the raw attestation stream for one subject into exactly one
authoritative record per signer: the one with the greatest timestamp.

Ordering rule:
- A record replaces the held record for its signer when its timestamp
  is strictly newer.
- On identical timestamps the record with the greater uid wins. uids
  are unique per attestation, so the outcome does not depend on the
  order records arrive in.
- A record identical in timestamp and uid to the held one is a
  duplicate delivery and is ignored.

Malformed records are logged and skipped; they never abort the batch.
"""

from __future__ import annotations

from collections.abc import Iterable

import structlog

from judgment_tally.domain.errors.attestation import MalformedRecordError
from judgment_tally.domain.models.attestation_record import AttestationRecord
from judgment_tally.domain.models.tally import ResolvedJudgmentSet

logger = structlog.get_logger(__name__)


def supersedes(candidate: AttestationRecord, held: AttestationRecord) -> bool:
    """Check whether a candidate record replaces the held record.

    Args:
        candidate: Newly encountered record.
        held: Record currently held for the same signer.

    Returns:
        True if the candidate is authoritative over the held record.
    """
    if candidate.issued_at != held.issued_at:
        return candidate.issued_at > held.issued_at
    return candidate.uid > held.uid


def resolve_latest_per_signer(
    records: Iterable[AttestationRecord],
) -> ResolvedJudgmentSet:
    """Reduce a record stream to one latest record per signer.

    Pure function of its input; the input may be empty, unordered and
    contain several records per signer (in any letter case).

    Args:
        records: Attestation records for a single subject.

    Returns:
        ResolvedJudgmentSet keyed by case-folded signer.

    Examples:
        >>> len(resolve_latest_per_signer([]))
        0
    """
    latest: dict[str, AttestationRecord] = {}
    skipped = 0

    for record in records:
        try:
            record.judgment()
        except MalformedRecordError as e:
            skipped += 1
            logger.warning(
                "malformed_record_skipped",
                uid=e.uid,
                reason=e.reason,
            )
            continue

        signer_key = record.signer_key
        held = latest.get(signer_key)
        if held is None or supersedes(record, held):
            latest[signer_key] = record

    if skipped:
        logger.info(
            "resolution_completed_with_skips",
            signer_count=len(latest),
            skipped_count=skipped,
        )

    return ResolvedJudgmentSet(records=latest, skipped_count=skipped)
