"""Tally aggregator domain service.

Turns a resolved judgment set into positive/negative counts and the
viewer's own judgment. Every resolved signer contributes exactly one
count, so the tally total always equals the number of distinct signers.
"""

from __future__ import annotations

from judgment_tally.domain.models.attestation_record import Judgment
from judgment_tally.domain.models.subject import normalize_signer
from judgment_tally.domain.models.tally import ResolvedJudgmentSet, Tally


def aggregate_tally(
    resolved: ResolvedJudgmentSet,
    current_user: str | None = None,
) -> Tally:
    """Aggregate a resolved set into a tally.

    Safe ratings and upvotes count as positive; unsafe ratings and
    downvotes count as negative.

    Args:
        resolved: One latest record per signer.
        current_user: Viewer identity, or None for an anonymous viewer.

    Returns:
        Tally with counts and the viewer's own judgment. The own judgment
        is None when the viewer has no record in the set; absence is never
        reported as a negative judgment.
    """
    viewer_key = normalize_signer(current_user) if current_user else None

    positive = 0
    negative = 0
    own_judgment: Judgment | None = None

    for signer_key, record in resolved.items():
        judgment = record.judgment()
        if judgment.is_positive:
            positive += 1
        else:
            negative += 1

        if signer_key == viewer_key:
            own_judgment = judgment

    return Tally(
        positive_count=positive,
        negative_count=negative,
        current_user_judgment=own_judgment,
    )
