"""Domain services for judgment-tally.

Pure, synchronous functions with no I/O.
"""

from judgment_tally.domain.services.latest_per_signer import (
    resolve_latest_per_signer,
    supersedes,
)
from judgment_tally.domain.services.tally_aggregator import aggregate_tally

__all__ = ["aggregate_tally", "resolve_latest_per_signer", "supersedes"]
