"""
judgment-tally - Revisable Signed Judgment Aggregation

Users cast signed, revisable judgments (a safety rating on a site, an
upvote or downvote on a comment). Only each signer's latest attestation
counts; this package reduces the raw attestation stream for a subject
to one record per signer and aggregates it into a tally plus the
viewer's own judgment.
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
