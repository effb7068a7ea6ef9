"""Domain layer for judgment-tally.

Pure models and services with no I/O: attestation records, the
latest-per-signer resolver and the tally aggregator.
"""
