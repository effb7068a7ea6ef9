"""HTTP API for judgment-tally."""
