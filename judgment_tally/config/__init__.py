"""Configuration module for judgment-tally.

Available Configurations:
- TallyConfig: Schema identifiers, attestation service and resolution strategy
"""

from judgment_tally.config.tally_config import (
    TEST_TALLY_CONFIG,
    UNCONFIGURED_TALLY_CONFIG,
    ResolutionStrategy,
    TallyConfig,
)

__all__ = [
    "ResolutionStrategy",
    "TallyConfig",
    "TEST_TALLY_CONFIG",
    "UNCONFIGURED_TALLY_CONFIG",
]
