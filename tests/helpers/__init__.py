"""Test helpers for judgment-tally tests.

Helpers:
    make_record: Build an AttestationRecord at an offset from T0
    make_raw_record: Build a record with an arbitrary (malformed) body
    metric_value: Read a counter from an isolated metrics collector
    T0: Fixed base timestamp for deterministic ordering

Usage:
    from tests.helpers import T0, make_record
"""

from tests.helpers.metrics import metric_value
from tests.helpers.records import T0, make_raw_record, make_record

__all__ = ["T0", "make_raw_record", "make_record", "metric_value"]
