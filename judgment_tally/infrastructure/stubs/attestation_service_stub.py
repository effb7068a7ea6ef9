"""In-memory stub for AttestationServiceProtocol.

This stub simulates the attestation service for development and tests:
- Records stored per (schema_id, subject_key), append-only
- Issued uids are UUIDv7 strings, timestamps strictly increase
- Submissions are signed by the identity context's current identity
- Outages can be simulated globally, per subject or for writes only
- list_records can be held on a gate to order concurrent passes

Instances created with for_identity() share storage, gates and call
history, so one store can serve requests from different viewers.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any

from uuid6 import uuid7

from judgment_tally.application.ports.identity_context import IdentityContextProtocol
from judgment_tally.domain.errors.attestation import AttestationServiceError
from judgment_tally.domain.models.attestation_record import (
    AttestationRecord,
    Judgment,
)
from judgment_tally.domain.models.subject import normalize_signer

_TICK = timedelta(microseconds=1)


@dataclass
class _StubStore:
    records: dict[tuple[str, str], list[AttestationRecord]] = field(default_factory=dict)
    gates: dict[str, asyncio.Event] = field(default_factory=dict)
    failing_subjects: dict[str, str] = field(default_factory=dict)
    calls: list[tuple[Any, ...]] = field(default_factory=list)
    available: bool = True
    unavailable_reason: str = "attestation service unavailable"
    submission_failure: str | None = None
    last_timestamp: datetime | None = None


class AttestationServiceStub:
    """In-memory implementation of AttestationServiceProtocol.

    Thread-safety note: This stub is NOT thread-safe. It is meant for a
    single event loop.
    """

    def __init__(
        self,
        identity_context: IdentityContextProtocol | None = None,
        _store: _StubStore | None = None,
    ) -> None:
        """Initialize an empty stub.

        Args:
            identity_context: Provider of the signer for submit_record.
                Without one every submission fails as unauthenticated.
        """
        self._identity_context = identity_context
        self._store = _store or _StubStore()

    def for_identity(
        self, identity_context: IdentityContextProtocol
    ) -> AttestationServiceStub:
        """Return a view of this stub that signs as another identity."""
        return AttestationServiceStub(identity_context, _store=self._store)

    # ------------------------------------------------------------------
    # Seeding and inspection
    # ------------------------------------------------------------------

    def add_record(self, schema_id: str, record: AttestationRecord) -> AttestationRecord:
        """Store a record as-is (malformed records included)."""
        self._store.records.setdefault((schema_id, record.subject), []).append(record)
        if isinstance(record.timestamp, datetime):
            self._advance_clock(record.issued_at)
        return record

    def add_judgment(
        self,
        schema_id: str,
        subject_key: str,
        signer: str,
        judgment: Judgment,
        timestamp: datetime | None = None,
        uid: str | None = None,
    ) -> AttestationRecord:
        """Store a well-formed record for a judgment.

        Args:
            schema_id: Schema the record belongs to.
            subject_key: Normalized subject key.
            signer: Signer identity, stored with its spelling preserved.
            judgment: Payload of the record.
            timestamp: Issuance time. Defaults to the stub clock.
            uid: Record identifier. Defaults to a fresh UUIDv7.

        Returns:
            The stored record.
        """
        record = AttestationRecord.from_judgment(
            uid=uid or str(uuid7()),
            signer=signer,
            subject=subject_key,
            timestamp=timestamp or self._next_timestamp(),
            judgment=judgment,
        )
        return self.add_record(schema_id, record)

    def records_for(self, schema_id: str, subject_key: str) -> list[AttestationRecord]:
        return list(self._store.records.get((schema_id, subject_key), []))

    @property
    def calls(self) -> list[tuple[Any, ...]]:
        """Call history as (operation, *arguments) tuples."""
        return self._store.calls

    def calls_to(self, operation: str) -> list[tuple[Any, ...]]:
        return [call for call in self._store.calls if call[0] == operation]

    # ------------------------------------------------------------------
    # Failure simulation
    # ------------------------------------------------------------------

    def set_available(
        self, available: bool, reason: str = "attestation service unavailable"
    ) -> None:
        """Make every operation fail (False) or succeed (True)."""
        self._store.available = available
        self._store.unavailable_reason = reason

    def fail_subject(self, subject_key: str, reason: str = "subject lookup failed") -> None:
        """Make reads for one subject fail until clear_failures()."""
        self._store.failing_subjects[subject_key] = reason

    def fail_submissions(self, reason: str = "transaction rejected") -> None:
        """Make submit_record fail until clear_failures()."""
        self._store.submission_failure = reason

    def clear_failures(self) -> None:
        self._store.available = True
        self._store.failing_subjects.clear()
        self._store.submission_failure = None

    def hold(self, subject_key: str) -> asyncio.Event:
        """Hold list_records for a subject until the returned event is set."""
        gate = asyncio.Event()
        self._store.gates[subject_key] = gate
        return gate

    def release(self, subject_key: str) -> None:
        gate = self._store.gates.pop(subject_key, None)
        if gate is not None:
            gate.set()

    def reset(self) -> None:
        """Drop all records, gates, failures and call history."""
        store = self._store
        for gate in store.gates.values():
            gate.set()
        store.records.clear()
        store.gates.clear()
        store.failing_subjects.clear()
        store.calls.clear()
        store.available = True
        store.submission_failure = None
        store.last_timestamp = None

    # ------------------------------------------------------------------
    # AttestationServiceProtocol
    # ------------------------------------------------------------------

    async def list_records(
        self,
        schema_id: str,
        subject_key: str,
    ) -> list[AttestationRecord]:
        self._store.calls.append(("list_records", schema_id, subject_key))

        gate = self._store.gates.get(subject_key)
        if gate is not None:
            await gate.wait()

        self._check_readable(subject_key)
        return self.records_for(schema_id, subject_key)

    async def latest_record_for_signer(
        self,
        schema_id: str,
        subject_key: str,
        signer: str,
    ) -> AttestationRecord | None:
        self._store.calls.append(
            ("latest_record_for_signer", schema_id, subject_key, signer)
        )
        self._check_readable(subject_key)

        signer_key = normalize_signer(signer)
        latest: AttestationRecord | None = None
        for record in self._store.records.get((schema_id, subject_key), []):
            if not isinstance(record.signer, str) or record.signer_key != signer_key:
                continue
            if not isinstance(record.timestamp, datetime):
                continue
            if latest is None or (record.issued_at, record.uid) > (
                latest.issued_at,
                latest.uid,
            ):
                latest = record
        return latest

    async def submit_record(
        self,
        schema_id: str,
        subject_key: str,
        judgment: Judgment,
    ) -> AttestationRecord:
        self._store.calls.append(("submit_record", schema_id, subject_key, judgment))

        if not self._store.available:
            raise AttestationServiceError("submit_record", self._store.unavailable_reason)
        if self._store.submission_failure is not None:
            raise AttestationServiceError("submit_record", self._store.submission_failure)

        signer = (
            self._identity_context.current_identity
            if self._identity_context is not None
            else None
        )
        if signer is None or not signer.strip():
            raise AttestationServiceError("submit_record", "no signer identity available")

        return self.add_judgment(schema_id, subject_key, signer, judgment)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _check_readable(self, subject_key: str) -> None:
        if not self._store.available:
            raise AttestationServiceError("list_records", self._store.unavailable_reason)
        reason = self._store.failing_subjects.get(subject_key)
        if reason is not None:
            raise AttestationServiceError("list_records", reason)

    def _next_timestamp(self) -> datetime:
        now = datetime.now(timezone.utc)
        last = self._store.last_timestamp
        if last is not None and now <= last:
            now = last + _TICK
        self._store.last_timestamp = now
        return now

    def _advance_clock(self, issued_at: datetime) -> None:
        last = self._store.last_timestamp
        if last is None or issued_at > last:
            self._store.last_timestamp = issued_at
