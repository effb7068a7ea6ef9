"""Rating state machine domain models.

This module defines the phases, published snapshots and refresh
triggers of the subject rating state machine.

Phase transitions:
    IDLE -> LOADING
    LOADING -> LOADING (a newer trigger supersedes the in-flight pass)
    LOADING -> READY | FAILED
    READY | FAILED -> LOADING (any refresh trigger)

The published state is a single immutable RatingState, replaced as a
whole on every transition and never patched field by field.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Union

from judgment_tally.domain.errors.attestation import InvalidRatingTransitionError
from judgment_tally.domain.models.attestation_record import JudgmentKind
from judgment_tally.domain.models.tally import Tally


class RatingPhase(Enum):
    """Phase of the subject rating state machine.

    Phases:
        IDLE: No subject has been loaded yet
        LOADING: A resolution pass is in flight
        READY: A tally is published for the active subject
        FAILED: Loading failed and no prior tally exists for the subject
    """

    IDLE = "IDLE"
    LOADING = "LOADING"
    READY = "READY"
    FAILED = "FAILED"

    def can_transition_to(self, target: RatingPhase) -> bool:
        return target in RATING_PHASE_TRANSITIONS[self]


RATING_PHASE_TRANSITIONS: dict[RatingPhase, frozenset[RatingPhase]] = {
    RatingPhase.IDLE: frozenset({RatingPhase.LOADING}),
    RatingPhase.LOADING: frozenset(
        {RatingPhase.LOADING, RatingPhase.READY, RatingPhase.FAILED}
    ),
    RatingPhase.READY: frozenset({RatingPhase.LOADING}),
    RatingPhase.FAILED: frozenset({RatingPhase.LOADING}),
}


def _utc_now() -> datetime:
    """Return current UTC time with timezone info."""
    return datetime.now(timezone.utc)


@dataclass(frozen=True, eq=True)
class RatingSnapshot:
    """Result of one completed resolution pass.

    Attributes:
        subject: Normalized subject the tally belongs to.
        judgment_kind: Kind of judgment tallied.
        tally: Aggregated counts and the viewer's own judgment.
        viewer: Identity the own-judgment was resolved for (None if anonymous).
        loaded_at: When the pass completed.
    """

    subject: str
    judgment_kind: JudgmentKind
    tally: Tally
    viewer: str | None = None
    loaded_at: datetime = field(default_factory=_utc_now, compare=False)


@dataclass(frozen=True, eq=True)
class RatingState:
    """Published state of a subject rating state machine.

    Attributes:
        phase: Current phase.
        subject: Active subject (None until a subject is loaded).
        snapshot: Last published snapshot for the active subject.
        last_error: Description of the most recent retrieval failure.
    """

    phase: RatingPhase = RatingPhase.IDLE
    subject: str | None = None
    snapshot: RatingSnapshot | None = None
    last_error: str | None = None

    @property
    def tally(self) -> Tally | None:
        return self.snapshot.tally if self.snapshot is not None else None

    @property
    def is_loading(self) -> bool:
        return self.phase is RatingPhase.LOADING

    def transition(
        self,
        phase: RatingPhase,
        *,
        subject: str | None = None,
        snapshot: RatingSnapshot | None = None,
        last_error: str | None = None,
    ) -> RatingState:
        """Create the state that follows a phase transition.

        Args:
            phase: Target phase.
            subject: Subject of the new state (defaults to the current one).
            snapshot: Snapshot of the new state.
            last_error: Error description of the new state.

        Returns:
            New RatingState.

        Raises:
            InvalidRatingTransitionError: If the transition is not allowed.
        """
        if not self.phase.can_transition_to(phase):
            raise InvalidRatingTransitionError(self.phase, phase)
        return replace(
            self,
            phase=phase,
            subject=subject if subject is not None else self.subject,
            snapshot=snapshot,
            last_error=last_error,
        )


# Refresh triggers


@dataclass(frozen=True)
class SubjectChanged:
    """The active subject changed (page navigation, widget mount)."""

    subject: str


@dataclass(frozen=True)
class IdentityChanged:
    """The viewer signed in, signed out or switched accounts."""

    identity: str | None = None


@dataclass(frozen=True)
class SubmissionCompleted:
    """A judgment was written for a subject and must be re-resolved."""

    subject: str


RatingTrigger = Union[SubjectChanged, IdentityChanged, SubmissionCompleted]
