"""Subject rating state machine service.

This module orchestrates load -> resolve -> aggregate -> publish for a
subject, including the re-rate / re-vote submission flow. One machine
is owned by one view (the open site, a comment widget, an API request)
and lives as long as that view.

Phases: IDLE -> LOADING -> READY | FAILED, and READY | FAILED -> LOADING
on any refresh trigger (see RatingPhase).

Concurrency:
- Every pass is stamped with a pass id. Only the most recently
  requested pass may publish; a superseded pass still returns its
  result to its own caller but never touches the published state.
- load_ratings calls for the same (subject, viewer) while a pass is in
  flight coalesce onto that pass instead of duplicating the fetch.
- A submission always runs a fresh pass after the write so the caller's
  new record, being the newest for that signer, is included.
- A snapshot kept through LOADING or a failed pass never carries another
  viewer's own judgment; only its counts survive an identity change.
- Any failure of a pass settles the phase to READY or FAILED.
"""

from __future__ import annotations

import asyncio
import functools
from dataclasses import replace
from typing import Optional

import structlog

from judgment_tally.application.ports.attestation_service import (
    AttestationServiceProtocol,
)
from judgment_tally.application.ports.identity_context import IdentityContextProtocol
from judgment_tally.application.ports.notification_channel import (
    NotificationChannelProtocol,
)
from judgment_tally.application.ports.tally_metrics import (
    TallyMetricsCollectorProtocol,
)
from judgment_tally.application.services.tally_pipeline import JudgmentTallyPipeline
from judgment_tally.config.tally_config import ResolutionStrategy
from judgment_tally.domain.errors.attestation import (
    AttestationServiceError,
    RetrievalFailureError,
    SubmissionFailureError,
    SubmissionPreconditionError,
)
from judgment_tally.domain.models.attestation_record import Judgment, JudgmentKind
from judgment_tally.domain.models.notification import SubmissionNotification
from judgment_tally.domain.models.rating_state import (
    IdentityChanged,
    RatingPhase,
    RatingSnapshot,
    RatingState,
    RatingTrigger,
    SubjectChanged,
    SubmissionCompleted,
)
from judgment_tally.domain.models.subject import normalize_signer, normalize_subject
from judgment_tally.domain.models.tally import Tally

logger = structlog.get_logger(__name__)

_PassKey = tuple[str, Optional[str]]


class SubjectRatingStateMachine:
    """Drives resolution passes and submissions for one judgment kind.

    Example:
        >>> machine = SubjectRatingStateMachine(
        ...     judgment_kind=JudgmentKind.SAFETY,
        ...     schema_id="schema-site-safety",
        ...     attestation_service=service,
        ...     identity_context=identity,
        ...     notification_channel=channel,
        ... )
        >>> snapshot = await machine.load_ratings("example.com")
        >>> snapshot.tally.safe_count
        3
        >>> await machine.submit_judgment("example.com", SafetyJudgment(is_safe=False))
    """

    def __init__(
        self,
        judgment_kind: JudgmentKind,
        schema_id: str | None,
        attestation_service: AttestationServiceProtocol,
        identity_context: IdentityContextProtocol,
        notification_channel: NotificationChannelProtocol | None = None,
        strategy: ResolutionStrategy = ResolutionStrategy.BULK,
        metrics_collector: TallyMetricsCollectorProtocol | None = None,
    ) -> None:
        """Initialize the state machine in the IDLE phase.

        Args:
            judgment_kind: Kind of judgment this machine tallies.
            schema_id: Schema identifier, or None if not configured. An
                unconfigured machine publishes neutral tallies and refuses
                submissions.
            attestation_service: Source and sink of attestation records.
            identity_context: Provider of the viewer identity.
            notification_channel: Optional receiver of submission outcomes.
            strategy: Retrieval strategy for resolution passes.
            metrics_collector: Optional metrics collector.
        """
        self._judgment_kind = judgment_kind
        self._attestation_service = attestation_service
        self._identity_context = identity_context
        self._notification_channel = notification_channel
        self._metrics_collector = metrics_collector
        self._pipeline = JudgmentTallyPipeline(
            judgment_kind=judgment_kind,
            schema_id=schema_id,
            attestation_service=attestation_service,
            strategy=strategy,
            metrics_collector=metrics_collector,
        )

        self._state = RatingState()
        self._inflight: dict[_PassKey, tuple[int, asyncio.Task[RatingSnapshot | None]]] = {}
        self._pass_seq = 0
        self._latest_pass_id = 0
        self._log = logger.bind(
            component="subject_rating_state_machine",
            judgment_kind=judgment_kind.value,
        )

    @property
    def state(self) -> RatingState:
        """Currently published state (replaced atomically, never mutated)."""
        return self._state

    @property
    def judgment_kind(self) -> JudgmentKind:
        return self._judgment_kind

    @property
    def is_configured(self) -> bool:
        return self._pipeline.is_configured

    def _current_identity(self) -> str | None:
        identity = self._identity_context.current_identity
        if identity is None or not identity.strip():
            return None
        return normalize_signer(identity)

    # ------------------------------------------------------------------
    # Triggers
    # ------------------------------------------------------------------

    async def handle(self, trigger: RatingTrigger) -> RatingSnapshot | None:
        """Schedule a resolution pass for an explicit refresh trigger.

        Args:
            trigger: SubjectChanged, IdentityChanged or SubmissionCompleted.

        Returns:
            Snapshot computed by the pass, or None if nothing was loaded.
        """
        if isinstance(trigger, SubjectChanged):
            return await self.load_ratings(trigger.subject)

        if isinstance(trigger, SubmissionCompleted):
            subject_key = normalize_subject(trigger.subject)
            if not subject_key:
                return None
            return await self._start_pass(subject_key, coalesce=False)

        if isinstance(trigger, IdentityChanged):
            if self._state.subject is None:
                self._log.debug("identity_changed_without_subject")
                return None
            return await self.load_ratings(self._state.subject)

        raise TypeError(f"Unsupported rating trigger: {trigger!r}")

    async def load_ratings(self, subject: str) -> RatingSnapshot | None:
        """Load, resolve and publish the tally for a subject.

        The subject becomes the active subject. Missing configuration
        publishes a neutral tally without contacting the attestation
        service. A retrieval failure keeps a prior tally for the same
        subject (phase READY) or enters FAILED when there is none.

        Args:
            subject: Subject key (normalized here).

        Returns:
            Snapshot computed by this pass; on failure the retained prior
            snapshot, or None. Blank subjects return None without a pass.
        """
        subject_key = normalize_subject(subject)
        if not subject_key:
            self._log.debug("load_skipped_blank_subject")
            return None
        return await self._start_pass(subject_key, coalesce=True)

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------

    async def submit_judgment(
        self,
        subject: str,
        judgment: Judgment,
    ) -> RatingSnapshot | None:
        """Submit the viewer's judgment, then re-resolve the subject.

        Args:
            subject: Subject key (normalized here).
            judgment: Payload of this machine's judgment kind.

        Returns:
            Snapshot of the refresh pass that follows the write.

        Raises:
            SubmissionPreconditionError: Missing schema, subject or identity,
                or a judgment of the wrong kind. No I/O is attempted.
            SubmissionFailureError: The attestation service failed the
                write. Published state is left untouched.
        """
        subject_key = normalize_subject(subject) if isinstance(subject, str) else ""
        viewer = self._current_identity()
        self._check_submission_preconditions(subject_key, viewer, judgment)

        schema_id = self._pipeline.schema_id
        assert schema_id is not None
        log = self._log.bind(subject=subject_key, signer=viewer)

        try:
            record = await self._attestation_service.submit_record(
                schema_id, subject_key, judgment
            )
        except AttestationServiceError as e:
            log.error("judgment_submission_failed", error=e.reason)
            self._record_submission("failure")
            self._notify(
                SubmissionNotification.submission_failed(
                    subject_key, self._judgment_kind, e.reason
                )
            )
            raise SubmissionFailureError(subject_key, e.reason) from e

        log.info("judgment_submitted", uid=record.uid)
        self._record_submission("success")

        snapshot = await self.handle(SubmissionCompleted(subject=subject_key))
        self._notify(SubmissionNotification.submission_succeeded(subject_key, judgment))
        return snapshot

    def _check_submission_preconditions(
        self,
        subject_key: str,
        viewer: str | None,
        judgment: Judgment,
    ) -> None:
        missing: list[str] = []
        if not self._pipeline.is_configured:
            missing.append("schema_id")
        if not subject_key:
            missing.append("subject")
        if viewer is None:
            missing.append("identity")

        if missing:
            self._log.warning("judgment_submission_rejected", missing=missing)
            self._record_submission("rejected")
            raise SubmissionPreconditionError(missing=tuple(missing))

        if judgment.kind is not self._judgment_kind:
            self._log.warning(
                "judgment_submission_rejected",
                submitted_kind=judgment.kind.value,
            )
            self._record_submission("rejected")
            raise SubmissionPreconditionError(
                detail=(
                    f"expected a {self._judgment_kind.value} judgment, "
                    f"got {judgment.kind.value}"
                )
            )

    # ------------------------------------------------------------------
    # Passes
    # ------------------------------------------------------------------

    async def _start_pass(
        self,
        subject_key: str,
        *,
        coalesce: bool,
    ) -> RatingSnapshot | None:
        viewer = self._current_identity()
        key: _PassKey = (subject_key, viewer)

        inflight = self._inflight.get(key) if coalesce else None
        if inflight is not None and not inflight[1].done():
            pass_id, task = inflight
            self._log.debug("pass_coalesced", subject=subject_key, pass_id=pass_id)
        else:
            self._pass_seq += 1
            pass_id = self._pass_seq
            task = asyncio.create_task(self._run_pass(pass_id, subject_key, viewer))
            self._inflight[key] = (pass_id, task)
            task.add_done_callback(functools.partial(self._forget_pass, key, pass_id))

        self._latest_pass_id = pass_id
        self._enter_loading(subject_key, viewer)

        # Shielded so a cancelled caller does not cancel a shared pass
        return await asyncio.shield(task)

    def _forget_pass(
        self,
        key: _PassKey,
        pass_id: int,
        _task: asyncio.Task[RatingSnapshot | None],
    ) -> None:
        current = self._inflight.get(key)
        if current is not None and current[0] == pass_id:
            del self._inflight[key]

    def _enter_loading(self, subject_key: str, viewer: str | None) -> None:
        prior = self._state
        retained = prior.snapshot if prior.subject == subject_key else None
        if retained is not None and retained.viewer != viewer:
            # Counts carry over to the new viewer, the own judgment does not
            retained = replace(
                retained,
                tally=replace(retained.tally, current_user_judgment=None),
                viewer=viewer,
            )
        self._state = prior.transition(
            RatingPhase.LOADING,
            subject=subject_key,
            snapshot=retained,
        )

    def _is_latest(self, pass_id: int) -> bool:
        return pass_id == self._latest_pass_id and self._state.is_loading

    async def _run_pass(
        self,
        pass_id: int,
        subject_key: str,
        viewer: str | None,
    ) -> RatingSnapshot | None:
        log = self._log.bind(subject=subject_key, pass_id=pass_id)

        if not self._pipeline.is_configured:
            log.info("schema_not_configured_publishing_neutral_tally")
            snapshot = RatingSnapshot(
                subject=subject_key,
                judgment_kind=self._judgment_kind,
                tally=Tally.empty(),
                viewer=viewer,
            )
            self._publish_ready(pass_id, snapshot, log, outcome="unconfigured")
            return snapshot

        try:
            tally = await self._pipeline.compute(subject_key, viewer)
        except RetrievalFailureError as e:
            log.error("ratings_load_failed", error=e.reason)
            return self._publish_failure(pass_id, subject_key, e, log)
        except Exception as e:
            log.exception("ratings_load_crashed", error_type=type(e).__name__)
            return self._publish_failure(
                pass_id, subject_key, RetrievalFailureError(subject_key, str(e)), log
            )

        snapshot = RatingSnapshot(
            subject=subject_key,
            judgment_kind=self._judgment_kind,
            tally=tally,
            viewer=viewer,
        )
        self._publish_ready(pass_id, snapshot, log)
        return snapshot

    def _publish_ready(
        self,
        pass_id: int,
        snapshot: RatingSnapshot,
        log: structlog.BoundLogger,
        outcome: str = "ready",
    ) -> None:
        if not self._is_latest(pass_id):
            log.info("stale_pass_discarded", latest_pass_id=self._latest_pass_id)
            self._record_pass("stale")
            return

        self._state = self._state.transition(
            RatingPhase.READY,
            subject=snapshot.subject,
            snapshot=snapshot,
        )
        self._record_pass(outcome)
        log.info("ratings_published", **snapshot.tally.to_dict())

    def _publish_failure(
        self,
        pass_id: int,
        subject_key: str,
        error: RetrievalFailureError,
        log: structlog.BoundLogger,
    ) -> RatingSnapshot | None:
        if not self._is_latest(pass_id):
            log.info("stale_pass_discarded", latest_pass_id=self._latest_pass_id)
            self._record_pass("stale")
            return None

        # LOADING only retains a snapshot belonging to this subject
        prior = self._state.snapshot
        if prior is not None:
            self._state = self._state.transition(
                RatingPhase.READY,
                snapshot=prior,
                last_error=str(error),
            )
            log.info("prior_ratings_retained")
        else:
            self._state = self._state.transition(
                RatingPhase.FAILED,
                snapshot=None,
                last_error=str(error),
            )
        self._record_pass("failed")
        return prior

    async def aclose(self) -> None:
        """Cancel in-flight passes when the owning view is torn down."""
        tasks = [task for _, task in self._inflight.values() if not task.done()]
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._inflight.clear()
        self._log.debug("state_machine_closed", cancelled_passes=len(tasks))

    # ------------------------------------------------------------------
    # Side channels
    # ------------------------------------------------------------------

    def _notify(self, notification: SubmissionNotification) -> None:
        if self._notification_channel is None:
            return
        try:
            self._notification_channel.notify(notification)
        except Exception:
            # Delivery is observational and must not change the outcome
            self._log.exception(
                "notification_delivery_failed",
                notification_kind=notification.kind.value,
            )

    def _record_pass(self, outcome: str) -> None:
        if self._metrics_collector is not None:
            self._metrics_collector.record_pass(self._judgment_kind, outcome)

    def _record_submission(self, outcome: str) -> None:
        if self._metrics_collector is not None:
            self._metrics_collector.record_submission(self._judgment_kind, outcome)
