"""In-memory stub for NotificationChannelProtocol.

Records every delivered notification so tests can assert on the exact
messages a submission produced.
"""

from __future__ import annotations

from judgment_tally.domain.models.notification import (
    NotificationKind,
    SubmissionNotification,
)


class NotificationChannelStub:
    """Collects notifications in delivery order."""

    def __init__(self) -> None:
        self.notifications: list[SubmissionNotification] = []

    def notify(self, notification: SubmissionNotification) -> None:
        self.notifications.append(notification)

    @property
    def successes(self) -> list[SubmissionNotification]:
        return [n for n in self.notifications if n.kind is NotificationKind.SUCCESS]

    @property
    def errors(self) -> list[SubmissionNotification]:
        return [n for n in self.notifications if n.kind is NotificationKind.ERROR]

    @property
    def messages(self) -> list[str]:
        return [n.message for n in self.notifications]

    def clear(self) -> None:
        self.notifications.clear()
