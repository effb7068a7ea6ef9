"""Notification channel port.

Receives the outcome of each judgment submission attempt. Delivery is
observational: implementations must not raise and must not affect
rating state.
"""

from __future__ import annotations

from typing import Protocol

from judgment_tally.domain.models.notification import SubmissionNotification


class NotificationChannelProtocol(Protocol):
    """Protocol for submission outcome notifications."""

    def notify(self, notification: SubmissionNotification) -> None:
        """Deliver one notification.

        Args:
            notification: Success or error outcome of a submission.
        """
        ...
