"""Notification channel that writes submission outcomes to the log.

Used where no viewer-facing channel exists (API process, workers).
The API additionally returns the notification in the response body.
"""

from __future__ import annotations

import structlog

from judgment_tally.domain.models.notification import (
    NotificationKind,
    SubmissionNotification,
)

logger = structlog.get_logger(__name__)


class LoggingNotificationChannel:
    """Logs each notification and keeps the most recent one."""

    def __init__(self) -> None:
        self.last_notification: SubmissionNotification | None = None

    def notify(self, notification: SubmissionNotification) -> None:
        self.last_notification = notification
        if notification.kind is NotificationKind.ERROR:
            logger.warning("submission_notification", **notification.to_dict())
        else:
            logger.info("submission_notification", **notification.to_dict())
