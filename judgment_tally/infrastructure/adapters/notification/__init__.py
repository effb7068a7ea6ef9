"""Notification channel adapters."""

from judgment_tally.infrastructure.adapters.notification.logging_notification_channel import (
    LoggingNotificationChannel,
)

__all__ = ["LoggingNotificationChannel"]
