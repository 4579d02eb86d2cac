"""Due-task notifications."""

from tasktracker.notifications.notifier import (
    DueTaskNotifier,
    LoggingNotifier,
    Notification,
    NotificationPermission,
    Notifier,
    build_due_notifications,
)

__all__ = [
    "DueTaskNotifier",
    "LoggingNotifier",
    "Notification",
    "NotificationPermission",
    "Notifier",
    "build_due_notifications",
]
