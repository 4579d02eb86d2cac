"""Due-task notifications for the task tracker.

The trigger is read-only: it inspects a task snapshot and raises at most two
alerts (overdue, due today) through a pluggable backend. Missing backends,
denied permission and backend failures are never surfaced as errors.
"""

import logging
import os
from datetime import datetime
from enum import Enum
from typing import List, Optional, Protocol, Sequence

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from tasktracker.models.task import Task
from tasktracker.engine.filtering import is_overdue, is_due_today

load_dotenv()

logger = logging.getLogger(__name__)


class NotificationPermission(str, Enum):
    """Notification permission state."""
    GRANTED = "granted"
    DENIED = "denied"
    DEFAULT = "default"


class Notification(BaseModel):
    """An alert that was raised."""
    title: str = Field(..., description="Alert title")
    body: str = Field(..., description="Alert body")
    task_ids: List[str] = Field(default_factory=list, description="Tasks the alert is about")


class Notifier(Protocol):
    """Notification backend."""

    def request_permission(self) -> NotificationPermission:
        ...

    def notify(self, title: str, body: str) -> None:
        ...


class LoggingNotifier:
    """Backend that raises alerts through the logging module.

    Permission is read from TASKTRACKER_NOTIFICATIONS (granted/denied/default).
    """

    def __init__(self, permission: Optional[str] = None):
        raw = permission or os.getenv("TASKTRACKER_NOTIFICATIONS", NotificationPermission.GRANTED.value)
        try:
            self.permission = NotificationPermission(raw.strip().lower())
        except ValueError:
            logger.warning(f"Unknown notification permission {raw!r}, using 'default'")
            self.permission = NotificationPermission.DEFAULT

    def request_permission(self) -> NotificationPermission:
        return self.permission

    def notify(self, title: str, body: str) -> None:
        logger.info(f"[notification] {title}: {body}")


def _plural(count: int, word: str) -> str:
    return f"{count} {word}" if count == 1 else f"{count} {word}s"


def build_due_notifications(tasks: Sequence[Task], now: Optional[datetime] = None) -> List[Notification]:
    """Build the overdue / due-today alerts for a task snapshot.

    Args:
        tasks: Current task collection
        now: Reference time (defaults to now)

    Returns:
        Zero, one or two notifications (overdue first)
    """
    overdue = [task for task in tasks if is_overdue(task, now)]
    due_today = [task for task in tasks if is_due_today(task, now)]

    notifications: List[Notification] = []
    if overdue:
        notifications.append(Notification(
            title="Overdue tasks",
            body=f"You have {_plural(len(overdue), 'overdue task')}",
            task_ids=[task.id for task in overdue],
        ))
    if due_today:
        titles = ", ".join(task.title for task in due_today)
        notifications.append(Notification(
            title="Tasks due today",
            body=f"{_plural(len(due_today), 'task')} due today: {titles}",
            task_ids=[task.id for task in due_today],
        ))
    return notifications


class DueTaskNotifier:
    """Checks tasks against the clock and raises due/overdue alerts."""

    def __init__(self, backend: Optional[Notifier] = None):
        self.backend = backend
        self.permission: Optional[NotificationPermission] = None

    def request_permission(self) -> NotificationPermission:
        """Ask the backend for permission. Unsupported backends report denied."""
        if self.backend is None:
            self.permission = NotificationPermission.DENIED
            return self.permission
        try:
            self.permission = NotificationPermission(self.backend.request_permission())
        except Exception as e:
            logger.warning(f"Notification permission request failed: {type(e).__name__}: {str(e)}")
            self.permission = NotificationPermission.DENIED
        return self.permission

    def check_due_tasks(self, tasks: Sequence[Task], now: Optional[datetime] = None) -> List[Notification]:
        """Raise alerts for overdue tasks and tasks due today.

        Safe to call repeatedly; never mutates the tasks.

        Returns:
            Notifications actually delivered to the backend
        """
        if self.backend is None:
            return []
        if self.permission in (None, NotificationPermission.DEFAULT):
            self.request_permission()
        if self.permission != NotificationPermission.GRANTED:
            return []

        delivered: List[Notification] = []
        for notification in build_due_notifications(tasks, now):
            try:
                self.backend.notify(notification.title, notification.body)
                delivered.append(notification)
            except Exception as e:
                logger.warning(f"Failed to deliver notification {notification.title!r}: {type(e).__name__}: {str(e)}")
        return delivered
