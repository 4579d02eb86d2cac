"""Aggregate statistics over the unfiltered task collection."""

from datetime import datetime
from typing import Iterable, List, Optional

from tasktracker.models.task import Task, TaskCounts
from tasktracker.engine.filtering import is_overdue, is_due_today, is_upcoming


def count_tasks(tasks: Iterable[Task], now: Optional[datetime] = None) -> TaskCounts:
    """Count tasks by status using the same date windows as the view filters."""
    tasks = list(tasks)
    completed = sum(1 for task in tasks if task.completed)
    return TaskCounts(
        total=len(tasks),
        active=len(tasks) - completed,
        completed=completed,
        overdue=sum(1 for task in tasks if is_overdue(task, now)),
        today=sum(1 for task in tasks if is_due_today(task, now)),
        upcoming=sum(1 for task in tasks if is_upcoming(task, now)),
    )


def list_categories(tasks: Iterable[Task]) -> List[str]:
    """Distinct categories present across all tasks, sorted."""
    return sorted({task.category for task in tasks if task.category})


def list_tags(tasks: Iterable[Task]) -> List[str]:
    """Distinct tags present across all tasks, sorted."""
    return sorted({tag for task in tasks for tag in task.tags if tag})
