"""Sort order for the task view.

Produces a strict total order so the view is deterministic.
"""

from datetime import datetime
from typing import Iterable, List

from tasktracker.models.task import Task, PRIORITY_RANK, coerce_priority


def sort_tasks(tasks: Iterable[Task]) -> List[Task]:
    """Sort tasks for display.

    Tasks are sorted:
    1. By manual order (ascending)
    2. By priority (high before medium before low)
    3. By due date (earliest first, tasks with a due date before those without)
    4. By creation time (newest first)
    5. By id, so duplicate keys still sort deterministically

    Args:
        tasks: Tasks to sort

    Returns:
        New sorted list
    """
    # Stable sorts, least significant key first
    ordered = sorted(tasks, key=lambda task: task.id)
    ordered.sort(key=lambda task: task.created_at, reverse=True)
    ordered.sort(key=lambda task: (task.order, _priority_sort_key(task), _due_date_sort_key(task)))
    return ordered


def _priority_sort_key(task: Task) -> int:
    """Negated priority rank (higher priority = smaller key)."""
    return -PRIORITY_RANK[coerce_priority(task.priority)]


def _due_date_sort_key(task: Task) -> tuple:
    """Get sort key for due date.

    Returns:
        Tuple for sorting: (has_due_date: 0 or 1, due date or datetime.max)
    """
    if task.due_date:
        return (0, task.due_date)
    return (1, datetime.max)
