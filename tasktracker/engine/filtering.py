"""Filter, search and category pipeline for the task view.

The pipeline is applied in a fixed order: search, then category, then status.
All date windows are computed on local wall-clock time relative to ``now``.
"""

from datetime import datetime, timedelta
from typing import Iterable, List, Optional, Tuple

from tasktracker.models.task import Task, StatusFilter, ViewState


def day_bounds(now: Optional[datetime] = None) -> Tuple[datetime, datetime]:
    """Return (start of today, start of tomorrow) for ``now``."""
    if now is None:
        now = datetime.now()
    start_of_today = now.replace(hour=0, minute=0, second=0, microsecond=0)
    return start_of_today, start_of_today + timedelta(days=1)


def is_overdue(task: Task, now: Optional[datetime] = None) -> bool:
    """Due strictly before the start of today and not completed."""
    if task.completed or task.due_date is None:
        return False
    start_of_today, _ = day_bounds(now)
    return task.due_date < start_of_today


def is_due_today(task: Task, now: Optional[datetime] = None) -> bool:
    """Due within [start of today, start of tomorrow) and not completed."""
    if task.completed or task.due_date is None:
        return False
    start_of_today, start_of_tomorrow = day_bounds(now)
    return start_of_today <= task.due_date < start_of_tomorrow


def is_upcoming(task: Task, now: Optional[datetime] = None) -> bool:
    """Due at or after the start of tomorrow and not completed."""
    if task.completed or task.due_date is None:
        return False
    _, start_of_tomorrow = day_bounds(now)
    return task.due_date >= start_of_tomorrow


def matches_search(task: Task, query: str) -> bool:
    """Case-insensitive substring match against title, any tag, or category."""
    needle = query.strip().lower()
    if not needle:
        return True
    if needle in task.title.lower():
        return True
    if any(needle in tag.lower() for tag in task.tags):
        return True
    return bool(task.category) and needle in task.category.lower()


def matches_status(task: Task, status_filter: StatusFilter, now: Optional[datetime] = None) -> bool:
    """Check a task against one of the status filters."""
    if status_filter == StatusFilter.ACTIVE:
        return not task.completed
    if status_filter == StatusFilter.COMPLETED:
        return task.completed
    if status_filter == StatusFilter.OVERDUE:
        return is_overdue(task, now)
    if status_filter == StatusFilter.TODAY:
        return is_due_today(task, now)
    if status_filter == StatusFilter.UPCOMING:
        return is_upcoming(task, now)
    return True


def filter_tasks(
    tasks: Iterable[Task],
    search_query: str = "",
    category: Optional[str] = None,
    status_filter: StatusFilter = StatusFilter.ALL,
    now: Optional[datetime] = None,
) -> List[Task]:
    """Apply search, category and status filters (in that order).

    Args:
        tasks: Tasks to filter
        search_query: Text matched against title, tags and category
        category: Exact category to keep (None keeps every category)
        status_filter: Status filter to apply last
        now: Reference time for date windows (defaults to now)

    Returns:
        Filtered list, input order preserved
    """
    result = [task for task in tasks if matches_search(task, search_query)]
    if category:
        result = [task for task in result if task.category == category]
    return [task for task in result if matches_status(task, status_filter, now)]


def apply_view(tasks: Iterable[Task], view: ViewState, now: Optional[datetime] = None) -> List[Task]:
    """Filter tasks with the settings held by a ViewState."""
    return filter_tasks(
        tasks,
        search_query=view.search_query,
        category=view.category,
        status_filter=view.status_filter,
        now=now,
    )
