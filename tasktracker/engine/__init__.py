"""Derived view engine for the task tracker."""

from tasktracker.engine.filtering import filter_tasks, apply_view, day_bounds, is_overdue, is_due_today, is_upcoming
from tasktracker.engine.ranking import sort_tasks
from tasktracker.engine.stats import count_tasks, list_categories, list_tags
from tasktracker.engine.reorder import reorder_orders

__all__ = [
    "filter_tasks",
    "apply_view",
    "day_bounds",
    "is_overdue",
    "is_due_today",
    "is_upcoming",
    "sort_tasks",
    "count_tasks",
    "list_categories",
    "list_tags",
    "reorder_orders",
]
