"""Data models for the task tracker."""

from tasktracker.models.task import (
    Task,
    TaskPriority,
    TaskUpdate,
    TaskCounts,
    StatusFilter,
    ViewState,
)

__all__ = [
    "Task",
    "TaskPriority",
    "TaskUpdate",
    "TaskCounts",
    "StatusFilter",
    "ViewState",
]
