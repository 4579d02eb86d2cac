"""Task creation factory for the task tracker.

This module centralizes task creation logic so the store and the import
parsers build tasks with the same defaults.
"""

import uuid
from datetime import datetime
from typing import Any, Dict, Iterable, Optional

from tasktracker.models.task import Task, TaskPriority
from tasktracker.models.constants import DEFAULT_PRIORITY


def new_task_id() -> str:
    """Generate an opaque unique task identifier."""
    return str(uuid.uuid4())


def create_task_defaults() -> Dict[str, Any]:
    """Get default task values as a dictionary.

    Returns:
        Dictionary with default task field values using constants
    """
    return {
        "completed": False,
        "due_date": None,
        "priority": DEFAULT_PRIORITY,
        "category": None,
        "tags": (),
        "order": 0,
    }


def create_task_base(
    title: str,
    due_date: Optional[datetime] = None,
    priority: Optional[TaskPriority] = None,
    category: Optional[str] = None,
    tags: Optional[Iterable[str]] = None,
    completed: Optional[bool] = None,
    order: Optional[int] = None,
    created_at: Optional[datetime] = None,
    task_id: Optional[str] = None,
) -> Task:
    """Create a task with defaults, allowing overrides.

    Args:
        title: Task title (required, trimmed by the model)
        due_date: Optional deadline
        priority: Task priority (defaults to medium)
        category: Free-form category label
        tags: Ordered tag list
        completed: Completion flag (defaults to False)
        order: Manual sort position (defaults to 0; the store assigns the real value)
        created_at: Creation timestamp (defaults to now)
        task_id: Identifier to keep (defaults to a fresh UUID)

    Returns:
        Task object with defaults applied

    Raises:
        pydantic.ValidationError: If the title is blank after trimming
    """
    defaults = create_task_defaults()
    category = category.strip() if category else None

    return Task(
        id=task_id or new_task_id(),
        title=title,
        completed=completed if completed is not None else defaults["completed"],
        created_at=created_at or datetime.now(),
        due_date=due_date if due_date is not None else defaults["due_date"],
        priority=priority if priority is not None else defaults["priority"],
        category=category or defaults["category"],
        tags=tuple(tags) if tags is not None else defaults["tags"],
        order=order if order is not None else defaults["order"],
    )
