"""Task data model for the task tracker."""

from datetime import datetime
from enum import Enum
from typing import Optional, Tuple

from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel


class TaskPriority(str, Enum):
    """Task priority enumeration."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


# Higher rank sorts first
PRIORITY_RANK = {
    TaskPriority.LOW.value: 0,
    TaskPriority.MEDIUM.value: 1,
    TaskPriority.HIGH.value: 2,
}


class StatusFilter(str, Enum):
    """Status filter applied to the task view."""
    ALL = "all"
    ACTIVE = "active"
    COMPLETED = "completed"
    OVERDUE = "overdue"
    TODAY = "today"
    UPCOMING = "upcoming"


def to_local_naive(value: Optional[datetime]) -> Optional[datetime]:
    """Normalize a timezone-aware timestamp to naive local wall-clock time.

    Stored blobs written by the browser build carry a trailing ``Z``; every
    date-window comparison in the engine is made on naive local time.
    """
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)


def coerce_priority(value) -> str:
    """Map any priority-ish value onto a valid priority, defaulting to medium."""
    if isinstance(value, TaskPriority):
        return value.value
    if isinstance(value, str):
        try:
            return TaskPriority(value.strip().lower()).value
        except ValueError:
            pass
    return TaskPriority.MEDIUM.value


class Task(BaseModel):
    """Canonical Task model.

    Tasks are frozen and tags are held as a tuple: the store replaces a task
    with a validated copy on every mutation, so snapshots handed out to
    readers never change underneath them. Tags still serialize as a JSON list.
    """

    id: str = Field(..., description="Unique task identifier (UUID v4)")
    title: str = Field(..., description="Task title (non-empty after trimming)")
    completed: bool = Field(False, description="Whether the task is done")
    created_at: datetime = Field(..., description="Task creation timestamp")
    due_date: Optional[datetime] = Field(None, description="Deadline (null means no deadline)")
    priority: TaskPriority = Field(TaskPriority.MEDIUM, description="Task priority")
    category: Optional[str] = Field(None, description="Free-form category label")
    tags: Tuple[str, ...] = Field(default_factory=tuple, description="Ordered tags, duplicates allowed")
    order: int = Field(0, description="Manual sort position (not necessarily contiguous)")

    class Config:
        """Pydantic configuration."""
        use_enum_values = True
        frozen = True
        validate_default = True
        populate_by_name = True
        alias_generator = to_camel

    @field_validator("title")
    @classmethod
    def _validate_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("title must not be empty")
        return v

    @field_validator("priority", mode="before")
    @classmethod
    def _validate_priority(cls, v):
        return coerce_priority(v)

    @field_validator("created_at", "due_date")
    @classmethod
    def _normalize_timestamps(cls, v):
        return to_local_naive(v)

    @field_validator("tags", mode="before")
    @classmethod
    def _validate_tags(cls, v):
        if v is None:
            return ()
        return v


class TaskUpdate(BaseModel):
    """Partial update for a task. Only explicitly set fields are merged."""

    title: Optional[str] = None
    due_date: Optional[datetime] = None
    priority: Optional[TaskPriority] = None
    category: Optional[str] = None
    tags: Optional[Tuple[str, ...]] = None

    class Config:
        """Pydantic configuration."""
        use_enum_values = True
        populate_by_name = True
        alias_generator = to_camel
        extra = "ignore"

    @field_validator("priority", mode="before")
    @classmethod
    def _validate_priority(cls, v):
        if v is None:
            return None
        return coerce_priority(v)


class TaskCounts(BaseModel):
    """Aggregate counts over the unfiltered collection."""
    total: int = 0
    active: int = 0
    completed: int = 0
    overdue: int = 0
    today: int = 0
    upcoming: int = 0


class ViewState(BaseModel):
    """Filter, search and category selection that shape the task view."""

    status_filter: StatusFilter = Field(StatusFilter.ALL, description="Status filter")
    search_query: str = Field("", description="Case-insensitive search text")
    category: Optional[str] = Field(None, description="Selected category (null for all)")

    class Config:
        """Pydantic configuration."""
        use_enum_values = True
        validate_default = True
        populate_by_name = True
        alias_generator = to_camel
