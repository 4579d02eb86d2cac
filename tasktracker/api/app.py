"""FastAPI web application for the task tracker.

A thin HTTP surface over a single TaskStore instance. Every endpoint maps onto
one store operation; the store itself owns all state.
"""

import logging
from datetime import datetime
from typing import List, Optional

from fastapi import Depends, FastAPI, HTTPException, Query
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, Field, field_validator

from tasktracker.models.task import Task, TaskCounts, TaskPriority, TaskUpdate, StatusFilter, ViewState, coerce_priority
from tasktracker.models.constants import MAX_TITLE_LENGTH
from tasktracker.database.persistence import TaskStorage, PreferencesStore
from tasktracker.formats import TaskFormat, ImportFormatError
from tasktracker.notifications import DueTaskNotifier, LoggingNotifier, Notification, NotificationPermission
from tasktracker.store import TaskStore

logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="Task Tracker API",
    description="Personal task tracking with filters, manual ordering and import/export",
    version="0.1.0"
)

# Process-wide instances, built on first use
_task_store: Optional[TaskStore] = None
_preferences: Optional[PreferencesStore] = None
_notifier: Optional[DueTaskNotifier] = None
_kv_repository = None


def _get_kv_repository():
    global _kv_repository
    if _kv_repository is None:
        from tasktracker.database.database import ScopedSession, init_db
        from tasktracker.database.repository import KeyValueRepository

        init_db()
        _kv_repository = KeyValueRepository(ScopedSession)
    return _kv_repository


def get_task_store() -> TaskStore:
    """Get the task store (dependency)."""
    global _task_store
    if _task_store is None:
        _task_store = TaskStore(TaskStorage(_get_kv_repository()))
        if _task_store.load_warning:
            logger.warning(f"Task store started empty: {_task_store.load_warning}")
    return _task_store


def get_preferences() -> PreferencesStore:
    """Get the preferences store (dependency)."""
    global _preferences
    if _preferences is None:
        _preferences = PreferencesStore(_get_kv_repository())
    return _preferences


def get_notifier() -> DueTaskNotifier:
    """Get the due-task notifier (dependency)."""
    global _notifier
    if _notifier is None:
        _notifier = DueTaskNotifier(LoggingNotifier())
    return _notifier


# Request models
class TaskCreateRequest(BaseModel):
    """Request body for creating a task."""
    title: str = Field(..., min_length=1, max_length=MAX_TITLE_LENGTH)
    due_date: Optional[datetime] = Field(None, alias="dueDate")
    priority: TaskPriority = TaskPriority.MEDIUM
    category: Optional[str] = None
    tags: List[str] = Field(default_factory=list)

    class Config:
        populate_by_name = True

    @field_validator("priority", mode="before")
    @classmethod
    def _validate_priority(cls, v):
        return coerce_priority(v)


class TaskUpdateRequest(TaskUpdate):
    """Request body for updating a task."""
    title: Optional[str] = Field(None, max_length=MAX_TITLE_LENGTH)


class ReorderRequest(BaseModel):
    """Request body for moving a task within the current view."""
    from_index: int = Field(..., alias="fromIndex")
    to_index: int = Field(..., alias="toIndex")

    class Config:
        populate_by_name = True


class ViewUpdateRequest(BaseModel):
    """Request body for changing view settings. Omitted fields are unchanged."""
    status_filter: Optional[StatusFilter] = Field(None, alias="statusFilter")
    search_query: Optional[str] = Field(None, alias="searchQuery")
    category: Optional[str] = None

    class Config:
        populate_by_name = True


class ImportRequest(BaseModel):
    """Request body for importing tasks."""
    format: TaskFormat = TaskFormat.JSON
    content: str


# Response models
class TaskResponse(BaseModel):
    """Response for a single task mutation."""
    task: Optional[Task]
    changed: bool


class TaskListResponse(BaseModel):
    """Response for the current task view."""
    tasks: List[Task]
    view: ViewState
    counts: TaskCounts
    empty_state: Optional[List[str]] = None


class ImportResponse(BaseModel):
    """Response for task import."""
    imported_count: int
    tasks: List[Task]


class ThemeResponse(BaseModel):
    dark_mode: bool


class ThemeUpdateRequest(BaseModel):
    dark_mode: bool


class PermissionResponse(BaseModel):
    permission: NotificationPermission


class NotificationCheckResponse(BaseModel):
    notifications: List[Notification]


def _view_response(store: TaskStore) -> TaskListResponse:
    tasks = store.filtered_tasks
    return TaskListResponse(
        tasks=tasks,
        view=store.view,
        counts=store.task_counts,
        empty_state=None if tasks else list(store.empty_state_message()),
    )


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy", "version": "0.1.0"}


@app.get("/tasks", response_model=TaskListResponse)
def list_tasks(store: TaskStore = Depends(get_task_store)):
    """Current filtered and sorted view."""
    return _view_response(store)


@app.get("/tasks/all", response_model=List[Task])
def list_all_tasks(store: TaskStore = Depends(get_task_store)):
    """Every task in storage order, ignoring view settings."""
    return store.tasks


@app.get("/tasks/counts", response_model=TaskCounts)
def task_counts(store: TaskStore = Depends(get_task_store)):
    """Aggregate counts over the unfiltered collection."""
    return store.task_counts


@app.get("/categories", response_model=List[str])
def categories(store: TaskStore = Depends(get_task_store)):
    return store.categories


@app.get("/tags", response_model=List[str])
def tags(store: TaskStore = Depends(get_task_store)):
    return store.tags


@app.post("/tasks", response_model=TaskResponse, status_code=201)
def create_task(request: TaskCreateRequest, store: TaskStore = Depends(get_task_store)):
    """Create a task."""
    if not request.title.strip():
        raise HTTPException(status_code=422, detail="Title must not be blank")
    task = store.add_task(
        title=request.title,
        due_date=request.due_date,
        priority=request.priority,
        category=request.category,
        tags=request.tags,
    )
    return TaskResponse(task=task, changed=task is not None)


@app.patch("/tasks/{task_id}", response_model=TaskResponse)
def update_task(task_id: str, request: TaskUpdateRequest, store: TaskStore = Depends(get_task_store)):
    """Update title, due date, priority, category or tags. Unknown ids are a no-op."""
    updated = store.update_task(task_id, TaskUpdate(**request.model_dump(exclude_unset=True)))
    return TaskResponse(task=updated, changed=updated is not None)


@app.post("/tasks/{task_id}/toggle", response_model=TaskResponse)
def toggle_task(task_id: str, store: TaskStore = Depends(get_task_store)):
    """Flip the completed flag. Unknown ids are a no-op."""
    toggled = store.toggle_task(task_id)
    return TaskResponse(task=toggled, changed=toggled is not None)


@app.delete("/tasks/{task_id}", response_model=TaskResponse)
def delete_task(task_id: str, store: TaskStore = Depends(get_task_store)):
    """Delete a task. Unknown ids are a no-op."""
    task = store.get_task(task_id)
    deleted = store.delete_task(task_id)
    return TaskResponse(task=task, changed=deleted)


@app.post("/tasks/reorder", response_model=TaskListResponse)
def reorder_tasks(request: ReorderRequest, store: TaskStore = Depends(get_task_store)):
    """Move a task between two positions of the current view."""
    store.reorder_tasks(request.from_index, request.to_index)
    return _view_response(store)


@app.get("/view", response_model=ViewState)
def get_view(store: TaskStore = Depends(get_task_store)):
    return store.view


@app.put("/view", response_model=TaskListResponse)
def update_view(request: ViewUpdateRequest, store: TaskStore = Depends(get_task_store)):
    """Change filter, search text and/or category."""
    fields = request.model_dump(exclude_unset=True)
    if "status_filter" in fields and fields["status_filter"] is not None:
        store.set_filter(fields["status_filter"])
    if "search_query" in fields:
        store.set_search(fields["search_query"] or "")
    if "category" in fields:
        store.set_category(fields["category"])
    return _view_response(store)


@app.post("/view/clear", response_model=TaskListResponse)
def clear_view(store: TaskStore = Depends(get_task_store)):
    """Reset filter, search and category."""
    store.clear_filters()
    return _view_response(store)


@app.get("/export", response_class=PlainTextResponse)
def export_tasks(format: TaskFormat = Query(TaskFormat.JSON), store: TaskStore = Depends(get_task_store)):
    """Export every task as JSON, CSV or text."""
    media_types = {
        TaskFormat.JSON: "application/json",
        TaskFormat.CSV: "text/csv",
        TaskFormat.TEXT: "text/plain",
    }
    return PlainTextResponse(store.export_tasks(format), media_type=media_types[format])


@app.post("/import", response_model=ImportResponse)
def import_tasks(request: ImportRequest, store: TaskStore = Depends(get_task_store)):
    """Import tasks. The collection is unchanged when the content is rejected."""
    try:
        imported = store.import_tasks(request.content, request.format)
    except ImportFormatError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return ImportResponse(imported_count=len(imported), tasks=imported)


@app.get("/preferences/theme", response_model=ThemeResponse)
def get_theme(preferences: PreferencesStore = Depends(get_preferences)):
    return ThemeResponse(dark_mode=preferences.get_dark_mode())


@app.put("/preferences/theme", response_model=ThemeResponse)
def set_theme(request: ThemeUpdateRequest, preferences: PreferencesStore = Depends(get_preferences)):
    return ThemeResponse(dark_mode=preferences.set_dark_mode(request.dark_mode))


@app.post("/notifications/permission", response_model=PermissionResponse)
def request_notification_permission(notifier: DueTaskNotifier = Depends(get_notifier)):
    return PermissionResponse(permission=notifier.request_permission())


@app.post("/notifications/check", response_model=NotificationCheckResponse)
def check_due_tasks(
    store: TaskStore = Depends(get_task_store),
    notifier: DueTaskNotifier = Depends(get_notifier),
):
    """Raise overdue / due-today alerts for the current collection."""
    return NotificationCheckResponse(notifications=notifier.check_due_tasks(store.tasks, store.clock()))


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
