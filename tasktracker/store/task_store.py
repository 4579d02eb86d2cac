"""Task store: the single owner of the task collection.

Mutations replace the collection, write it through to storage and notify
subscribers. Derived views are recomputed from the current snapshot on each
read; the collection is small enough that no caching is needed.

One reentrant lock serializes every mutation with its write-through, and
every derived read, so concurrent callers (the API threadpool) never
interleave.
"""

import functools
import logging
import threading
from datetime import datetime
from enum import Enum
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from pydantic import ValidationError

from tasktracker.models.task import Task, TaskCounts, TaskPriority, TaskUpdate, StatusFilter, ViewState
from tasktracker.models.task_factory import create_task_base
from tasktracker.database.persistence import TaskStorage, StorageLoadError
from tasktracker.engine.filtering import apply_view
from tasktracker.engine.ranking import sort_tasks
from tasktracker.engine.stats import count_tasks, list_categories, list_tags
from tasktracker.engine.reorder import reorder_orders
from tasktracker.formats import TaskFormat, parse_tasks, export_tasks

logger = logging.getLogger(__name__)


class StoreEvent(str, Enum):
    """What changed in the store."""
    TASKS = "tasks"
    VIEW = "view"


Listener = Callable[[StoreEvent], None]

EMPTY_STATE_COPY: Dict[str, Tuple[str, str]] = {
    StatusFilter.ALL.value: ("Ready to be productive?", "Add your first task above to get started on your journey."),
    StatusFilter.ACTIVE.value: ("All caught up! \U0001F389", "You've completed all your active tasks!"),
    StatusFilter.COMPLETED.value: ("No completed tasks yet", "Complete some tasks to see them here."),
    StatusFilter.OVERDUE.value: ("Nothing overdue", "You're on top of your deadlines."),
    StatusFilter.TODAY.value: ("Nothing due today", "Tasks due today will show up here."),
    StatusFilter.UPCOMING.value: ("Nothing upcoming", "Tasks with a future due date will show up here."),
}
NO_MATCHES_COPY = ("No matching tasks", "Try a different search or clear the filters.")


def next_order(tasks: List[Task]) -> int:
    """One greater than the current maximum order (0 for an empty collection)."""
    return max((task.order for task in tasks), default=-1) + 1


def synchronized(method):
    """Run a TaskStore method while holding the store lock."""
    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        with self._lock:
            return method(self, *args, **kwargs)
    return wrapper


class TaskStore:
    """Owns the canonical task collection and the current view settings."""

    def __init__(self, storage: TaskStorage, clock: Callable[[], datetime] = datetime.now):
        """Create the store and load the persisted collection.

        Args:
            storage: Persistence adapter offering load()/save()
            clock: Source of "now" for date windows and creation timestamps
        """
        self.storage = storage
        self.clock = clock
        self.load_warning: Optional[str] = None
        self._tasks: List[Task] = []
        self._view = ViewState()
        self._listeners: List[Listener] = []
        self._lock = threading.RLock()
        self._load()

    def _load(self) -> None:
        try:
            self._tasks = self.storage.load()
        except StorageLoadError as e:
            logger.warning(f"Failed to load tasks, starting with an empty list: {str(e)}")
            self.load_warning = str(e)
            self._tasks = []

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------

    @synchronized
    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a change listener. Returns a function that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _emit(self, event: StoreEvent) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception as e:
                logger.error(f"Store listener failed on {event.value} change: {type(e).__name__}: {str(e)}")

    def _commit(self, tasks: List[Task]) -> None:
        """Replace the collection, write it through and notify listeners."""
        self._tasks = tasks
        try:
            self.storage.save(self._tasks)
        except Exception as e:
            logger.error(f"Failed to persist {len(tasks)} tasks: {type(e).__name__}: {str(e)}")
        self._emit(StoreEvent.TASKS)

    def _set_view(self, view: ViewState) -> None:
        self._view = view
        self._emit(StoreEvent.VIEW)

    # ------------------------------------------------------------------
    # Snapshots and derived views
    # ------------------------------------------------------------------

    @property
    @synchronized
    def tasks(self) -> List[Task]:
        """Snapshot of the canonical collection in storage order."""
        return list(self._tasks)

    @property
    @synchronized
    def view(self) -> ViewState:
        return self._view.model_copy()

    @property
    @synchronized
    def filtered_tasks(self) -> List[Task]:
        """Searched, filtered and sorted view of the collection."""
        return sort_tasks(apply_view(self._tasks, self._view, self.clock()))

    @property
    @synchronized
    def task_counts(self) -> TaskCounts:
        return count_tasks(self._tasks, self.clock())

    @property
    @synchronized
    def categories(self) -> List[str]:
        return list_categories(self._tasks)

    @property
    @synchronized
    def tags(self) -> List[str]:
        return list_tags(self._tasks)

    @synchronized
    def get_task(self, task_id: str) -> Optional[Task]:
        return next((task for task in self._tasks if task.id == task_id), None)

    @synchronized
    def empty_state_message(self) -> Tuple[str, str]:
        """Title and message to show when the current view is empty."""
        if self._view.search_query.strip() or self._view.category:
            return NO_MATCHES_COPY
        return EMPTY_STATE_COPY.get(self._view.status_filter, EMPTY_STATE_COPY[StatusFilter.ALL.value])

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    @synchronized
    def add_task(
        self,
        title: str,
        due_date: Optional[datetime] = None,
        priority: Union[TaskPriority, str] = TaskPriority.MEDIUM,
        category: Optional[str] = None,
        tags: Optional[Iterable[str]] = None,
    ) -> Optional[Task]:
        """Append a new task after the current highest order.

        Blank titles are ignored (returns None) so the collection is never
        corrupted by unvalidated input.
        """
        if not title or not title.strip():
            logger.debug("Ignoring add_task with a blank title")
            return None

        task = create_task_base(
            title=title,
            due_date=due_date,
            priority=priority,
            category=category,
            tags=tags,
            order=next_order(self._tasks),
            created_at=self.clock(),
        )
        self._commit(self._tasks + [task])
        logger.debug(f"Added task {task.id}: {task.title[:50]}")
        return task

    @synchronized
    def toggle_task(self, task_id: str) -> Optional[Task]:
        """Flip the completed flag. Unknown ids are a no-op (returns None)."""
        current = self.get_task(task_id)
        if current is None:
            return None
        toggled = current.model_copy(update={"completed": not current.completed})
        self._commit([toggled if task.id == task_id else task for task in self._tasks])
        return toggled

    @synchronized
    def update_task(self, task_id: str, changes: Union[TaskUpdate, Mapping]) -> Optional[Task]:
        """Merge title, due date, priority, category and tags into a task.

        ``id``, ``created_at``, ``completed`` and ``order`` are never touched.
        Unknown ids and updates that would blank the title are ignored.

        Returns:
            The updated task, or None when nothing was changed
        """
        current = self.get_task(task_id)
        if current is None:
            return None

        if not isinstance(changes, TaskUpdate):
            try:
                changes = TaskUpdate.model_validate(dict(changes))
            except ValidationError as e:
                logger.warning(f"Ignoring invalid update for task {task_id}: {e.error_count()} error(s)")
                return None

        fields = changes.model_dump(exclude_unset=True)
        if not fields:
            return current
        if "title" in fields and not (fields["title"] or "").strip():
            logger.debug(f"Ignoring update for task {task_id}: blank title")
            return None
        if "tags" in fields and fields["tags"] is None:
            fields["tags"] = ()
        if fields.get("category") is not None:
            fields["category"] = fields["category"].strip() or None

        try:
            updated = Task.model_validate({**current.model_dump(), **fields})
        except ValidationError as e:
            logger.warning(f"Ignoring invalid update for task {task_id}: {e.error_count()} error(s)")
            return None

        self._commit([updated if task.id == task_id else task for task in self._tasks])
        logger.debug(f"Updated task {task_id}: {sorted(fields)}")
        return updated

    @synchronized
    def delete_task(self, task_id: str) -> bool:
        """Remove a task. Returns False (no-op) for unknown ids."""
        remaining = [task for task in self._tasks if task.id != task_id]
        if len(remaining) == len(self._tasks):
            return False
        self._commit(remaining)
        logger.debug(f"Deleted task {task_id}")
        return True

    @synchronized
    def reorder_tasks(self, from_index: int, to_index: int) -> bool:
        """Move a task between two positions of the current view.

        Returns:
            True if any order value changed, False for a no-op
        """
        changes = reorder_orders(self.filtered_tasks, self._tasks, from_index, to_index)
        if not changes:
            return False
        self._commit([
            task.model_copy(update={"order": changes[task.id]}) if task.id in changes else task
            for task in self._tasks
        ])
        logger.debug(f"Reordered view position {from_index} -> {to_index} ({len(changes)} tasks renumbered)")
        return True

    @synchronized
    def merge_tasks(self, incoming: List[Task]) -> List[Task]:
        """Append parsed tasks after the current highest order.

        Incoming tasks replace existing tasks with the same id; within one
        batch the last task with a given id wins.
        """
        by_id: Dict[str, Task] = {}
        for task in incoming:
            by_id.pop(task.id, None)
            by_id[task.id] = task

        remaining = [task for task in self._tasks if task.id not in by_id]
        start = next_order(remaining)
        merged = [
            task.model_copy(update={"order": start + offset})
            for offset, task in enumerate(by_id.values())
        ]
        self._commit(remaining + merged)
        return merged

    def import_tasks(self, content: str, fmt: Union[TaskFormat, str] = TaskFormat.JSON) -> List[Task]:
        """Parse content and merge it into the collection.

        The store is left unchanged unless the whole parse succeeds.

        Raises:
            ImportFormatError: If the content yields no valid tasks
        """
        parsed = parse_tasks(content, TaskFormat(fmt))
        merged = self.merge_tasks(parsed)
        logger.info(f"Imported {len(merged)} tasks from {TaskFormat(fmt).value}")
        return merged

    @synchronized
    def export_tasks(self, fmt: Union[TaskFormat, str] = TaskFormat.JSON) -> str:
        """Render the whole collection in the given format."""
        return export_tasks(self._tasks, TaskFormat(fmt))

    # ------------------------------------------------------------------
    # View settings
    # ------------------------------------------------------------------

    @synchronized
    def set_filter(self, status_filter: Union[StatusFilter, str]) -> None:
        self._set_view(self._view.model_copy(update={"status_filter": StatusFilter(status_filter).value}))

    @synchronized
    def set_search(self, query: str) -> None:
        self._set_view(self._view.model_copy(update={"search_query": query or ""}))

    @synchronized
    def set_category(self, category: Optional[str]) -> None:
        self._set_view(self._view.model_copy(update={"category": category or None}))

    @synchronized
    def clear_filters(self) -> None:
        self._set_view(ViewState())
