"""Task store."""

from tasktracker.store.task_store import TaskStore, StoreEvent

__all__ = ["TaskStore", "StoreEvent"]
