"""Persistence layer for the task tracker."""

from tasktracker.database.memory import InMemoryKeyValueStore
from tasktracker.database.persistence import (
    KeyValueStore,
    PreferencesStore,
    StorageLoadError,
    TaskStorage,
    serialize_tasks,
    deserialize_tasks,
)

__all__ = [
    "InMemoryKeyValueStore",
    "KeyValueStore",
    "PreferencesStore",
    "StorageLoadError",
    "TaskStorage",
    "serialize_tasks",
    "deserialize_tasks",
]
