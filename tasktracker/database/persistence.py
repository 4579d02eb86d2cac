"""Persistence adapter for the task collection.

The collection is read and written as a single JSON text blob through any
object that offers ``get(key)`` / ``set(key, value)``, so the store never
depends on a concrete backend.
"""

import json
import logging
from typing import List, Optional, Protocol

from pydantic import ValidationError

from tasktracker.models.task import Task
from tasktracker.models.constants import (
    TASKS_STORAGE_KEY,
    DARK_MODE_STORAGE_KEY,
    DEFAULT_DARK_MODE,
)

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    """Storage capability required by the persistence adapter."""

    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...


class StorageLoadError(Exception):
    """Raised when the persisted task blob cannot be read back."""


def tasks_to_records(tasks: List[Task]) -> List[dict]:
    """Convert tasks to JSON-ready records (camelCase keys, ISO-8601 dates)."""
    return [task.model_dump(mode="json", by_alias=True, exclude_none=True) for task in tasks]


def serialize_tasks(tasks: List[Task], indent: Optional[int] = None) -> str:
    """Serialize the task collection to JSON text."""
    return json.dumps(tasks_to_records(tasks), indent=indent, ensure_ascii=False)


def deserialize_tasks(raw: str) -> List[Task]:
    """Parse a persisted JSON blob back into tasks.

    Raises:
        StorageLoadError: If the blob is not a JSON array of valid task records
    """
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise StorageLoadError(f"Stored tasks are not valid JSON: {e}") from e

    if not isinstance(data, list):
        raise StorageLoadError(f"Stored tasks must be a JSON array, got {type(data).__name__}")

    try:
        return [Task.model_validate(record) for record in data]
    except ValidationError as e:
        raise StorageLoadError(f"Stored tasks contain an invalid record: {e.error_count()} error(s)") from e


class TaskStorage:
    """Load/save pair for the whole task collection."""

    def __init__(self, kv_store: KeyValueStore, key: str = TASKS_STORAGE_KEY):
        self.kv_store = kv_store
        self.key = key

    def load(self) -> List[Task]:
        """Load all tasks. A missing key means an empty collection.

        Raises:
            StorageLoadError: If the stored value is unreadable or malformed
        """
        try:
            raw = self.kv_store.get(self.key)
        except Exception as e:
            raise StorageLoadError(f"Failed to read stored tasks: {type(e).__name__}: {str(e)}") from e

        if raw is None or not raw.strip():
            return []
        tasks = deserialize_tasks(raw)
        logger.debug(f"Loaded {len(tasks)} tasks from storage")
        return tasks

    def save(self, tasks: List[Task]) -> None:
        """Overwrite the stored collection. Backend errors propagate."""
        self.kv_store.set(self.key, serialize_tasks(tasks))
        logger.debug(f"Saved {len(tasks)} tasks to storage")


class PreferencesStore:
    """Theme preference stored as the text "true"/"false"."""

    def __init__(self, kv_store: KeyValueStore, default_dark_mode: bool = DEFAULT_DARK_MODE):
        self.kv_store = kv_store
        self.default_dark_mode = default_dark_mode

    def get_dark_mode(self) -> bool:
        try:
            raw = self.kv_store.get(DARK_MODE_STORAGE_KEY)
        except Exception as e:
            logger.warning(f"Failed to read theme preference: {type(e).__name__}: {str(e)}")
            return self.default_dark_mode
        if raw is None:
            return self.default_dark_mode
        value = raw.strip().lower()
        if value not in ("true", "false"):
            logger.warning(f"Ignoring unrecognised theme preference {raw!r}")
            return self.default_dark_mode
        return value == "true"

    def set_dark_mode(self, enabled: bool) -> bool:
        self.kv_store.set(DARK_MODE_STORAGE_KEY, "true" if enabled else "false")
        return enabled

    def toggle_dark_mode(self) -> bool:
        return self.set_dark_mode(not self.get_dark_mode())
