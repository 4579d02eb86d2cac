"""Tests for the key-value backends and the persistence adapter."""

import json
import pytest
from datetime import datetime, timezone

from tasktracker.database.memory import InMemoryKeyValueStore
from tasktracker.database.persistence import (
    PreferencesStore,
    StorageLoadError,
    TaskStorage,
    deserialize_tasks,
    serialize_tasks,
)
from tasktracker.database.repository import KeyValueRepository
from tasktracker.models.constants import TASKS_STORAGE_KEY, DARK_MODE_STORAGE_KEY
from tasktracker.models.task import TaskPriority


class BrokenKeyValueStore:
    """Backend whose reads always fail."""

    def get(self, key):
        raise OSError("disk unavailable")

    def set(self, key, value):
        raise OSError("disk unavailable")


class TestKeyValueRepository:
    """Test the SQLAlchemy-backed key-value repository."""

    def test_get_missing_key(self, db_session):
        repo = KeyValueRepository(db_session)
        assert repo.get("nope") is None

    def test_set_then_get(self, db_session):
        repo = KeyValueRepository(db_session)
        repo.set("tasks", "[]")
        assert repo.get("tasks") == "[]"

    def test_set_overwrites(self, db_session):
        repo = KeyValueRepository(db_session)
        repo.set("darkMode", "true")
        repo.set("darkMode", "false")
        assert repo.get("darkMode") == "false"

    def test_delete(self, db_session):
        repo = KeyValueRepository(db_session)
        repo.set("tasks", "[]")

        assert repo.delete("tasks") is True
        assert repo.get("tasks") is None
        assert repo.delete("tasks") is False

    def test_task_storage_over_database(self, db_session, make_task):
        storage = TaskStorage(KeyValueRepository(db_session))
        tasks = [make_task(title="Persisted", tags=["a"], order=3)]

        storage.save(tasks)

        assert storage.load() == tasks


class TestSerialization:
    """Test the JSON blob format."""

    def test_records_use_camel_case_and_iso_dates(self, make_task):
        task = make_task(due_date=datetime(2026, 2, 1, 9, 30), category="Work")
        record = json.loads(serialize_tasks([task]))[0]

        assert record["createdAt"] == "2026-01-26T12:00:00"
        assert record["dueDate"] == "2026-02-01T09:30:00"
        assert record["priority"] == "medium"
        assert record["category"] == "Work"
        assert "created_at" not in record

    def test_absent_optionals_omitted(self, make_task):
        record = json.loads(serialize_tasks([make_task()]))[0]
        assert "dueDate" not in record
        assert "category" not in record

    def test_round_trip(self, make_task):
        tasks = [
            make_task(title="One", completed=True, priority=TaskPriority.HIGH, tags=["x", "x"]),
            make_task(title="Two", due_date=datetime(2026, 3, 1), category="Home", order=4),
        ]
        assert deserialize_tasks(serialize_tasks(tasks)) == tasks

    def test_utc_suffix_normalized_to_local(self):
        raw = json.dumps([{
            "id": "a",
            "title": "From browser",
            "completed": False,
            "createdAt": "2026-01-26T10:00:00.000Z",
            "dueDate": "2026-01-27T10:00:00Z",
        }])
        task = deserialize_tasks(raw)[0]

        expected = datetime(2026, 1, 27, 10, 0, tzinfo=timezone.utc).astimezone().replace(tzinfo=None)
        assert task.due_date == expected
        assert task.created_at.tzinfo is None

    @pytest.mark.parametrize("raw", [
        "not json",
        '{"id": "a"}',
        '[{"id": "a", "title": "", "completed": false, "createdAt": "2026-01-01T00:00:00"}]',
        '[{"id": "a", "title": "No date", "completed": false}]',
    ])
    def test_malformed_blob(self, raw):
        with pytest.raises(StorageLoadError):
            deserialize_tasks(raw)


class TestTaskStorage:
    """Test TaskStorage load/save."""

    def test_missing_key_is_empty(self, task_storage):
        assert task_storage.load() == []

    def test_blank_value_is_empty(self):
        storage = TaskStorage(InMemoryKeyValueStore({TASKS_STORAGE_KEY: "  "}))
        assert storage.load() == []

    def test_save_writes_under_tasks_key(self, kv_store, task_storage, make_task):
        task_storage.save([make_task(title="Stored")])
        assert json.loads(kv_store.data[TASKS_STORAGE_KEY])[0]["title"] == "Stored"

    def test_backend_read_error_wrapped(self):
        storage = TaskStorage(BrokenKeyValueStore())
        with pytest.raises(StorageLoadError, match="disk unavailable"):
            storage.load()

    def test_backend_write_error_propagates(self, make_task):
        storage = TaskStorage(BrokenKeyValueStore())
        with pytest.raises(OSError):
            storage.save([make_task()])


class TestPreferencesStore:
    """Test the theme preference."""

    def test_default_when_unset(self, kv_store):
        assert PreferencesStore(kv_store, default_dark_mode=True).get_dark_mode() is True
        assert PreferencesStore(kv_store, default_dark_mode=False).get_dark_mode() is False

    def test_stored_as_text(self, kv_store):
        preferences = PreferencesStore(kv_store, default_dark_mode=True)
        preferences.set_dark_mode(False)

        assert kv_store.data[DARK_MODE_STORAGE_KEY] == "false"
        assert preferences.get_dark_mode() is False

    def test_toggle(self, kv_store):
        preferences = PreferencesStore(kv_store, default_dark_mode=True)

        assert preferences.toggle_dark_mode() is False
        assert preferences.toggle_dark_mode() is True
        assert kv_store.data[DARK_MODE_STORAGE_KEY] == "true"

    def test_unrecognised_value_uses_default(self, caplog):
        store = InMemoryKeyValueStore({DARK_MODE_STORAGE_KEY: "maybe"})
        preferences = PreferencesStore(store, default_dark_mode=True)

        assert preferences.get_dark_mode() is True
        assert "maybe" in caplog.text

    def test_read_error_uses_default(self):
        preferences = PreferencesStore(BrokenKeyValueStore(), default_dark_mode=False)
        assert preferences.get_dark_mode() is False
