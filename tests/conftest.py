"""Pytest fixtures and configuration for task tracker tests."""

import pytest
import uuid
from datetime import datetime
from typing import List, Tuple
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

from tasktracker.database.memory import InMemoryKeyValueStore
from tasktracker.database.persistence import TaskStorage, PreferencesStore
from tasktracker.models.task import Task, TaskPriority
from tasktracker.notifications import DueTaskNotifier, NotificationPermission
from tasktracker.store import TaskStore


# Use in-memory SQLite database for tests
TEST_DATABASE_URL = "sqlite:///:memory:"


class RecordingNotifier:
    """Notification backend that records alerts instead of showing them."""

    def __init__(self, permission: NotificationPermission = NotificationPermission.GRANTED):
        self.permission = permission
        self.sent: List[Tuple[str, str]] = []
        self.permission_requests = 0

    def request_permission(self) -> NotificationPermission:
        self.permission_requests += 1
        return self.permission

    def notify(self, title: str, body: str) -> None:
        self.sent.append((title, body))


@pytest.fixture
def fixed_now():
    """Reference time used as 'now' across tests."""
    return datetime(2026, 1, 26, 12, 0, 0)


@pytest.fixture
def kv_store():
    """Empty in-memory key-value store."""
    return InMemoryKeyValueStore()


@pytest.fixture
def task_storage(kv_store):
    return TaskStorage(kv_store)


@pytest.fixture
def task_store(task_storage, fixed_now):
    """Create a TaskStore with a fixed clock."""
    return TaskStore(task_storage, clock=lambda: fixed_now)


@pytest.fixture
def sample_task_base(fixed_now):
    """Base task data for creating test tasks.

    Returns a dict with default task attributes that can be overridden.
    """
    return {
        "id": str(uuid.uuid4()),
        "title": "Test Task",
        "completed": False,
        "created_at": fixed_now,
        "due_date": None,
        "priority": TaskPriority.MEDIUM,
        "category": None,
        "tags": [],
        "order": 0,
    }


@pytest.fixture
def make_task(sample_task_base):
    """Factory for tasks with a fresh id and field overrides."""
    def _make(**overrides) -> Task:
        return Task(**{**sample_task_base, "id": str(uuid.uuid4()), **overrides})
    return _make


@pytest.fixture
def db_session():
    """Create a database session for testing.

    Uses an in-memory SQLite database that is created fresh for each test.
    """
    from tasktracker.database.database import Base
    from tasktracker.database import models  # noqa: F401

    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False
    )
    Base.metadata.create_all(bind=engine)

    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def recording_notifier():
    return RecordingNotifier()


@pytest.fixture
def test_client(task_store, kv_store, recording_notifier):
    """Create a FastAPI test client wired to in-memory stores."""
    from tasktracker.api.app import app, get_task_store, get_preferences, get_notifier

    preferences = PreferencesStore(kv_store, default_dark_mode=True)
    notifier = DueTaskNotifier(recording_notifier)

    app.dependency_overrides[get_task_store] = lambda: task_store
    app.dependency_overrides[get_preferences] = lambda: preferences
    app.dependency_overrides[get_notifier] = lambda: notifier

    with TestClient(app) as client:
        yield client

    # Clean up dependency overrides
    app.dependency_overrides.clear()
