import os

# Keep the module-level engine in server.database off the real database file
os.environ["DATABASE_URL"] = "sqlite://"

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from server.database import Base
import server.models  # noqa: F401
from reminder_worker.models import TaskSnapshot
from reminder_worker.registry import SubscriptionRegistry
from reminder_worker.stores import AlertStateStore, TaskStore


class FakePushSender:
    """Stands in for send_web_push; answers 201 unless told otherwise per endpoint."""

    def __init__(self, statuses=None):
        self.statuses = statuses or {}
        self.calls = []

    def __call__(self, subscription, payload):
        self.calls.append((subscription, payload))
        status_code = self.statuses.get(subscription.get("endpoint"), 201)
        if status_code < 300:
            return {"status": "ok"}, status_code
        return {"status": "error", "message": f"HTTP {status_code}"}, status_code


class RecordingDispatcher:
    def __init__(self):
        self.alerts = []

    def dispatch(self, alert):
        self.alerts.append(alert)


def subscription_for(endpoint):
    return {"endpoint": endpoint, "keys": {"p256dh": "BPkey", "auth": "authsecret"}}


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


@pytest.fixture
def task_store(session_factory):
    return TaskStore(session_factory)


@pytest.fixture
def state_store(session_factory):
    return AlertStateStore(session_factory)


@pytest.fixture
def registry(session_factory):
    return SubscriptionRegistry(session_factory)


@pytest.fixture
def dispatcher():
    return RecordingDispatcher()


@pytest.fixture
def make_task():
    def _make(**overrides):
        fields = {
            "id": "task-1",
            "title": "Take vitamins",
            "due_time": "09:00",
            "interval_minutes": 5,
            "max_steps": 3,
        }
        fields.update(overrides)
        fields["completed_instances"] = frozenset(fields.get("completed_instances", ()))
        return TaskSnapshot(**fields)
    return _make


@pytest.fixture
def make_subscription():
    return subscription_for


@pytest.fixture
def make_sender():
    return FakePushSender
