import pytest
from fastapi.testclient import TestClient

from server.main import app
from server.dependencies import get_db, get_push_sender, get_registry, get_task_store
from reminder_worker.registry import SubscriptionRegistry
from reminder_worker.stores import TaskStore


@pytest.fixture
def push_sender(make_sender):
    return make_sender()


@pytest.fixture
def api_client(session_factory, push_sender):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_task_store] = lambda: TaskStore(session_factory)
    app.dependency_overrides[get_registry] = lambda: SubscriptionRegistry(session_factory)
    app.dependency_overrides[get_push_sender] = lambda: push_sender

    yield TestClient(app)

    app.dependency_overrides.clear()


@pytest.fixture
def created_task(api_client):
    payload = {
        "title": "Take vitamins",
        "dueTime": "09:00",
        "escalation": {"intervalMinutes": 10, "maxSteps": 4}
    }
    response = api_client.post("/tasks/", json=payload)
    assert response.status_code == 201
    return response.json()
