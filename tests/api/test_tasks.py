import pytest

from server.main import app
from server.dependencies import get_task_store
from reminder_worker.config import local_now
from reminder_worker.stores import StoreUnavailable, TaskStore


def today():
    return local_now().date().isoformat()


def test_create_task(created_task):
    assert created_task["id"]
    assert created_task["title"] == "Take vitamins"
    assert created_task["dueTime"] == "09:00"
    assert created_task["recurrence"] == "daily"
    assert created_task["priority"] == "normal"
    assert created_task["escalation"] == {"intervalMinutes": 10, "maxSteps": 4}
    assert created_task["completedInstances"] == []
    assert created_task["completedToday"] is False


def test_create_task_default_escalation(api_client):
    response = api_client.post("/tasks/", json={"title": "Stretch", "dueTime": "14:30"})
    assert response.status_code == 201
    assert response.json()["escalation"] == {"intervalMinutes": 5, "maxSteps": 3}


@pytest.mark.parametrize("payload", [
    {"title": "Bad", "dueTime": "25:00"},
    {"title": "Bad", "dueTime": "9:00"},
    {"title": "", "dueTime": "09:00"},
    {"title": "Bad", "dueTime": "09:00", "escalation": {"intervalMinutes": 0, "maxSteps": 3}},
    {"title": "Bad", "dueTime": "09:00", "escalation": {"intervalMinutes": 5, "maxSteps": -1}},
])
def test_create_task_rejects_invalid_input(api_client, payload):
    response = api_client.post("/tasks/", json=payload)
    assert response.status_code == 422


def test_list_tasks_ordered_by_due_time(api_client):
    for title, due in [("Evening walk", "18:00"), ("Breakfast", "08:00"), ("Lunch", "12:30")]:
        api_client.post("/tasks/", json={"title": title, "dueTime": due})

    response = api_client.get("/tasks/")
    assert response.status_code == 200
    assert [t["title"] for t in response.json()] == ["Breakfast", "Lunch", "Evening walk"]


def test_get_task(api_client, created_task):
    response = api_client.get(f"/tasks/{created_task['id']}")
    assert response.status_code == 200
    assert response.json()["title"] == "Take vitamins"


def test_get_unknown_task(api_client):
    response = api_client.get("/tasks/does-not-exist")
    assert response.status_code == 404
    assert response.json()["detail"] == "Task not found"


def test_update_task(api_client, created_task):
    response = api_client.put(
        f"/tasks/{created_task['id']}",
        json={"dueTime": "10:15", "priority": "high", "escalation": {"intervalMinutes": 2, "maxSteps": 5}}
    )
    assert response.status_code == 200
    data = response.json()
    assert data["title"] == "Take vitamins"
    assert data["dueTime"] == "10:15"
    assert data["priority"] == "high"
    assert data["escalation"] == {"intervalMinutes": 2, "maxSteps": 5}


def test_update_rejects_invalid_due_time(api_client, created_task):
    response = api_client.put(f"/tasks/{created_task['id']}", json={"dueTime": "noon"})
    assert response.status_code == 422


def test_delete_task(api_client, created_task):
    response = api_client.delete(f"/tasks/{created_task['id']}")
    assert response.status_code == 200
    assert response.json()["message"] == "Task deleted"
    assert api_client.get(f"/tasks/{created_task['id']}").status_code == 404


def test_toggle_today(api_client, created_task):
    url = f"/tasks/{created_task['id']}/toggle"

    done = api_client.post(url).json()
    assert done["completedInstances"] == [today()]
    assert done["completedToday"] is True

    undone = api_client.post(url).json()
    assert undone["completedInstances"] == []
    assert undone["completedToday"] is False


def test_toggle_other_day(api_client, created_task):
    response = api_client.post(f"/tasks/{created_task['id']}/toggle", json={"date": "2026-01-02"})
    assert response.status_code == 200
    assert response.json()["completedInstances"] == ["2026-01-02"]


def test_toggle_rejects_bad_date(api_client, created_task):
    response = api_client.post(f"/tasks/{created_task['id']}/toggle", json={"date": "02/01/2026"})
    assert response.status_code == 422


def test_toggle_unknown_task(api_client):
    assert api_client.post("/tasks/nope/toggle").status_code == 404


def test_api_writes_are_what_the_engine_reads(api_client, session_factory, created_task):
    store = TaskStore(session_factory)
    api_client.post(f"/tasks/{created_task['id']}/toggle", json={"date": "2026-10-19"})

    (task,) = store.get_all()
    assert task.id == created_task["id"]
    assert task.interval_minutes == 10
    assert task.completed_on("2026-10-19")


def test_delete_unknown_task(api_client):
    assert api_client.delete("/tasks/nope").status_code == 404


class UnavailableTaskStore:
    def get_all(self):
        raise StoreUnavailable("database is locked")


def test_store_outage_is_503(api_client):
    app.dependency_overrides[get_task_store] = UnavailableTaskStore

    response = api_client.get("/tasks/")

    assert response.status_code == 503
    assert response.json() == {"detail": "Store unavailable"}
