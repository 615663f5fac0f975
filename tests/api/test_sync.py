from reminder_worker.registry import SubscriptionRegistry, user_key


def subscription(endpoint):
    return {"endpoint": endpoint, "keys": {"p256dh": "BPkey", "auth": "authsecret"}}


def test_sync_stores_user_record(api_client, session_factory):
    tasks = [{"title": "A", "dueTime": "09:00", "completedToday": False}]
    response = api_client.post("/sync", json={"subscription": subscription("https://push.example/a"), "tasks": tasks})

    assert response.status_code == 200
    assert response.json() == {"ok": True}
    (key, record), = SubscriptionRegistry(session_factory).user_records()
    assert key == user_key("https://push.example/a")
    assert record["tasks"] == tasks


def test_sync_replaces_previous_tasks(api_client, session_factory):
    sub = subscription("https://push.example/a")
    api_client.post("/sync", json={"subscription": sub, "tasks": [{"title": "A", "dueTime": "09:00"}]})
    api_client.post("/sync", json={"subscription": sub, "tasks": []})

    (_, record), = SubscriptionRegistry(session_factory).user_records()
    assert record["tasks"] == []


def test_sync_without_endpoint(api_client):
    response = api_client.post("/sync", json={"subscription": {"keys": {}}, "tasks": []})
    assert response.status_code == 400
    assert response.json()["detail"] == "Missing subscription"


def test_sync_without_subscription(api_client):
    assert api_client.post("/sync", json={"tasks": []}).status_code == 400
