from __future__ import annotations


def _create(client, **body):
    body.setdefault("title", "Test Task")
    response = client.post("/api/tasks", json=body)
    assert response.status_code == 201, response.text
    return response.json()


def test_healthz(client) -> None:
    response = client.get("/healthz")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_create_returns_camel_case_task(client) -> None:
    task = _create(client, description="from the api", dueDate="2024-05-01T10:30:00Z")

    assert set(task) == {"id", "title", "description", "status", "dueDate", "createdAt", "updatedAt"}
    assert task["title"] == "Test Task"
    assert task["description"] == "from the api"
    assert task["status"] == "TODO"
    assert task["dueDate"].startswith("2024-05-01T10:30:00")
    assert task["createdAt"] == task["updatedAt"]


def test_create_validation_errors_are_field_keyed(client) -> None:
    response = client.post("/api/tasks", json={"title": "   ", "dueDate": "soon"})

    assert response.status_code == 400
    body = response.json()
    assert body["errors"]["title"] == ["Title is required"]
    assert body["errors"]["dueDate"] == ["Due date must be a valid ISO 8601 date-time"]


def test_create_over_ceiling_is_conflict(client) -> None:
    for i in range(100):
        _create(client, title=f"task {i}")

    response = client.post("/api/tasks", json={"title": "one more"})
    assert response.status_code == 409
    assert response.json() == {"detail": "You can create up to 100 tasks"}


def test_list_envelope_and_pagination(client) -> None:
    for i in range(4):
        _create(client, title=f"task {i}")

    response = client.get("/api/tasks", params={"limit": 2, "offset": 2})
    assert response.status_code == 200
    body = response.json()
    assert body["count"] == 4
    assert body["hasMore"] is False
    assert [t["title"] for t in body["tasks"]] == ["task 1", "task 0"]

    first = client.get("/api/tasks", params={"limit": 2}).json()
    assert first["hasMore"] is True
    assert [t["title"] for t in first["tasks"]] == ["task 3", "task 2"]


def test_list_filter_and_sort_query_params(client) -> None:
    late = _create(client, title="late", dueDate="2024-03-01T00:00:00Z")
    undated = _create(client, title="undated")
    early = _create(client, title="early", dueDate="2024-02-01T00:00:00Z")
    client.put(f"/api/tasks/{late['id']}", json={"status": "DONE"})

    by_due = client.get("/api/tasks", params={"sortBy": "due_date", "sortOrder": "asc"}).json()
    assert [t["id"] for t in by_due["tasks"]] == [early["id"], late["id"], undated["id"]]

    done = client.get("/api/tasks", params={"status": "DONE"}).json()
    assert [t["id"] for t in done["tasks"]] == [late["id"]]
    assert done["count"] == 1


def test_list_rejects_bad_options(client) -> None:
    response = client.get("/api/tasks", params={"limit": 101})
    assert response.status_code == 400
    assert "limit" in response.json()["errors"]

    response = client.get("/api/tasks", params={"sortBy": "title"})
    assert response.status_code == 400
    assert "sortBy" in response.json()["errors"]


def test_get_update_delete_roundtrip(client) -> None:
    task = _create(client, description="keep me")

    fetched = client.get(f"/api/tasks/{task['id']}")
    assert fetched.status_code == 200
    assert fetched.json()["id"] == task["id"]

    updated = client.put(f"/api/tasks/{task['id']}", json={"status": "in_progress", "title": "Renamed"})
    assert updated.status_code == 200
    body = updated.json()
    assert body["status"] == "IN_PROGRESS"
    assert body["title"] == "Renamed"
    assert body["description"] == "keep me"
    assert body["createdAt"] == task["createdAt"]
    assert body["updatedAt"] >= task["updatedAt"]

    deleted = client.delete(f"/api/tasks/{task['id']}")
    assert deleted.status_code == 200
    assert deleted.json() == {"success": True}

    assert client.get(f"/api/tasks/{task['id']}").status_code == 404
    assert client.delete(f"/api/tasks/{task['id']}").status_code == 404


def test_update_clears_optional_fields(client) -> None:
    task = _create(client, description="x", dueDate="2024-05-01T10:30:00Z")
    body = client.put(f"/api/tasks/{task['id']}", json={"description": "", "dueDate": None}).json()
    assert body["description"] is None
    assert body["dueDate"] is None


def test_update_errors(client) -> None:
    task = _create(client)

    response = client.put(f"/api/tasks/{task['id']}", json={"status": "ARCHIVED"})
    assert response.status_code == 400
    assert response.json()["errors"] == {"status": ["Status must be one of: TODO, IN_PROGRESS, DONE"]}

    response = client.put("/api/tasks/not-a-task", json={"title": "x"})
    assert response.status_code == 404
    assert response.json() == {"detail": "Task not found"}

    response = client.get("/api/tasks/bad%20id")
    assert response.status_code == 400
    assert response.json() == {"detail": "Invalid task id"}


def test_list_rejects_offset_past_integer_range(client) -> None:
    response = client.get("/api/tasks", params={"offset": str(2**63)})
    assert response.status_code == 400
    assert "offset" in response.json()["errors"]


def test_non_object_bodies_are_bad_requests(client) -> None:
    response = client.post("/api/tasks", json=["x"])
    assert response.status_code == 400
    body = response.json()
    assert body["detail"] == "Invalid request body"
    assert "body" in body["errors"]

    task = _create(client)
    response = client.put(f"/api/tasks/{task['id']}", json="just a string")
    assert response.status_code == 400
    assert "body" in response.json()["errors"]


def test_malformed_json_is_a_bad_request(client) -> None:
    headers = {"Content-Type": "application/json"}

    response = client.post("/api/tasks", content=b"{bad", headers=headers)
    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid request body"

    task = _create(client)
    response = client.put(f"/api/tasks/{task['id']}", content=b"{bad", headers=headers)
    assert response.status_code == 400
    assert client.get(f"/api/tasks/{task['id']}").json()["title"] == "Test Task"
