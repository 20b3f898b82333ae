def test_parse_returns_camel_case(client):
    r = client.post("/voice/parse", json={"transcript": "Create a high priority task to review the pull request by tomorrow"})
    assert r.status_code == 200
    body = r.json()
    assert set(body) == {"rawTranscript", "parsed", "confidence", "strategy", "fallbackUsed", "parsedLogId"}
    assert body["parsed"]["dueDate"] == "2025-01-11T00:00:00Z"
    assert body["parsed"]["priority"] == "HIGH"
    assert set(body["confidence"]) == {"overall", "title", "priority", "dueDate"}


def test_parse_rejects_short_transcript(client):
    r = client.post("/voice/parse", json={"transcript": "too short"})
    assert r.status_code == 400
    body = r.json()
    assert body["error"] == "InvalidTranscriptError"
    assert body["details"] == {"length": 9, "minimum": 10}
    assert "timestamp" in body


def test_parse_then_create_then_read_log(client):
    parsed = client.post("/voice/parse", json={"transcript": "Remind me to book the venue by Monday"}).json()

    r = client.post("/voice/tasks", json={
        "transcript": parsed["rawTranscript"],
        "parsedData": parsed["parsed"],
        "parsedLogId": parsed["parsedLogId"],
    })
    assert r.status_code == 201
    created = r.json()
    assert created["task"]["title"] == "Book the venue by Monday"
    assert created["parseLog"]["linkedTaskId"] == created["task"]["id"]

    log = client.get(f"/voice/logs/{parsed['parsedLogId']}").json()
    assert log["task"]["id"] == created["task"]["id"]

    again = client.post("/voice/tasks", json={
        "transcript": parsed["rawTranscript"],
        "parsedData": parsed["parsed"],
        "parsedLogId": parsed["parsedLogId"],
    })
    assert again.status_code == 409
    assert again.json()["error"] == "LogAlreadyLinkedError"


def test_unknown_log_is_404(client):
    r = client.get("/voice/logs/does-not-exist")
    assert r.status_code == 404
    assert r.json()["error"] == "NotFoundError"


def test_create_task_rejects_invalid_parsed_data(client):
    r = client.post("/voice/tasks", json={
        "transcript": "Something worth doing",
        "parsedData": {"title": "", "priority": "URGENT"},
    })
    assert r.status_code == 422


def test_tasks_crud_and_board(client):
    r = client.post("/tasks", json={"title": "Write report", "priority": "HIGH", "dueDate": "2025-01-20T00:00:00Z"})
    assert r.status_code == 201
    task = r.json()
    client.post("/tasks", json={"title": "Buy milk", "priority": "LOW"})

    r = client.patch(f"/tasks/{task['id']}", json={"status": "IN_PROGRESS"})
    assert r.status_code == 200
    assert r.json()["status"] == "IN_PROGRESS"

    page = client.get("/tasks", params={"sortBy": "priority", "sortOrder": "desc"}).json()
    assert page["total"] == 2
    assert [t["title"] for t in page["tasks"]] == ["Write report", "Buy milk"]

    board = client.get("/tasks/board").json()
    assert [t["title"] for t in board["inProgress"]] == ["Write report"]
    assert [t["title"] for t in board["todo"]] == ["Buy milk"]
    assert board["done"] == []

    assert client.delete(f"/tasks/{task['id']}").status_code == 204
    assert client.get(f"/tasks/{task['id']}").status_code == 404


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    body = r.json()
    assert body["status"] == "healthy"
    assert body["parser"]["strategy"] == "rules"
