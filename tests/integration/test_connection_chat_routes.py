from __future__ import annotations


def test_requires_authentication(api):
    for method, path in (("get", "/api/connections"), ("put", "/api/chat"), ("get", "/api/favorites")):
        response = getattr(api.client, method)(path)
        assert response.status_code == 401
        assert response.json() == {"error": "Unauthorized"}


def test_unknown_bearer_token_is_401(api):
    response = api.client.get("/api/connections", headers={"Authorization": "Bearer nope"})
    assert response.status_code == 401


def test_patient_cannot_request_connection(api):
    _, patient = api.make_user("p1@example.com", role="patient")
    r1, _ = api.make_user("r1@example.com")

    response = api.client.post("/api/connections", json={"receiverId": r1}, headers=patient)
    assert response.status_code == 403
    assert "researchers" in response.json()["error"]


def test_two_researcher_connection_and_chat_flow(api):
    r1, h1 = api.make_user("r1@example.com")
    r2, h2 = api.make_user("r2@example.com")

    created = api.client.post("/api/connections", json={"receiverId": r2}, headers=h1)
    assert created.status_code == 200
    connection = created.json()["connection"]
    assert connection["status"] == "pending"

    early = api.client.post("/api/chat", json={"receiverId": r2, "message": "hi"}, headers=h1)
    assert early.status_code == 403

    accepted = api.client.patch(
        "/api/connections",
        json={"connectionId": connection["id"], "action": "accept"},
        headers=h2,
    )
    assert accepted.status_code == 200
    assert accepted.json()["connection"]["status"] == "accepted"

    sent = api.client.post("/api/chat", json={"receiverId": r2, "message": "hello"}, headers=h1)
    assert sent.status_code == 200
    assert sent.json()["message"]["message"] == "hello"

    convs = api.client.put("/api/chat", headers=h2).json()["conversations"]
    assert len(convs) == 1
    assert convs[0]["userId"] == r1
    assert convs[0]["latestMessage"]["message"] == "hello"
    assert convs[0]["unreadCount"] == 1

    thread = api.client.get(f"/api/chat?userId={r1}", headers=h2)
    assert thread.status_code == 200
    assert [m["message"] for m in thread.json()["messages"]] == ["hello"]

    convs = api.client.put("/api/chat", headers=h2).json()["conversations"]
    assert convs[0]["unreadCount"] == 0


def test_duplicate_request_reports_status(api):
    r1, h1 = api.make_user("r1@example.com")
    r2, h2 = api.make_user("r2@example.com")
    api.client.post("/api/connections", json={"receiverId": r2}, headers=h1)

    response = api.client.post("/api/connections", json={"receiverId": r1}, headers=h2)
    assert response.status_code == 400
    assert response.json() == {"error": "Connection request already exists", "status": "pending"}


def test_request_validation_errors(api):
    r1, h1 = api.make_user("r1@example.com")

    assert api.client.post("/api/connections", json={"receiverId": r1}, headers=h1).status_code == 400
    assert api.client.post("/api/connections", json={}, headers=h1).status_code == 400
    missing = api.client.post("/api/connections", json={"receiverId": 999}, headers=h1)
    assert missing.status_code == 404
    bad_type = api.client.post("/api/connections", json={"receiverId": "abc"}, headers=h1)
    assert bad_type.status_code == 400
    assert "error" in bad_type.json()


def test_only_receiver_responds(api):
    _, h1 = api.make_user("r1@example.com")
    r2, _ = api.make_user("r2@example.com")
    connection = api.client.post("/api/connections", json={"receiverId": r2}, headers=h1).json()[
        "connection"
    ]

    response = api.client.patch(
        "/api/connections",
        json={"connectionId": connection["id"], "action": "accept"},
        headers=h1,
    )
    assert response.status_code == 403

    missing = api.client.patch(
        "/api/connections", json={"connectionId": 999, "action": "accept"}, headers=h1
    )
    assert missing.status_code == 404


def test_list_connections_from_both_sides(api):
    r1, h1 = api.make_user("r1@example.com")
    r2, h2 = api.make_user("r2@example.com")
    api.client.post("/api/connections", json={"receiverId": r2}, headers=h1)

    mine = api.client.get("/api/connections", headers=h1).json()["connections"]
    theirs = api.client.get("/api/connections", headers=h2).json()["connections"]
    assert mine[0]["isRequester"] is True
    assert theirs[0]["isRequester"] is False
    assert theirs[0]["requester"]["id"] == r1


def test_chat_thread_requires_user_id(api):
    _, h1 = api.make_user("r1@example.com")
    response = api.client.get("/api/chat", headers=h1)
    assert response.status_code == 400
    assert response.json()["error"] == "userId is required"


def test_patient_cannot_chat(api):
    _, patient = api.make_user("p1@example.com", role="patient")
    assert api.client.put("/api/chat", headers=patient).status_code == 403


def test_role_change_applies_next_request(api):
    r2, _ = api.make_user("r2@example.com")
    _, headers = api.make_user("new@example.com", role=None)

    assert api.client.post("/api/connections", json={"receiverId": r2}, headers=headers).status_code == 403
    chosen = api.client.post("/api/auth/update-usertype", json={"userType": "researcher"}, headers=headers)
    assert chosen.status_code == 200
    assert api.client.post("/api/connections", json={"receiverId": r2}, headers=headers).status_code == 200


def test_ids_beyond_storage_range_are_rejected(api):
    _, h1 = api.make_user("r1@example.com")
    huge = 10**30

    create = api.client.post("/api/connections", json={"receiverId": huge}, headers=h1)
    assert create.status_code == 400
    assert create.json()["error"].startswith("Invalid input: receiverId")

    respond = api.client.patch(
        "/api/connections", json={"connectionId": huge, "action": "accept"}, headers=h1
    )
    assert respond.status_code == 400

    assert api.client.get(f"/api/chat?userId={huge}", headers=h1).status_code == 400
    send = api.client.post("/api/chat", json={"receiverId": huge, "message": "hi"}, headers=h1)
    assert send.status_code == 400


def test_storage_failure_is_generic_500(api, monkeypatch):
    import curalink.api.routes.connections as connections_module
    from sqlalchemy.exc import OperationalError

    _, h1 = api.make_user("r1@example.com")

    def broken_list(user_id, status=None):
        raise OperationalError("SELECT 1", {}, Exception("database is locked"))

    monkeypatch.setattr(
        connections_module._connection_service._connections, "list_for_user", broken_list
    )
    response = api.client.get("/api/connections", headers=h1)
    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error"}
