from __future__ import annotations


def test_favorites_add_is_idempotent_and_remove_is_noop(api):
    _, headers = api.make_user("p@example.com", role="patient")

    for _ in range(2):
        response = api.client.post(
            "/api/favorites", json={"kind": "trials", "itemId": "NCT0001"}, headers=headers
        )
        assert response.json() == {"ok": True}

    listed = api.client.get("/api/favorites", headers=headers).json()
    assert listed == {"experts": [], "trials": ["NCT0001"], "publications": []}

    for _ in range(2):
        removed = api.client.request(
            "DELETE", "/api/favorites", json={"kind": "trials", "itemId": "NCT0001"}, headers=headers
        )
        assert removed.status_code == 200
    assert api.client.get("/api/favorites", headers=headers).json()["trials"] == []


def test_favorites_rejects_unknown_kind(api):
    _, headers = api.make_user("p@example.com", role="patient")
    response = api.client.post("/api/favorites", json={"kind": "drugs", "itemId": "x"}, headers=headers)
    assert response.status_code == 400
    assert response.json() == {"error": "Invalid payload"}


def test_notification_feed_lifecycle(api):
    _, headers = api.make_user("n@example.com", role="patient")

    created = api.client.post(
        "/api/notifications",
        json={"type": "trial_update", "title": "Trial updated", "message": "NCT1 is recruiting"},
        headers=headers,
    )
    assert created.status_code == 200
    first_id = created.json()["notification"]["id"]
    api.client.post(
        "/api/notifications", json={"type": "general", "title": "Welcome", "message": ""}, headers=headers
    )

    feed = api.client.get("/api/notifications", headers=headers).json()
    assert [n["title"] for n in feed["notifications"]] == ["Welcome", "Trial updated"]
    assert feed["unreadCount"] == 2

    assert api.client.patch(f"/api/notifications/{first_id}/read", headers=headers).json() == {"ok": True}
    assert api.client.get("/api/notifications", headers=headers).json()["unreadCount"] == 1

    assert api.client.post("/api/notifications/read-all", headers=headers).json()["updated"] == 1
    assert api.client.delete(f"/api/notifications/{first_id}", headers=headers).json() == {"ok": True}
    assert api.client.delete("/api/notifications", headers=headers).json() == {"ok": True, "cleared": 1}
    assert api.client.get("/api/notifications", headers=headers).json()["notifications"] == []


def test_notification_errors(api):
    _, headers = api.make_user("n@example.com", role="patient")
    bad = api.client.post(
        "/api/notifications", json={"type": "nope", "title": "x", "message": ""}, headers=headers
    )
    assert bad.status_code == 400
    assert api.client.patch("/api/notifications/999/read", headers=headers).status_code == 404


def test_notification_ids_beyond_storage_range_are_rejected(api):
    _, headers = api.make_user("n@example.com", role="patient")
    huge = 10**30
    assert api.client.patch(f"/api/notifications/{huge}/read", headers=headers).status_code == 400
    assert api.client.delete(f"/api/notifications/{huge}", headers=headers).status_code == 400
