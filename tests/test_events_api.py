from ticketron.store import EVENTS


def test_create_event(client, store, event_payload):
    res = client.post("/events", json=event_payload())
    assert res.status_code == 201
    event_id = res.get_json()["id"]

    doc = store.get(EVENTS, event_id)
    assert doc["eventId"] == event_id
    assert doc["title"] == "Jazz Night"
    assert doc["organizer"] == {"organizerId": "org-1", "name": "Blue Note"}
    assert "createdAt" in doc


def test_create_event_keeps_extra_fields(client, store, event_payload):
    res = client.post("/events", json=event_payload(dressCode="smart"))
    assert store.get(EVENTS, res.get_json()["id"])["dressCode"] == "smart"


def test_create_event_validation(client, store, event_payload):
    res = client.post("/events", json=event_payload(title="  ", date="next friday", ticketsLeft="lots"))
    assert res.status_code == 400
    body = res.get_json()
    assert body["code"] == "validation_error"
    assert {e["field"] for e in body["errors"]} == {"title", "date", "ticketsLeft"}
    assert store.find(EVENTS) == []


def test_create_event_requires_json(client):
    res = client.post("/events", data="title=x")
    assert res.status_code == 415
    assert res.get_json()["code"] == "unsupported_media_type"


def test_batch_create(client, store, event_payload):
    res = client.post("/events/batch", json={"events": [event_payload(), event_payload(title="Tech Talk")]})
    assert res.status_code == 201
    body = res.get_json()
    assert body["message"] == "Batch events created"
    assert len(body["ids"]) == 2
    assert sorted(e["title"] for e in store.find(EVENTS)) == ["Jazz Night", "Tech Talk"]


def test_batch_create_is_rejected_as_a_whole(client, store, event_payload):
    res = client.post("/events/batch", json={"events": [event_payload(), {"title": "half"}]})
    assert res.status_code == 400
    assert all(e["field"].startswith("events.1") for e in res.get_json()["errors"])
    assert store.find(EVENTS) == []


def test_list_events_marks_likes_only_with_user(client, seed):
    seed.event("e1", title="A")
    seed.event("e2", title="B")
    client.post("/events/e2/toggleFavorite", json={"userId": "u1"})

    plain = client.get("/events").get_json()
    assert [e["id"] for e in plain] == ["e1", "e2"]
    assert all("isLiked" not in e for e in plain)

    liked = client.get("/events?userId=u1").get_json()
    assert [(e["id"], e["isLiked"]) for e in liked] == [("e1", False), ("e2", True)]

    stranger = client.get("/events?userId=u2").get_json()
    assert [e["isLiked"] for e in stranger] == [False, False]


def test_get_event(client, seed):
    seed.event("e1", title="A")
    res = client.get("/events/e1")
    assert res.status_code == 200
    assert res.get_json() == {"id": "e1", "eventId": "e1", "title": "A"}

    missing = client.get("/events/nope")
    assert missing.status_code == 404
    assert missing.get_json()["error"] == "Event not found"


def test_events_by_organizer(client, seed):
    seed.event("e1", organizer={"organizerId": "A"})
    seed.event("e2", organizer={"organizerId": "B"})
    res = client.get("/events/organizer/A")
    assert [e["id"] for e in res.get_json()] == ["e1"]


def test_update_event(client, store, seed, event_payload):
    seed.event("e1", title="Old", extra="kept")
    res = client.put("/events/e1", json=event_payload(title="New"))
    assert res.status_code == 200
    assert res.get_json() == {"message": "Event updated"}
    doc = store.get(EVENTS, "e1")
    assert doc["title"] == "New"
    assert doc["extra"] == "kept"


def test_update_missing_event(client, event_payload):
    res = client.put("/events/ghost", json=event_payload())
    assert res.status_code == 404


def test_delete_event(client, store, seed):
    seed.event("e1")
    res = client.delete("/events/e1")
    assert res.get_json() == {"message": "Event deleted"}
    assert store.get(EVENTS, "e1") is None
    assert client.delete("/events/e1").status_code == 200


def test_delete_all_events(client, store, seed):
    assert client.delete("/events").status_code == 404
    seed.event("e1")
    seed.event("e2")
    res = client.delete("/events")
    assert res.status_code == 200
    assert res.get_json() == {"message": "All events deleted"}
    assert store.find(EVENTS) == []


def test_toggle_favorite(client):
    first = client.post("/events/e1/toggleFavorite", json={"userId": "u1"})
    assert first.get_json() == {"message": "Event favorited", "isLiked": True}
    second = client.post("/events/e1/toggleFavorite", json={"userId": "u1"})
    assert second.get_json() == {"message": "Event unfavorited", "isLiked": False}


def test_toggle_favorite_requires_user(client):
    res = client.post("/events/e1/toggleFavorite", json={})
    assert res.status_code == 400
    assert res.get_json()["error"] == "User ID is required"


def test_unknown_route_uses_plain_envelope(client):
    res = client.get("/nowhere")
    assert res.status_code == 404
    assert res.get_json() == {"error": "Not found.", "code": "not_found"}


def test_request_id_and_security_headers(client):
    res = client.get("/api/health", headers={"X-Request-Id": "abc-123"})
    assert res.get_json() == {"status": "up"}
    assert res.headers["X-Request-Id"] == "abc-123"
    assert res.headers["X-Content-Type-Options"] == "nosniff"
    assert res.headers["X-Frame-Options"] == "DENY"
