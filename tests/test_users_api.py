from ticketron.store import USERS


def test_create_user_with_supplied_id(client, store):
    res = client.post("/users", json={"userId": "u1", "name": "Ama", "email": "ama@example.com"})
    assert res.status_code == 201
    assert res.get_json() == {"id": "u1"}
    doc = store.get(USERS, "u1")
    assert doc["name"] == "Ama"
    assert doc["userId"] == "u1"
    assert "createdAt" in doc


def test_create_user_generates_id(client, store):
    res = client.post("/users", json={"name": "Kofi", "email": "kofi@example.com", "avatarUrl": "https://a.b/k.png"})
    user_id = res.get_json()["id"]
    assert store.get(USERS, user_id)["userId"] == user_id


def test_create_user_rejects_bad_email(client, store):
    res = client.post("/users", json={"name": "Ama", "email": "not-an-email"})
    assert res.status_code == 400
    assert [e["field"] for e in res.get_json()["errors"]] == ["email"]
    assert store.find(USERS) == []


def test_batch_users(client, store):
    res = client.post(
        "/users/batch",
        json={"users": [{"userId": "u1", "name": "Ama", "email": "ama@example.com"}, {"name": "Kofi", "email": "k@example.com"}]},
    )
    assert res.status_code == 201
    ids = res.get_json()["ids"]
    assert ids[0] == "u1"
    assert len(store.find(USERS)) == 2


def test_get_update_delete_user(client, seed, store):
    seed.user("u1")
    assert client.get("/users/u1").get_json()["name"] == "Ama"
    assert [u["id"] for u in client.get("/users").get_json()] == ["u1"]

    res = client.put("/users/u1", json={"name": "Ama Mensah", "city": "Accra"})
    assert res.get_json() == {"message": "User updated"}
    doc = store.get(USERS, "u1")
    assert doc["name"] == "Ama Mensah"
    assert doc["city"] == "Accra"
    assert doc["email"] == "ama@example.com"

    assert client.delete("/users/u1").get_json() == {"message": "User deleted"}
    assert client.get("/users/u1").status_code == 404


def test_update_user_needs_a_field(client, seed):
    seed.user("u1")
    assert client.put("/users/u1", json={}).status_code == 400


def test_update_missing_user(client):
    res = client.put("/users/ghost", json={"name": "x"})
    assert res.status_code == 404
    assert res.get_json()["error"] == "User not found"


def test_user_favorites(client, seed):
    seed.event("e1", title="A")
    seed.event("e2", title="B")

    missing = client.get("/users/u1/favorites")
    assert missing.status_code == 404
    assert missing.get_json()["error"] == "No favorites found for this user"

    client.post("/events/e2/toggleFavorite", json={"userId": "u1"})
    assert [e["id"] for e in client.get("/users/u1/favorites").get_json()] == ["e2"]

    client.post("/events/e2/toggleFavorite", json={"userId": "u1"})
    assert client.get("/users/u1/favorites").get_json() == []


def test_user_suggestions(client, seed):
    seed.event("liked", category="music", location="Accra")
    seed.event("match", category="music", location="Accra")
    seed.event("other-city", category="music", location="Lagos")

    assert client.get("/users/u1/suggestions").status_code == 404

    client.post("/events/liked/toggleFavorite", json={"userId": "u1"})
    body = client.get("/users/u1/suggestions").get_json()
    assert {e["id"]: e["isLiked"] for e in body} == {"liked": True, "match": False}
