from flask import Blueprint

from ..errors import NotFound, ok, require_json, store_errors
from ..favorites import Favorites
from ..schemas import UserBatchIn, UserIn, UserUpdate, document, parse_body
from ..store import USERS, DocumentStore, server_timestamp


def init_users(store: DocumentStore, favorites: Favorites) -> Blueprint:
    bp = Blueprint("users", __name__)

    def new_user(payload: UserIn):
        user_id = payload.userId or store.new_id()
        return user_id, {**document(payload), "userId": user_id, "createdAt": server_timestamp()}

    @bp.post("/users")
    def create_user():
        payload = parse_body(UserIn, require_json())
        user_id, data = new_user(payload)
        with store_errors("Error creating user"):
            store.set(USERS, user_id, data)
        return ok({"id": user_id}, 201)

    @bp.post("/users/batch")
    def create_users_batch():
        payload = parse_body(UserBatchIn, require_json())
        batch = store.batch()
        ids = []
        for user in payload.users:
            user_id, data = new_user(user)
            batch.set(USERS, user_id, data)
            ids.append(user_id)
        with store_errors("Error creating batch users"):
            batch.commit()
        return ok({"message": "Batch users created", "ids": ids}, 201)

    @bp.get("/users")
    def list_users():
        with store_errors("Error fetching users"):
            return ok(store.find(USERS))

    @bp.get("/users/<user_id>")
    def get_user(user_id: str):
        with store_errors("Error fetching user"):
            user = store.get(USERS, user_id)
        if user is None:
            raise NotFound("User not found")
        return ok(user)

    @bp.put("/users/<user_id>")
    def update_user(user_id: str):
        payload = parse_body(UserUpdate, require_json())
        with store_errors("Error updating user"):
            found = store.update(USERS, user_id, document(payload))
        if not found:
            raise NotFound("User not found")
        return ok({"message": "User updated"})

    @bp.delete("/users/<user_id>")
    def delete_user(user_id: str):
        with store_errors("Error deleting user"):
            store.delete(USERS, user_id)
        return ok({"message": "User deleted"})

    @bp.get("/users/<user_id>/favorites")
    def list_favorites(user_id: str):
        with store_errors("Error fetching favorited events"):
            return ok(favorites.favorite_events(user_id))

    @bp.get("/users/<user_id>/suggestions")
    def list_suggestions(user_id: str):
        with store_errors("Error fetching suggestions"):
            return ok(favorites.suggestions(user_id))

    return bp
