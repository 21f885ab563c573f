from flask import Blueprint, request

from ..errors import NotFound, ok, require_json, store_errors
from ..favorites import Favorites
from ..schemas import EventBatchIn, EventIn, ToggleFavoriteIn, document, parse_body
from ..store import EVENTS, DocumentStore, server_timestamp


def init_events(store: DocumentStore, favorites: Favorites) -> Blueprint:
    bp = Blueprint("events", __name__)

    def new_event(payload: EventIn):
        event_id = store.new_id()
        return event_id, {**document(payload), "createdAt": server_timestamp(), "eventId": event_id}

    def with_likes(events):
        user_id = (request.args.get("userId") or "").strip()
        return favorites.mark_liked(events, user_id) if user_id else events

    @bp.post("/events")
    def create_event():
        payload = parse_body(EventIn, require_json())
        event_id, data = new_event(payload)
        with store_errors("Error creating event"):
            store.set(EVENTS, event_id, data)
        return ok({"id": event_id}, 201)

    @bp.post("/events/batch")
    def create_events_batch():
        payload = parse_body(EventBatchIn, require_json())
        batch = store.batch()
        ids = []
        for event in payload.events:
            event_id, data = new_event(event)
            batch.set(EVENTS, event_id, data)
            ids.append(event_id)
        with store_errors("Error creating batch events"):
            batch.commit()
        return ok({"message": "Batch events created", "ids": ids}, 201)

    @bp.get("/events")
    def list_events():
        with store_errors("Error fetching events"):
            return ok(with_likes(store.find(EVENTS)))

    @bp.get("/events/<event_id>")
    def get_event(event_id: str):
        with store_errors("Error fetching event"):
            event = store.get(EVENTS, event_id)
        if event is None:
            raise NotFound("Event not found")
        return ok(event)

    @bp.get("/events/organizer/<organizer_id>")
    def list_organizer_events(organizer_id: str):
        with store_errors("Error fetching events by organizer"):
            events = store.find(EVENTS, ("organizer.organizerId", "==", organizer_id))
            return ok(with_likes(events))

    @bp.put("/events/<event_id>")
    def update_event(event_id: str):
        payload = parse_body(EventIn, require_json())
        with store_errors("Error updating event"):
            found = store.update(EVENTS, event_id, document(payload))
        if not found:
            raise NotFound("Event not found")
        return ok({"message": "Event updated"})

    @bp.delete("/events/<event_id>")
    def delete_event(event_id: str):
        with store_errors("Error deleting event"):
            store.delete(EVENTS, event_id)
        return ok({"message": "Event deleted"})

    @bp.delete("/events")
    def delete_all_events():
        with store_errors("Error deleting all events"):
            events = store.find(EVENTS)
            if not events:
                return ok({"message": "No events found"}, 404)
            batch = store.batch()
            for e in events:
                batch.delete(EVENTS, e["id"])
            batch.commit()
        return ok({"message": "All events deleted"})

    @bp.post("/events/<event_id>/toggleFavorite")
    def toggle_favorite(event_id: str):
        payload = parse_body(ToggleFavoriteIn, require_json(), message="User ID is required")
        with store_errors("Error toggling favorite"):
            liked = favorites.toggle(payload.userId, event_id)
        return ok({"message": "Event favorited" if liked else "Event unfavorited", "isLiked": liked})

    return bp
