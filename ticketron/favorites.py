"""
Per-user liked events and the suggestions derived from them.

A user's favorites live in one document keyed by the user id:
``{"userId": ..., "events": [eventId, ...]}``.
"""
from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import Any, Dict, Hashable, Iterator, List, Optional

from .errors import NotFound
from .store import EVENTS, FAVORITES, DocumentStore

logger = logging.getLogger(__name__)


class KeyedLock:
    """One mutex per key, dropped again once nobody holds or waits on it."""

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: Dict[Hashable, list] = {}

    @contextmanager
    def hold(self, key: Hashable) -> Iterator[None]:
        with self._guard:
            entry = self._locks.setdefault(key, [threading.Lock(), 0])
            entry[1] += 1
        try:
            with entry[0]:
                yield
        finally:
            with self._guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._locks[key]

    def __len__(self) -> int:
        return len(self._locks)


class Favorites:
    def __init__(self, store: DocumentStore, match: str = "all", limit: int = 10):
        self.store = store
        self.match = match
        self.limit = limit
        self._locks = KeyedLock()

    def liked_ids(self, user_id: str) -> Optional[List[str]]:
        """The user's liked event ids, or None when they have no favorites document."""
        doc = self.store.get(FAVORITES, user_id)
        if doc is None:
            return None
        return list(doc.get("events") or [])

    def _require_liked_ids(self, user_id: str) -> List[str]:
        ids = self.liked_ids(user_id)
        if ids is None:
            raise NotFound("No favorites found for this user")
        return ids

    def toggle(self, user_id: str, event_id: str) -> bool:
        """Flip whether ``user_id`` likes ``event_id``; returns the new state.

        Toggles by the same user are serialized with an in-process lock. That
        lock is not shared between worker processes: with several workers
        (e.g. ``gunicorn -w 4``) two toggles for one user can still both read
        the old state and make the same change, so one toggle is lost. Run a
        single worker process where that matters.
        """
        # The decision and the write must not interleave with another toggle by the same user.
        with self._locks.hold(user_id):
            doc = self.store.get(FAVORITES, user_id)
            if doc is None:
                self.store.set(FAVORITES, user_id, {"userId": user_id, "events": [event_id]})
                liked = True
            elif event_id in (doc.get("events") or []):
                self.store.array_remove(FAVORITES, user_id, "events", event_id)
                liked = False
            else:
                self.store.array_union(FAVORITES, user_id, "events", event_id)
                liked = True
        logger.info("User %s %s event %s", user_id, "liked" if liked else "unliked", event_id)
        return liked

    def favorite_events(self, user_id: str) -> List[Dict[str, Any]]:
        ids = self._require_liked_ids(user_id)
        if not ids:
            return []
        return self.store.find(EVENTS, ("id", "in", ids))

    def mark_liked(self, events: List[Dict[str, Any]], user_id: str) -> List[Dict[str, Any]]:
        liked = set(self.liked_ids(user_id) or [])
        return [{**e, "isLiked": e["id"] in liked} for e in events]

    def suggestions(self, user_id: str) -> List[Dict[str, Any]]:
        ids = self._require_liked_ids(user_id)
        if not ids:
            return []

        categories, locations = [], []
        for event in self.store.find(EVENTS, ("id", "in", ids)):
            category, location = event.get("category"), event.get("location")
            if category and category not in categories:
                categories.append(category)
            if location and location not in locations:
                locations.append(location)

        if not categories and not locations:
            return []

        conditions = []
        if categories:
            conditions.append(("category", "in", categories))
        if locations:
            conditions.append(("location", "in", locations))

        suggested = self.store.find(EVENTS, *conditions, limit=self.limit, match=self.match)
        liked = set(ids)
        return [{**e, "isLiked": e["id"] in liked} for e in suggested]
