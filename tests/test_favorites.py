import threading

import pytest

from ticketron.errors import NotFound
from ticketron.favorites import Favorites, KeyedLock
from ticketron.store import FAVORITES


@pytest.fixture
def favorites(store):
    return Favorites(store)


def test_toggle_alternates(favorites, store):
    assert favorites.toggle("U", "E1") is True
    assert favorites.liked_ids("U") == ["E1"]
    assert favorites.toggle("U", "E1") is False
    assert favorites.liked_ids("U") == []
    assert favorites.toggle("U", "E1") is True
    assert favorites.liked_ids("U") == ["E1"]
    assert store.get(FAVORITES, "U")["userId"] == "U"


def test_toggle_keeps_other_events(favorites):
    favorites.toggle("U", "E1")
    favorites.toggle("U", "E2")
    favorites.toggle("U", "E1")
    assert favorites.liked_ids("U") == ["E2"]


def test_toggle_removes_duplicated_entries(favorites, store):
    store.set(FAVORITES, "U", {"userId": "U", "events": ["E1", "E2", "E1"]})
    assert favorites.toggle("U", "E1") is False
    assert favorites.liked_ids("U") == ["E2"]


def test_concurrent_toggles_by_one_user_stay_consistent(favorites):
    # An even number of toggles must leave the event unliked.
    threads = [threading.Thread(target=favorites.toggle, args=("U", "E1")) for _ in range(20)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert favorites.liked_ids("U") == []


def test_keyed_lock_releases_entries():
    locks = KeyedLock()
    with locks.hold("a"):
        with locks.hold("b"):
            assert len(locks) == 2
    assert len(locks) == 0


def test_favorite_events(favorites, seed):
    seed.event("E1", category="music")
    seed.event("E2", category="tech")
    favorites.toggle("U", "E2")
    assert [e["id"] for e in favorites.favorite_events("U")] == ["E2"]


def test_favorite_events_requires_a_favorites_document(favorites):
    with pytest.raises(NotFound):
        favorites.favorite_events("ghost")


def test_favorite_events_empty_set(favorites):
    favorites.toggle("U", "E1")
    favorites.toggle("U", "E1")
    assert favorites.favorite_events("U") == []


def test_mark_liked(favorites):
    favorites.toggle("U", "E2")
    events = [{"id": "E1"}, {"id": "E2"}]
    assert favorites.mark_liked(events, "U") == [{"id": "E1", "isLiked": False}, {"id": "E2", "isLiked": True}]
    assert favorites.mark_liked(events, "nobody") == [{"id": "E1", "isLiked": False}, {"id": "E2", "isLiked": False}]


@pytest.fixture
def catalog(seed):
    seed.event("liked-1", category="music", location="Accra")
    seed.event("liked-2", category="tech", location="Lagos")
    seed.event("s-music-accra", category="music", location="Accra")
    seed.event("s-tech-accra", category="tech", location="Accra")
    seed.event("s-music-nairobi", category="music", location="Nairobi")
    seed.event("s-art-accra", category="art", location="Accra")


def test_suggestions_match_category_and_location(favorites, catalog):
    favorites.toggle("U", "liked-1")
    favorites.toggle("U", "liked-2")

    suggested = {e["id"]: e["isLiked"] for e in favorites.suggestions("U")}
    assert suggested == {
        "liked-1": True,
        "liked-2": True,
        "s-music-accra": False,
        "s-tech-accra": False,
    }


def test_suggestions_any_mode_matches_category_or_location(store, catalog):
    favorites = Favorites(store, match="any")
    favorites.toggle("U", "liked-1")

    suggested = {e["id"] for e in favorites.suggestions("U")}
    assert suggested == {"liked-1", "s-music-accra", "s-tech-accra", "s-music-nairobi", "s-art-accra"}


def test_suggestions_are_capped(store, seed):
    seed.event("liked", category="music", location="Accra")
    for i in range(15):
        seed.event(f"e{i}", category="music", location="Accra")
    favorites = Favorites(store, limit=10)
    favorites.toggle("U", "liked")
    assert len(favorites.suggestions("U")) == 10


def test_suggestions_use_only_populated_fields(favorites, seed):
    seed.event("liked", category="music")
    seed.event("other-music", category="music", location="Lagos")
    seed.event("other-tech", category="tech", location="Lagos")
    favorites.toggle("U", "liked")
    assert {e["id"] for e in favorites.suggestions("U")} == {"liked", "other-music"}


def test_suggestions_empty_when_liked_events_lack_category_and_location(favorites, seed):
    seed.event("bare", title="No tags")
    seed.event("other", category="music", location="Accra")
    favorites.toggle("U", "bare")
    assert favorites.suggestions("U") == []


def test_suggestions_empty_set_and_missing_document(favorites):
    with pytest.raises(NotFound):
        favorites.suggestions("ghost")
    favorites.toggle("U", "E1")
    favorites.toggle("U", "E1")
    assert favorites.suggestions("U") == []
