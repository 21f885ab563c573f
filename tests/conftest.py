from unittest import mock

import mongomock
import pytest

from ticketron import create_app
from ticketron.config import Settings
from ticketron.gateways import EmailGateway, LivestreamGateway
from ticketron.store import EVENTS, PAYMENTS, TICKETS, USERS, DocumentStore


@pytest.fixture
def settings():
    return Settings()


@pytest.fixture
def store():
    return DocumentStore(mongomock.MongoClient()["ticketron_test"])


@pytest.fixture
def email():
    return mock.create_autospec(EmailGateway, instance=True)


@pytest.fixture
def livestreams():
    return mock.create_autospec(LivestreamGateway, instance=True)


@pytest.fixture
def app(settings, store, email, livestreams):
    app = create_app(settings, store=store, email=email, livestreams=livestreams)
    app.config.update(TESTING=True)
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def event_payload():
    def make(**overrides):
        payload = {
            "title": "Jazz Night",
            "date": "2026-11-20",
            "time": "19:00",
            "location": "Accra",
            "price": {"regular": 50, "vip": 120},
            "description": "An evening of live jazz.",
            "agenda": ["Opening act", "Headliner"],
            "images": ["https://img.example.com/jazz.png"],
            "ticketsLeft": 100,
            "category": "music",
            "totalCapacityNeeded": 100,
            "organizer": {"organizerId": "org-1", "name": "Blue Note"},
        }
        payload.update(overrides)
        return payload

    return make


@pytest.fixture
def seed(store):
    """Write documents straight into the store, bypassing the API."""

    class Seed:
        def event(self, event_id, **fields):
            store.set(EVENTS, event_id, {"eventId": event_id, **fields})
            return event_id

        def user(self, user_id, **fields):
            store.set(USERS, user_id, {"userId": user_id, "name": "Ama", "email": "ama@example.com", **fields})
            return user_id

        def ticket(self, ticket_id, event_id, **fields):
            doc = {"ticketId": ticket_id, "eventId": event_id, "status": "pending", **fields}
            store.set(TICKETS, ticket_id, doc)
            return ticket_id

        def payment(self, payment_id, event_id, amount, status="paid", **fields):
            doc = {"paymentId": payment_id, "eventId": event_id, "amount": amount, "status": status, **fields}
            store.set(PAYMENTS, payment_id, doc)
            return payment_id

    return Seed()
