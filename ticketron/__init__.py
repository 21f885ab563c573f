"""
Ticketron: REST backend for an event-ticketing platform.

- Flask JSON API, one blueprint per route family
- MongoDB (PyMongo) as the document store, shared process-wide
- Pydantic request validation, Flask-Mail for outbound email
"""
from __future__ import annotations

import logging
import uuid
from typing import Optional

from flask import Flask, Response, request
from flask_cors import CORS

from .analytics import Analytics
from .config import Settings
from .errors import ok, register_error_handlers
from .favorites import Favorites
from .gateways import EmailGateway, LivestreamGateway
from .routes import (
    init_attendance,
    init_events,
    init_livestreams,
    init_notifications,
    init_organizers,
    init_payments,
    init_tickets,
    init_users,
    init_verification,
)
from .store import DocumentStore
from .ticketing import TicketOffice

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[DocumentStore] = None,
    email: Optional[EmailGateway] = None,
    livestreams: Optional[LivestreamGateway] = None,
) -> Flask:
    settings = settings or Settings.from_env()

    app = Flask(__name__)
    app.json.sort_keys = False
    CORS(app, origins=list(settings.cors_origins))

    if store is None:
        store = DocumentStore.connect(settings)
        store.ensure_indexes()
        logger.info("Connected to MongoDB database %s", settings.mongo_db)

    analytics = Analytics(store)
    favorites = Favorites(store, match=settings.suggestion_match, limit=settings.suggestion_limit)
    office = TicketOffice(store)
    email = email or EmailGateway.init_app(app, settings)
    livestreams = livestreams or LivestreamGateway.from_settings(settings)

    # Attach a request id for debugging/traceability.
    @app.before_request
    def attach_request_id():
        rid = request.headers.get("X-Request-Id") or str(uuid.uuid4())
        request.environ["request_id"] = rid

    @app.after_request
    def add_security_headers(resp: Response):
        resp.headers["X-Content-Type-Options"] = "nosniff"
        resp.headers["X-Frame-Options"] = "DENY"
        resp.headers["Referrer-Policy"] = "no-referrer"
        resp.headers["Cache-Control"] = "no-store"
        resp.headers["X-Request-Id"] = request.environ.get("request_id", "")
        return resp

    @app.get("/api/health")
    def health():
        return ok({"status": "up"})

    app.register_blueprint(init_events(store, favorites))
    app.register_blueprint(init_users(store, favorites))
    app.register_blueprint(init_tickets(office, analytics))
    app.register_blueprint(init_organizers(analytics))
    app.register_blueprint(init_payments(store))
    app.register_blueprint(init_attendance(store))
    app.register_blueprint(init_notifications(store))
    app.register_blueprint(init_verification(email))
    app.register_blueprint(init_livestreams(livestreams))

    register_error_handlers(app)

    app.extensions["ticketron"] = {"settings": settings, "store": store, "favorites": favorites}
    return app


__all__ = ["create_app", "Settings"]
