import logging

from flask import Blueprint

from ..errors import NotFound, ok, require_json, store_errors, use_success_envelope
from ..gateways import EmailGateway
from ..schemas import NotificationBatchIn, NotificationIn, VerificationIn, document, parse_body
from ..store import NOTIFICATIONS, DocumentStore, server_timestamp

logger = logging.getLogger(__name__)


def init_notifications(store: DocumentStore) -> Blueprint:
    bp = Blueprint("notifications", __name__, url_prefix="/api/notifications")

    def record(payload: NotificationIn):
        return payload.notification_id, {**document(payload), "createdAt": server_timestamp()}

    @bp.post("")
    def create_notification():
        notification_id, data = record(parse_body(NotificationIn, require_json()))
        with store_errors("Error creating notification"):
            store.set(NOTIFICATIONS, notification_id, data)
        return ok({"message": "Notification created successfully", "id": notification_id}, 201)

    @bp.post("/batch")
    def create_notifications_batch():
        payload = parse_body(NotificationBatchIn, require_json(expect=list))
        batch = store.batch()
        for notification in payload.root:
            batch.set(NOTIFICATIONS, *record(notification))
        with store_errors("Error creating batch notifications"):
            count = batch.commit()
        return ok({"message": "Batch notifications created successfully", "count": count}, 201)

    @bp.get("/<notification_id>")
    def get_notification(notification_id: str):
        with store_errors("Error fetching notification"):
            notification = store.get(NOTIFICATIONS, notification_id)
        if notification is None:
            raise NotFound("Notification not found")
        return ok(notification)

    return bp


def init_verification(email: EmailGateway) -> Blueprint:
    bp = Blueprint("verification", __name__, url_prefix="/api")
    use_success_envelope(bp)

    @bp.post("/verify")
    def send_verification():
        payload = parse_body(VerificationIn, require_json(), message="A valid email and verificationCode are required.")
        email.send_verification(payload.email, payload.verificationCode)
        logger.info("Verification email sent to %s", payload.email)
        return ok({"message": "Email sent successfully", "success": True}, 201)

    return bp
