from flask import Blueprint, request

from ..errors import NotFound, ValidationError, ok, require_json, store_errors
from ..schemas import AttendanceIn, AttendanceUpdate, PaymentIn, PaymentUpdate, document, parse_body
from ..store import ATTENDANCE, PAYMENTS, DocumentStore, server_timestamp


def _filters(*names):
    """``(field, "==", value)`` conditions for the query args that were given."""
    conditions = []
    for name in names:
        value = (request.args.get(name) or "").strip()
        if value:
            conditions.append((name, "==", value))
    return conditions


def init_payments(store: DocumentStore) -> Blueprint:
    bp = Blueprint("payments", __name__)

    @bp.post("/payments")
    def create_payment():
        payload = parse_body(PaymentIn, require_json())
        payment_id = payload.paymentId or store.new_id()
        data = {
            **payload.model_dump(mode="json"),
            "paymentId": payment_id,
            "timestamp": server_timestamp(),
        }
        with store_errors("Error creating payment"):
            store.set(PAYMENTS, payment_id, data)
        return ok({"id": payment_id}, 201)

    @bp.get("/payments")
    def list_payments():
        with store_errors("Error fetching payments"):
            return ok(store.find(PAYMENTS, *_filters("userId", "eventId")))

    @bp.get("/payments/<payment_id>")
    def get_payment(payment_id: str):
        with store_errors("Error fetching payment"):
            payment = store.get(PAYMENTS, payment_id)
        if payment is None:
            raise NotFound("Payment not found")
        return ok(payment)

    @bp.put("/payments/<payment_id>")
    def update_payment(payment_id: str):
        payload = parse_body(PaymentUpdate, require_json())
        with store_errors("Error updating payment"):
            found = store.update(PAYMENTS, payment_id, document(payload))
        if not found:
            raise NotFound("Payment not found")
        return ok({"message": "Payment updated"})

    @bp.delete("/payments/<payment_id>")
    def delete_payment(payment_id: str):
        with store_errors("Error deleting payment"):
            store.delete(PAYMENTS, payment_id)
        return ok({"message": "Payment deleted"})

    return bp


def init_attendance(store: DocumentStore) -> Blueprint:
    bp = Blueprint("attendance", __name__)

    def pair_record():
        conditions = _filters("userId", "eventId")
        if len(conditions) != 2:
            raise ValidationError(
                "userId and eventId are required.",
                details=[{"field": f, "message": "Field required"} for f in ("userId", "eventId") if not request.args.get(f)],
            )
        records = store.find(ATTENDANCE, *conditions, limit=1)
        if not records:
            raise NotFound("Attendance record not found")
        return records[0]

    @bp.post("/attendance")
    def create_attendance():
        payload = parse_body(AttendanceIn, require_json())
        attendance_id = payload.attendanceId or store.new_id()
        data = {
            **payload.model_dump(mode="json"),
            "attendanceId": attendance_id,
            "timestamp": server_timestamp(),
        }
        with store_errors("Error creating attendance"):
            store.set(ATTENDANCE, attendance_id, data)
        return ok({"id": attendance_id}, 201)

    @bp.get("/attendance")
    def list_attendance():
        conditions = _filters("userId", "eventId")
        with store_errors("Error fetching attendance"):
            records = store.find(ATTENDANCE, *conditions)
        if len(conditions) == 2 and not records:
            raise NotFound("Attendance record not found")
        return ok(records)

    @bp.put("/attendance")
    def update_attendance_by_pair():
        payload = parse_body(AttendanceUpdate, require_json())
        with store_errors("Error updating attendance"):
            record = pair_record()
            store.update(ATTENDANCE, record["id"], document(payload))
        return ok({"message": "Attendance updated", "id": record["id"]})

    @bp.get("/attendance/<attendance_id>")
    def get_attendance(attendance_id: str):
        with store_errors("Error fetching attendance"):
            record = store.get(ATTENDANCE, attendance_id)
        if record is None:
            raise NotFound("Attendance record not found")
        return ok(record)

    @bp.put("/attendance/<attendance_id>")
    def update_attendance(attendance_id: str):
        payload = parse_body(AttendanceUpdate, require_json())
        with store_errors("Error updating attendance"):
            found = store.update(ATTENDANCE, attendance_id, document(payload))
        if not found:
            raise NotFound("Attendance record not found")
        return ok({"message": "Attendance updated"})

    @bp.delete("/attendance/<attendance_id>")
    def delete_attendance(attendance_id: str):
        with store_errors("Error deleting attendance"):
            store.delete(ATTENDANCE, attendance_id)
        return ok({"message": "Attendance deleted"})

    return bp
