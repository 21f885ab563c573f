from flask import Blueprint

from ..analytics import Analytics
from ..errors import require_json, store_errors, success, use_success_envelope
from ..schemas import TicketPurchase, TicketStatusIn, parse_body
from ..ticketing import TicketOffice


def init_tickets(office: TicketOffice, analytics: Analytics) -> Blueprint:
    bp = Blueprint("tickets", __name__, url_prefix="/api")
    use_success_envelope(bp)

    @bp.get("/events/<event_id>/revenue")
    def event_revenue(event_id: str):
        with store_errors("An error occurred while retrieving event revenue."):
            return success(analytics.event_revenue(event_id))

    @bp.get("/events/<event_id>/statistics")
    def event_statistics(event_id: str):
        with store_errors("An error occurred while retrieving event statistics."):
            return success(analytics.event_statistics(event_id))

    @bp.put("/tickets/<ticket_id>/status")
    def update_ticket_status(ticket_id: str):
        payload = parse_body(TicketStatusIn, require_json(), message="Invalid status.")
        with store_errors("An error occurred while updating ticket status."):
            office.set_status(ticket_id, payload.status)
        return success({"message": "Ticket status updated successfully."})

    @bp.post("/tickets/buy")
    def buy_ticket():
        purchase = parse_body(TicketPurchase, require_json(), message="Invalid ticket purchase.")
        with store_errors("An error occurred while buying the ticket."):
            ticket_id = office.buy(purchase)
        return success({"message": "Ticket purchased successfully.", "ticketId": ticket_id}, 201)

    @bp.get("/tickets/<ticket_id>")
    def get_ticket(ticket_id: str):
        with store_errors("An error occurred while retrieving ticket details."):
            return success(office.get(ticket_id))

    @bp.delete("/tickets/<ticket_id>")
    def cancel_ticket(ticket_id: str):
        with store_errors("An error occurred while canceling the ticket."):
            office.cancel(ticket_id)
        return success({"message": "Ticket canceled successfully."})

    @bp.get("/users/<user_id>/tickets")
    def list_user_tickets(user_id: str):
        with store_errors("An error occurred while retrieving user tickets."):
            return success(office.for_user(user_id))

    return bp


def init_organizers(analytics: Analytics) -> Blueprint:
    bp = Blueprint("organizers", __name__, url_prefix="/api/organizers")
    use_success_envelope(bp)

    @bp.get("/<organizer_id>/revenue")
    def organizer_revenue(organizer_id: str):
        with store_errors("An error occurred while retrieving overall revenue for the organizer."):
            return success(analytics.organizer_revenue(organizer_id))

    @bp.get("/<organizer_id>/sold-tickets")
    def organizer_sold_tickets(organizer_id: str):
        with store_errors("An error occurred while retrieving overall sold tickets for the organizer."):
            return success(analytics.organizer_sold_tickets(organizer_id))

    @bp.get("/<organizer_id>/events")
    def organizer_events(organizer_id: str):
        with store_errors("An error occurred while retrieving overall events for the organizer."):
            return success(analytics.organizer_event_count(organizer_id))

    @bp.get("/<organizer_id>/best-ticket-type")
    def organizer_best_ticket_type(organizer_id: str):
        with store_errors("An error occurred while retrieving the best ticket type for the organizer."):
            return success(analytics.organizer_best_ticket_type(organizer_id))

    @bp.get("/<organizer_id>/kpis")
    def organizer_kpis(organizer_id: str):
        with store_errors("An error occurred while retrieving KPIs for the organizer."):
            return success(analytics.organizer_kpis(organizer_id))

    return bp
