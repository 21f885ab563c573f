"""
Ticket purchase and status changes.

When an event carries an integer ``ticketsLeft`` the office keeps it in step
with the tickets it issues: a purchase takes seats with a conditional atomic
decrement, cancelling gives them back, and un-cancelling takes them again.
Events without that field are not capacity-checked.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List

from pymongo.errors import PyMongoError

from .analytics import CANCELED, PENDING
from .errors import Conflict, NotFound
from .schemas import TicketPurchase
from .store import EVENTS, TICKETS, USERS, DocumentStore

logger = logging.getLogger(__name__)

SEATS_FIELD = "ticketsLeft"


def _tracks_seats(event: Dict[str, Any]) -> bool:
    seats = event.get(SEATS_FIELD)
    return isinstance(seats, int) and not isinstance(seats, bool)


class TicketOffice:
    def __init__(self, store: DocumentStore):
        self.store = store

    def _take_seats(self, event: Dict[str, Any], quantity: int) -> bool:
        """Reserve ``quantity`` seats; False when the event is not capacity-checked."""
        if not _tracks_seats(event):
            return False
        # Atomic oversell protection: only decrement while ticketsLeft - quantity >= 0
        if not self.store.increment(EVENTS, event["id"], SEATS_FIELD, -quantity, floor=0):
            raise Conflict("Not enough tickets available (sold out / insufficient stock).")
        return True

    def _release_seats(self, event_id: str, quantity: int) -> None:
        if quantity > 0:
            self.store.increment(EVENTS, event_id, SEATS_FIELD, quantity)

    def buy(self, purchase: TicketPurchase) -> str:
        event = self.store.get(EVENTS, purchase.eventId)
        if event is None:
            raise NotFound("Event not found.")
        if self.store.get(USERS, purchase.userId) is None:
            raise NotFound("User not found.")

        reserved = self._take_seats(event, purchase.quantity)

        ticket_id = self.store.new_id()
        doc = {
            "ticketId": ticket_id,
            "eventId": purchase.eventId,
            "userId": purchase.userId,
            "seat": purchase.seat,
            "ticketType": purchase.ticketType,
            "quantity": purchase.quantity,
            "totalPrice": purchase.totalPrice,
            "status": PENDING,
            "barcode": purchase.barcode,
            "qrcode": purchase.qrcode,
        }
        try:
            self.store.set(TICKETS, ticket_id, doc)
        except PyMongoError:
            if reserved:
                # Seats were already taken; give them back before re-raising
                logger.exception("Failed to record ticket; releasing %d seat(s)", purchase.quantity)
                self._release_seats(purchase.eventId, purchase.quantity)
            raise

        logger.info("Ticket %s issued for event %s (qty=%d)", ticket_id, purchase.eventId, purchase.quantity)
        return ticket_id

    def get(self, ticket_id: str) -> Dict[str, Any]:
        ticket = self.store.get(TICKETS, ticket_id)
        if ticket is None:
            raise NotFound("Ticket not found.")
        return ticket

    def for_user(self, user_id: str) -> List[Dict[str, Any]]:
        tickets = self.store.find(TICKETS, ("userId", "==", user_id))
        if not tickets:
            raise NotFound("No tickets found for this user.")
        return tickets

    def set_status(self, ticket_id: str, status: str) -> Dict[str, Any]:
        """Move a ticket to ``status``, keeping the event's seat count in step.

        The status write is conditional on the status that was read, so of two
        concurrent changes only one moves seats. The loser re-reads the ticket:
        if it already carries ``status`` the call is a no-op, otherwise Conflict.
        """
        ticket = self.get(ticket_id)
        previous = ticket.get("status")
        if previous == status:
            return ticket

        quantity = ticket.get("quantity")
        quantity = quantity if isinstance(quantity, int) and not isinstance(quantity, bool) else 0
        event_id = ticket.get("eventId")

        # Un-cancelling must hold the seats before the ticket counts again.
        taken = False
        if event_id and previous == CANCELED:
            event = self.store.get(EVENTS, event_id)
            if event is not None and quantity > 0:
                taken = self._take_seats(event, quantity)

        try:
            moved = self.store.update_where(TICKETS, ticket_id, {"status": previous}, {"status": status})
        except PyMongoError:
            if taken:
                logger.exception("Failed to update ticket %s; releasing %d seat(s)", ticket_id, quantity)
                self._release_seats(event_id, quantity)
            raise

        if not moved:
            if taken:
                self._release_seats(event_id, quantity)
            current = self.get(ticket_id)
            if current.get("status") == status:
                return current
            raise Conflict("Ticket status was changed by another request. Please retry.")

        if event_id and status == CANCELED:
            self._release_seats(event_id, quantity)

        logger.info("Ticket %s: %s -> %s", ticket_id, previous, status)
        return {**ticket, "status": status}

    def cancel(self, ticket_id: str) -> Dict[str, Any]:
        return self.set_status(ticket_id, CANCELED)
