"""
Revenue and KPI figures, recomputed from the ticket/payment documents on
every call. Nothing here is persisted.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .errors import NotFound
from .store import EVENTS, PAYMENTS, TICKETS, DocumentStore

logger = logging.getLogger(__name__)

CONFIRMED = "confirmed"
PENDING = "pending"
CANCELED = "canceled"
PAID = "paid"


def _number(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    return value


def total(docs: Iterable[Dict[str, Any]], field: str) -> float:
    """Sum ``field`` across ``docs``; missing or non-numeric values count as 0."""
    return sum(_number(d.get(field)) for d in docs)


def count_status(tickets: Iterable[Dict[str, Any]], status: str) -> int:
    return sum(1 for t in tickets if t.get("status") == status)


def best_ticket_type(tickets: Iterable[Dict[str, Any]]) -> Tuple[Optional[str], int]:
    """Ticket type with the highest cumulative quantity.

    Types are tallied in the order they are first seen; on a tie the first
    one seen wins.
    """
    counts: Dict[Any, float] = {}
    for t in tickets:
        kind = t.get("ticketType")
        counts[kind] = counts.get(kind, 0) + _number(t.get("quantity"))

    # Tickets without a type are tallied under None, so None can't mark "no pick yet".
    best, best_qty, picked = None, 0, False
    for kind, qty in counts.items():
        if not picked or qty > best_qty:
            best, best_qty, picked = kind, qty, True
    return best, best_qty


class Analytics:
    def __init__(self, store: DocumentStore):
        self.store = store

    def _event_tickets(self, event_id: str) -> List[Dict[str, Any]]:
        return self.store.find(TICKETS, ("eventId", "==", event_id))

    def _organizer_events(self, organizer_id: str) -> List[Dict[str, Any]]:
        return self.store.find(EVENTS, ("organizer.organizerId", "==", organizer_id))

    def _require_organizer_event_ids(self, organizer_id: str) -> List[str]:
        events = self._organizer_events(organizer_id)
        if not events:
            raise NotFound("No events found for this organizer.")
        return [e["id"] for e in events]

    # -------------------------
    # Per event
    # -------------------------
    def event_revenue(self, event_id: str) -> Dict[str, Any]:
        tickets = self._event_tickets(event_id)
        if not tickets:
            raise NotFound("No tickets found for this event.")
        return {"totalRevenue": total(tickets, "totalPrice")}

    def event_statistics(self, event_id: str) -> Dict[str, Any]:
        tickets = self._event_tickets(event_id)
        if not tickets:
            return {
                "totalTickets": 0,
                "soldTickets": 0,
                "canceledTickets": 0,
                "pendingTickets": 0,
                "totalRevenue": 0,
            }

        # Revenue here is what was actually paid, not the ticket face value.
        payments = self.store.find(PAYMENTS, ("eventId", "==", event_id), ("status", "==", PAID))
        return {
            "totalTickets": len(tickets),
            "soldTickets": count_status(tickets, CONFIRMED),
            "canceledTickets": count_status(tickets, CANCELED),
            "pendingTickets": count_status(tickets, PENDING),
            "totalRevenue": total(payments, "amount"),
        }

    # -------------------------
    # Per organizer
    # -------------------------
    def organizer_revenue(self, organizer_id: str) -> Dict[str, Any]:
        ids = self._require_organizer_event_ids(organizer_id)
        tickets = self.store.find(TICKETS, ("eventId", "in", ids))
        return {"totalRevenue": total(tickets, "totalPrice")}

    def organizer_sold_tickets(self, organizer_id: str) -> Dict[str, Any]:
        ids = self._require_organizer_event_ids(organizer_id)
        sold = self.store.find(TICKETS, ("eventId", "in", ids), ("status", "==", CONFIRMED))
        return {"totalSoldTickets": len(sold)}

    def organizer_event_count(self, organizer_id: str) -> Dict[str, Any]:
        return {"totalEvents": len(self._organizer_events(organizer_id))}

    def organizer_best_ticket_type(self, organizer_id: str) -> Dict[str, Any]:
        ids = self._require_organizer_event_ids(organizer_id)
        sold = self.store.find(TICKETS, ("eventId", "in", ids), ("status", "==", CONFIRMED))
        if not sold:
            raise NotFound("No sold tickets found for this organizer.")
        kind, qty = best_ticket_type(sold)
        return {"bestTicketType": kind, "quantity": qty}

    def organizer_kpis(self, organizer_id: str) -> Dict[str, Any]:
        events = self._organizer_events(organizer_id)
        if not events:
            raise NotFound("No events found for this organizer.")

        tickets = self.store.find(TICKETS, ("eventId", "in", [e["id"] for e in events]))
        kind, qty = best_ticket_type(tickets)
        logger.debug("KPIs for organizer %s: %d events, %d tickets", organizer_id, len(events), len(tickets))
        return {
            "totalRevenue": total(tickets, "totalPrice"),
            "totalSoldTickets": len(tickets),
            "totalEvents": len(events),
            "bestTicketType": kind,
            "bestTicketTypeQuantity": qty,
        }
