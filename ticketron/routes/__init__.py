"""Blueprints, one per route family; each factory receives its collaborators."""
from .events import init_events
from .livestreams import init_livestreams
from .notifications import init_notifications, init_verification
from .payments import init_attendance, init_payments
from .tickets import init_organizers, init_tickets
from .users import init_users

__all__ = [
    "init_attendance",
    "init_events",
    "init_livestreams",
    "init_notifications",
    "init_organizers",
    "init_payments",
    "init_tickets",
    "init_users",
    "init_verification",
]
