"""
API endpoints module
"""

from . import session, events, venues, meetups, incoming_meetups, health

__all__ = [
    "session",
    "events",
    "venues",
    "meetups",
    "incoming_meetups",
    "health"
]
