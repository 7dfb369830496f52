"""
Storage ports and their SQL and in-memory adapters
"""

from app.repositories.base import (
    MeetupRepository,
    VenueRepository,
    EventRepository,
    UserRepository,
    MembershipRepository
)

__all__ = [
    "MeetupRepository",
    "VenueRepository",
    "EventRepository",
    "UserRepository",
    "MembershipRepository"
]
