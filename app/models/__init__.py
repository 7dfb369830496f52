"""
Database models
"""

from app.models.user import User
from app.models.event import Event
from app.models.venue import Venue, VenueEvent
from app.models.meetup import Meetup, MeetupUser, MeetupStatus

__all__ = [
    "User",
    "Event",
    "Venue",
    "VenueEvent",
    "Meetup",
    "MeetupUser",
    "MeetupStatus"
]
