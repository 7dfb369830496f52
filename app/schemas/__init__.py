"""
Pydantic schemas for request and response validation
"""

from app.schemas.event import Event
from app.schemas.venue import Venue, SupportedEvent, VenueFilter
from app.schemas.user import User, SessionCreate, SessionResponse
from app.schemas.meetup import (
    Meetup,
    MeetupRecord,
    MeetupSummary,
    CancelMeetupResponse,
    CreateMeetupRequest,
    UpdateMeetupRequest,
    GetMeetupFilter,
    GetIncomingMeetupFilter,
    JoinedPerson
)
from app.schemas.response import (
    SuccessResponse,
    ErrorResponse
)

__all__ = [
    "Event",
    "Venue",
    "SupportedEvent",
    "VenueFilter",
    "User",
    "SessionCreate",
    "SessionResponse",
    "Meetup",
    "MeetupRecord",
    "MeetupSummary",
    "CancelMeetupResponse",
    "CreateMeetupRequest",
    "UpdateMeetupRequest",
    "GetMeetupFilter",
    "GetIncomingMeetupFilter",
    "JoinedPerson",
    "SuccessResponse",
    "ErrorResponse"
]
