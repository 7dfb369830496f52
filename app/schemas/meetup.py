"""
Meetup schemas
"""

from typing import List, Optional
from pydantic import ConfigDict, Field

from app.schemas.base import BaseSchema, IDSchema
from app.models.meetup import MeetupStatus


INCOMING_STATUSES = ("open", "cancelled", "all")


class MeetupVenue(IDSchema):
    name: str = ""


class MeetupEvent(IDSchema):
    name: str = ""


class MeetupOrganizer(IDSchema):
    username: str = ""
    email: str = ""


class JoinedPerson(IDSchema):
    """A member of a meetup"""
    username: str
    email: str
    joined_at: int


class MeetupRecord(BaseSchema):
    """Flat meetup row as persisted by the repositories"""
    id: Optional[int] = None
    name: str
    venue_id: int
    event_id: int
    start_ts: int
    end_ts: int
    max_persons: int
    organizer_id: int
    status: MeetupStatus = MeetupStatus.OPEN
    cancelled_reason: Optional[str] = None
    cancelled_at: Optional[int] = None
    created_at: int = 0
    updated_at: int = 0


class Meetup(BaseSchema):
    """
    Meetup snapshot with venue, event, organizer and members resolved.

    `joined_persons`, `cancelled_reason` and `cancelled_at` are None when the
    viewer is not allowed to see them and are dropped from the JSON output.
    """
    id: Optional[int] = None
    name: str
    venue: MeetupVenue
    event: MeetupEvent
    start_ts: int
    end_ts: int
    max_persons: int
    organizer: MeetupOrganizer
    joined_persons: Optional[List[JoinedPerson]] = None
    joined_persons_count: int = 0
    is_joined: bool = False
    status: MeetupStatus = MeetupStatus.OPEN
    cancelled_reason: Optional[str] = None
    cancelled_at: Optional[int] = None
    created_at: int = 0
    updated_at: int = 0

    @property
    def is_cancelled(self) -> bool:
        return self.status == MeetupStatus.CANCELLED

    def to_record(self) -> MeetupRecord:
        return MeetupRecord(
            id=self.id,
            name=self.name,
            venue_id=self.venue.id,
            event_id=self.event.id,
            start_ts=self.start_ts,
            end_ts=self.end_ts,
            max_persons=self.max_persons,
            organizer_id=self.organizer.id,
            status=self.status,
            cancelled_reason=self.cancelled_reason,
            cancelled_at=self.cancelled_at,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


class MeetupSummary(BaseSchema):
    """Row of the open meetups listing"""
    id: int
    name: str
    venue: MeetupVenue
    event: MeetupEvent
    start_ts: int
    end_ts: int
    max_persons: int
    organizer: MeetupOrganizer
    joined_persons_count: int
    status: MeetupStatus


class CancelMeetupResponse(BaseSchema):
    """Cancelled meetup; always carries the reason and time"""
    id: int
    name: str
    venue: MeetupVenue
    event: MeetupEvent
    start_ts: int
    end_ts: int
    max_persons: int
    organizer: MeetupOrganizer
    status: MeetupStatus
    cancelled_reason: str
    cancelled_at: int


class CreateMeetupRequest(BaseSchema):
    """Meetup creation payload; the organizer comes from the access token"""
    name: str = Field(..., min_length=1, max_length=255)
    venue_id: int = Field(..., gt=0)
    event_id: int = Field(..., gt=0)
    start_ts: int = Field(..., gt=0)
    end_ts: int = Field(..., gt=0)
    max_persons: int = Field(..., gt=0)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "name": "Saturday Futsal",
                "venue_id": 1,
                "event_id": 1,
                "start_ts": 1704528000,
                "end_ts": 1704535200,
                "max_persons": 10
            }
        }
    )


class UpdateMeetupRequest(BaseSchema):
    """
    Meetup update payload. Venue and event are fixed at creation and any
    attempt to send them is ignored.
    """
    name: str = Field(..., min_length=1, max_length=255)
    start_ts: int = Field(..., gt=0)
    end_ts: int = Field(..., gt=0)
    max_persons: int = Field(..., gt=0)


class GetMeetupFilter(BaseSchema):
    event_id: Optional[int] = None
    limit: Optional[int] = Field(None, ge=1)


class GetIncomingMeetupFilter(BaseSchema):
    """
    Incoming meetups of a user. `event_ids` and `venue_ids` are
    comma-separated id lists.
    """
    user_id: int
    status: str = "all"
    event_ids: Optional[str] = None
    venue_ids: Optional[str] = None
