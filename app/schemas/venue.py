"""
Venue schemas
"""

from typing import List, Optional
from pydantic import Field, model_validator

from app.schemas.base import BaseSchema, IDSchema


class SupportedEvent(IDSchema):
    """Event a venue hosts, with its overlapping-meetups capacity"""
    name: str
    meetups_capacity: int = Field(..., gt=0)


class Venue(IDSchema):
    """Venue snapshot; open_days uses 0=Sunday..6=Saturday"""
    name: str
    open_days: List[int] = Field(..., min_length=1)
    open_at: str = Field(..., pattern=r"^\d{2}:\d{2}$")
    closed_at: str = Field(..., pattern=r"^\d{2}:\d{2}$")
    timezone: str
    supported_events: List[SupportedEvent] = []

    def capacity_for(self, event_id: int) -> Optional[int]:
        for supported in self.supported_events:
            if supported.id == event_id:
                return supported.meetups_capacity
        return None


class VenueFilter(BaseSchema):
    """Filters for listing venues"""
    event_id: Optional[int] = None
    meetup_start_ts: Optional[int] = None
    meetup_end_ts: Optional[int] = None

    @model_validator(mode="after")
    def validate_interval(self):
        if (self.meetup_start_ts is None) != (self.meetup_end_ts is None):
            raise ValueError("meetup_start_ts and meetup_end_ts must be given together")
        return self

    @property
    def has_interval(self) -> bool:
        return self.meetup_start_ts is not None and self.meetup_end_ts is not None
