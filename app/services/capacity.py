"""
Venue capacity check for a (venue, event) time window
"""

from typing import Optional

from app.core.exceptions import ExceedVenueCapacityError, InvalidEventError
from app.repositories.base import MeetupRepository, VenueRepository


async def ensure_capacity(
    meetups: MeetupRepository,
    venues: VenueRepository,
    venue_id: int,
    event_id: int,
    start_ts: int,
    end_ts: int,
    exclude_meetup_id: Optional[int] = None
) -> int:
    """
    Reject the interval when the venue already hosts as many overlapping
    open meetups of the event as it allows.

    Returns:
        Number of overlapping meetups found
    """
    capacity = await venues.get_event_capacity(venue_id, event_id)
    if capacity is None:
        raise InvalidEventError()

    existing = await meetups.count_overlapping_venue_event(
        venue_id,
        event_id,
        start_ts,
        end_ts,
        exclude_meetup_id=exclude_meetup_id
    )
    if existing >= capacity:
        raise ExceedVenueCapacityError()
    return existing
