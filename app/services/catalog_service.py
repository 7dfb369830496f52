"""
Event and venue catalog reads
"""

from typing import List

from app.core.exceptions import VenueNotFoundError
from app.repositories.base import EventRepository, VenueRepository
from app.schemas.event import Event
from app.schemas.venue import Venue, VenueFilter
from app.services.opening_hours import is_within_opening_hours


class EventService:
    def __init__(self, events: EventRepository):
        self.events = events

    async def get_events(self) -> List[Event]:
        return await self.events.list()


class VenueService:
    def __init__(self, venues: VenueRepository):
        self.venues = venues

    async def get_venues(self, filter: VenueFilter) -> List[Venue]:
        """
        Venues, optionally only those hosting `event_id` and open for the
        whole of [meetup_start_ts, meetup_end_ts)
        """
        venues = await self.venues.list(event_id=filter.event_id)
        if filter.has_interval:
            venues = [
                venue for venue in venues
                if is_within_opening_hours(venue, filter.meetup_start_ts, filter.meetup_end_ts)
            ]
        return venues

    async def get_venue(self, venue_id: int) -> Venue:
        venue = await self.venues.get(venue_id)
        if venue is None:
            raise VenueNotFoundError(venue_id)
        return venue
