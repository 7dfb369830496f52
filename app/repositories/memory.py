"""In-memory repositories for testing and local development.

All five repositories share one `InMemoryStore`. Reads return deep copies so
callers never mutate stored state. Data is lost when the process stops.
"""

import asyncio
from contextlib import asynccontextmanager
from copy import deepcopy
from typing import Dict, List, Optional, Tuple

from app.models.meetup import MeetupStatus
from app.repositories.base import intervals_overlap, parse_id_list
from app.schemas.event import Event
from app.schemas.meetup import (
    GetIncomingMeetupFilter,
    GetMeetupFilter,
    JoinedPerson,
    Meetup,
    MeetupEvent,
    MeetupOrganizer,
    MeetupRecord,
    MeetupVenue,
)
from app.schemas.user import User
from app.schemas.venue import Venue


class InMemoryStore:
    """Tables kept as plain dicts, keyed like their relational counterparts."""

    def __init__(self) -> None:
        self.events: Dict[int, Event] = {}
        self.venues: Dict[int, Venue] = {}
        self.users: Dict[int, User] = {}
        self.meetups: Dict[int, MeetupRecord] = {}
        # (meetup_id, user_id) -> joined_at
        self.memberships: Dict[Tuple[int, int], int] = {}
        self._next_meetup_id = 1
        self._locks: Dict[Tuple[int, int], asyncio.Lock] = {}

    def add_event(self, event: Event) -> None:
        self.events[event.id] = deepcopy(event)

    def add_venue(self, venue: Venue) -> None:
        self.venues[venue.id] = deepcopy(venue)

    def add_user(self, user: User) -> None:
        self.users[user.id] = deepcopy(user)

    def next_meetup_id(self) -> int:
        meetup_id = self._next_meetup_id
        self._next_meetup_id += 1
        return meetup_id

    def lock_for(self, venue_id: int, event_id: int) -> asyncio.Lock:
        key = (venue_id, event_id)
        if key not in self._locks:
            self._locks[key] = asyncio.Lock()
        return self._locks[key]

    def members_of(self, meetup_id: int) -> List[JoinedPerson]:
        persons = []
        for (member_meetup_id, user_id), joined_at in self.memberships.items():
            if member_meetup_id != meetup_id:
                continue
            user = self.users.get(user_id)
            persons.append(
                JoinedPerson(
                    id=user_id,
                    username=user.username if user else "",
                    email=user.email if user else "",
                    joined_at=joined_at,
                )
            )
        persons.sort(key=lambda p: (p.joined_at, p.id))
        return persons

    def member_count(self, meetup_id: int) -> int:
        return sum(1 for member_meetup_id, _ in self.memberships if member_meetup_id == meetup_id)

    def to_meetup(self, record: MeetupRecord, viewer_id: Optional[int] = None) -> Meetup:
        """Resolve names and membership counters for a stored row."""
        venue = self.venues.get(record.venue_id)
        event = self.events.get(record.event_id)
        organizer = self.users.get(record.organizer_id)
        return Meetup(
            id=record.id,
            name=record.name,
            venue=MeetupVenue(id=record.venue_id, name=venue.name if venue else ""),
            event=MeetupEvent(id=record.event_id, name=event.name if event else ""),
            start_ts=record.start_ts,
            end_ts=record.end_ts,
            max_persons=record.max_persons,
            organizer=MeetupOrganizer(
                id=record.organizer_id,
                username=organizer.username if organizer else "",
                email=organizer.email if organizer else "",
            ),
            joined_persons_count=self.member_count(record.id),
            is_joined=viewer_id is not None and (record.id, viewer_id) in self.memberships,
            status=record.status,
            cancelled_reason=record.cancelled_reason,
            cancelled_at=record.cancelled_at,
            created_at=record.created_at,
            updated_at=record.updated_at,
        )


class InMemoryMeetupRepository:
    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    def _open_meetups(self):
        return [m for m in self._store.meetups.values() if m.status == MeetupStatus.OPEN]

    async def count_overlapping_venue_event(
        self,
        venue_id: int,
        event_id: int,
        start_ts: int,
        end_ts: int,
        exclude_meetup_id: Optional[int] = None,
    ) -> int:
        return sum(
            1
            for m in self._open_meetups()
            if m.venue_id == venue_id
            and m.event_id == event_id
            and m.id != exclude_meetup_id
            and intervals_overlap(m.start_ts, m.end_ts, start_ts, end_ts)
        )

    async def save(self, meetup: MeetupRecord) -> int:
        record = deepcopy(meetup)
        if record.id is None:
            record.id = self._store.next_meetup_id()
        self._store.meetups[record.id] = record
        return record.id

    async def list(self, filter: GetMeetupFilter) -> List[Meetup]:
        records = [
            m for m in self._open_meetups()
            if filter.event_id is None or m.event_id == filter.event_id
        ]
        records.sort(key=lambda m: (m.start_ts, m.id))
        if filter.limit is not None:
            records = records[:filter.limit]
        return [self._store.to_meetup(m) for m in records]

    async def get(self, meetup_id: int, viewer_id: int) -> Tuple[Optional[Meetup], bool]:
        record = self._store.meetups.get(meetup_id)
        if record is None:
            return None, False
        meetup = self._store.to_meetup(record, viewer_id)
        meetup.joined_persons = self._store.members_of(meetup_id)
        return meetup, record.organizer_id == viewer_id or meetup.is_joined

    async def cancel(self, meetup_id: int, reason: str, at: int) -> None:
        record = self._store.meetups.get(meetup_id)
        if record is None:
            return
        record.status = MeetupStatus.CANCELLED
        record.cancelled_reason = reason
        record.cancelled_at = at
        record.updated_at = at

    async def count_overlapping_for_user(self, user_id: int, start_ts: int, end_ts: int) -> int:
        count = 0
        for meetup_id, member_id in self._store.memberships:
            if member_id != user_id:
                continue
            record = self._store.meetups.get(meetup_id)
            if record is not None and intervals_overlap(record.start_ts, record.end_ts, start_ts, end_ts):
                count += 1
        return count

    async def get_incoming_for_user(self, filter: GetIncomingMeetupFilter, now: int) -> List[Meetup]:
        event_ids = parse_id_list(filter.event_ids, "event_ids")
        venue_ids = parse_id_list(filter.venue_ids, "venue_ids")
        records = []
        for meetup_id, member_id in self._store.memberships:
            if member_id != filter.user_id:
                continue
            record = self._store.meetups.get(meetup_id)
            if record is None or record.end_ts <= now:
                continue
            if filter.status != "all" and record.status != filter.status:
                continue
            if event_ids is not None and record.event_id not in event_ids:
                continue
            if venue_ids is not None and record.venue_id not in venue_ids:
                continue
            records.append(record)
        records.sort(key=lambda m: (m.start_ts, m.id))
        return [self._store.to_meetup(m, filter.user_id) for m in records]

    async def get_joined_persons(self, meetup_id: int) -> List[JoinedPerson]:
        return self._store.members_of(meetup_id)

    @asynccontextmanager
    async def capacity_lock(self, venue_id: int, event_id: int):
        async with self._store.lock_for(venue_id, event_id):
            yield


class InMemoryVenueRepository:
    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    async def is_event_supported(self, venue_id: int, event_id: int) -> bool:
        return await self.get_event_capacity(venue_id, event_id) is not None

    async def get_event_capacity(self, venue_id: int, event_id: int) -> Optional[int]:
        venue = self._store.venues.get(venue_id)
        if venue is None:
            return None
        return venue.capacity_for(event_id)

    async def get(self, venue_id: int) -> Optional[Venue]:
        venue = self._store.venues.get(venue_id)
        return deepcopy(venue) if venue else None

    async def list(self, event_id: Optional[int] = None) -> List[Venue]:
        venues = sorted(self._store.venues.values(), key=lambda v: v.id)
        if event_id is not None:
            venues = [v for v in venues if v.capacity_for(event_id) is not None]
        return deepcopy(venues)


class InMemoryEventRepository:
    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    async def get(self, event_id: int) -> Optional[Event]:
        event = self._store.events.get(event_id)
        return deepcopy(event) if event else None

    async def list(self) -> List[Event]:
        return deepcopy(sorted(self._store.events.values(), key=lambda e: e.id))


class InMemoryUserRepository:
    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    async def get_by_id(self, user_id: int) -> Optional[User]:
        user = self._store.users.get(user_id)
        return deepcopy(user) if user else None

    async def get_by_username(self, username: str) -> Optional[User]:
        for user in self._store.users.values():
            if user.username == username:
                return deepcopy(user)
        return None


class InMemoryMembershipRepository:
    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    async def join(self, meetup_id: int, user_id: int, joined_at: int) -> None:
        self._store.memberships[(meetup_id, user_id)] = joined_at

    async def leave(self, meetup_id: int, user_id: int) -> None:
        self._store.memberships.pop((meetup_id, user_id), None)

    async def count(self, meetup_id: int, user_id: int) -> int:
        return 1 if (meetup_id, user_id) in self._store.memberships else 0
