"""Storage ports for the meetup lifecycle.

The service depends only on these protocols. Two adapters implement them:
`app.repositories.sql` (SQLAlchemy, async) and `app.repositories.memory`
(dict-backed, for tests and local runs).

Every adapter uses the same half-open overlap rule: `[a, b)` and `[c, d)`
overlap iff `a < d and c < b`. Touching boundaries do not overlap.
"""

from typing import AsyncContextManager, List, Optional, Protocol, Set, Tuple

from app.core.exceptions import ValidationError
from app.schemas.event import Event
from app.schemas.meetup import (
    GetIncomingMeetupFilter,
    GetMeetupFilter,
    JoinedPerson,
    Meetup,
    MeetupRecord,
)
from app.schemas.user import User
from app.schemas.venue import Venue


def intervals_overlap(a: int, b: int, c: int, d: int) -> bool:
    """Half-open overlap test for [a, b) and [c, d)."""
    return a < d and c < b


def parse_id_list(raw: Optional[str], field: str) -> Optional[Set[int]]:
    """
    Parse a comma-separated id list such as "1,2,3".

    Returns None when the filter is absent or blank. Raises ValidationError
    when a token is not an integer.
    """
    if raw is None or not raw.strip():
        return None
    ids = set()
    for token in raw.split(","):
        token = token.strip()
        if not token:
            continue
        try:
            ids.add(int(token))
        except ValueError:
            raise ValidationError(f"{field} must be a comma-separated list of integers", field=field)
    return ids or None


class MeetupRepository(Protocol):
    """
    Meetup persistence.

    Capacity and per-user overlap counts consider open meetups only.
    """

    async def count_overlapping_venue_event(
        self,
        venue_id: int,
        event_id: int,
        start_ts: int,
        end_ts: int,
        exclude_meetup_id: Optional[int] = None,
    ) -> int:
        """
        Count open meetups of `event_id` at `venue_id` overlapping
        [start_ts, end_ts), skipping `exclude_meetup_id` when given.
        """
        ...

    async def save(self, meetup: MeetupRecord) -> int:
        """
        Insert when `meetup.id` is None, otherwise update every column.

        Returns:
            The new or existing meetup id
        """
        ...

    async def list(self, filter: GetMeetupFilter) -> List[Meetup]:
        """Open meetups ordered by start_ts ascending, optionally capped."""
        ...

    async def get(self, meetup_id: int, viewer_id: int) -> Tuple[Optional[Meetup], bool]:
        """
        Load a meetup with its joined persons.

        Returns:
            (meetup or None, whether the viewer is the organizer or a member)
        """
        ...

    async def cancel(self, meetup_id: int, reason: str, at: int) -> None:
        """Set status, cancelled_reason, cancelled_at and updated_at at once."""
        ...

    async def count_overlapping_for_user(self, user_id: int, start_ts: int, end_ts: int) -> int:
        """Count memberships of the user, in any status, overlapping [start_ts, end_ts)."""
        ...

    async def get_incoming_for_user(self, filter: GetIncomingMeetupFilter, now: int) -> List[Meetup]:
        """
        Meetups joined by `filter.user_id` that end after `now`.

        `filter.status` is "open", "cancelled" or "all". Id lists are
        comma-separated and intersect the result.
        """
        ...

    async def get_joined_persons(self, meetup_id: int) -> List[JoinedPerson]:
        ...

    def capacity_lock(self, venue_id: int, event_id: int) -> AsyncContextManager[None]:
        """
        Serialize capacity check and save for one (venue, event) pair.
        """
        ...


class VenueRepository(Protocol):
    async def is_event_supported(self, venue_id: int, event_id: int) -> bool:
        ...

    async def get_event_capacity(self, venue_id: int, event_id: int) -> Optional[int]:
        """None when the venue does not host the event."""
        ...

    async def get(self, venue_id: int) -> Optional[Venue]:
        ...

    async def list(self, event_id: Optional[int] = None) -> List[Venue]:
        ...


class EventRepository(Protocol):
    async def get(self, event_id: int) -> Optional[Event]:
        ...

    async def list(self) -> List[Event]:
        ...


class UserRepository(Protocol):
    async def get_by_id(self, user_id: int) -> Optional[User]:
        ...

    async def get_by_username(self, username: str) -> Optional[User]:
        ...


class MembershipRepository(Protocol):
    async def join(self, meetup_id: int, user_id: int, joined_at: int) -> None:
        """Idempotent on (meetup_id, user_id)."""
        ...

    async def leave(self, meetup_id: int, user_id: int) -> None:
        ...

    async def count(self, meetup_id: int, user_id: int) -> int:
        ...
