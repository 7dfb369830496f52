"""
Shared test data and builders
"""

from datetime import datetime, timezone

from app.core.exceptions import NotificationError
from app.schemas.meetup import CreateMeetupRequest, UpdateMeetupRequest

ORGANIZER_ID = 7

EVENTS = [
    {"id": 1, "name": "Futsal"},
    {"id": 2, "name": "Board Games"},
]

# open_days: 0=Sunday..6=Saturday; capacities: event_id -> meetups_capacity
VENUES = [
    {"id": 1, "name": "Hall A", "open_days": [1], "open_at": "09:00", "closed_at": "17:00",
     "timezone": "UTC", "capacities": {1: 2}},
    {"id": 2, "name": "Hall B", "open_days": [1], "open_at": "09:00", "closed_at": "17:00",
     "timezone": "UTC", "capacities": {1: 5}},
    {"id": 3, "name": "Small Room", "open_days": [1], "open_at": "09:00", "closed_at": "17:00",
     "timezone": "UTC", "capacities": {1: 1}},
    {"id": 4, "name": "Tuesday Club", "open_days": [2], "open_at": "09:00", "closed_at": "17:00",
     "timezone": "UTC", "capacities": {1: 3}},
    {"id": 5, "name": "Jakarta Court", "open_days": [1, 2, 3, 4, 5, 6], "open_at": "08:00",
     "closed_at": "22:00", "timezone": "Asia/Jakarta", "capacities": {2: 2}},
]

USERS = [
    {"id": i, "username": f"user{i}", "email": f"user{i}@example.com"}
    for i in range(1, 7)
] + [
    {"id": ORGANIZER_ID, "username": "organizer", "email": "organizer@example.com"},
]

EVENT_NAMES = {event["id"]: event["name"] for event in EVENTS}


def ts(day: int = 1, hour: int = 0, minute: int = 0, second: int = 0, month: int = 1, year: int = 2024) -> int:
    """Epoch seconds of a UTC wall time; 2024-01-01 is a Monday"""
    return int(datetime(year, month, day, hour, minute, second, tzinfo=timezone.utc).timestamp())


def create_request(**overrides) -> CreateMeetupRequest:
    data = {
        "name": "A",
        "venue_id": 1,
        "event_id": 1,
        "start_ts": ts(1, 10),
        "end_ts": ts(1, 12),
        "max_persons": 10,
    }
    data.update(overrides)
    return CreateMeetupRequest(**data)


def update_request(**overrides) -> UpdateMeetupRequest:
    data = {
        "name": "A",
        "start_ts": ts(1, 10),
        "end_ts": ts(1, 12),
        "max_persons": 10,
    }
    data.update(overrides)
    return UpdateMeetupRequest(**data)


class RecordingNotifier:
    """Notifier that keeps every message; set `fail` to make sends raise"""

    def __init__(self):
        self.cancellations = []
        self.join_notices = []
        self.fail = False

    async def send_cancellation_email(self, to_emails, reason):
        if self.fail:
            raise NotificationError("send_cancellation_email")
        self.cancellations.append((list(to_emails), reason))

    async def notify_organizer(self, organizer_email, joiner_username, joined_count):
        if self.fail:
            raise NotificationError("notify_organizer")
        self.join_notices.append((organizer_email, joiner_username, joined_count))


def stored_state(meetup) -> tuple:
    """Fields a rejected write must leave untouched"""
    return (
        meetup.name,
        meetup.start_ts,
        meetup.end_ts,
        meetup.max_persons,
        meetup.status,
        meetup.cancelled_at,
        meetup.updated_at,
    )
