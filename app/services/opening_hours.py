"""
Venue opening hours, evaluated in the venue's local timezone.

Weekday indices run 0=Sunday..6=Saturday. Times of day are compared at
minute granularity, seconds are dropped.
"""

from datetime import date, datetime, time, timedelta
from typing import Iterator

import pytz

from app.core.exceptions import InternalError, VenueIsClosedError
from app.schemas.venue import Venue

UTC_TZ = pytz.UTC


def load_timezone(name: str):
    try:
        return pytz.timezone(name)
    except pytz.UnknownTimeZoneError as e:
        raise InternalError("load_venue_timezone") from e


def parse_time_of_day(value: str) -> time:
    """Parse "HH:MM" into a time"""
    try:
        return datetime.strptime(value, "%H:%M").time()
    except (TypeError, ValueError) as e:
        raise InternalError("load_venue_timezone") from e


def to_local(ts: int, tz) -> datetime:
    """Epoch seconds to an aware datetime in the given zone"""
    return datetime.fromtimestamp(ts, tz=UTC_TZ).astimezone(tz)


def weekday_index(dt: date) -> int:
    """0=Sunday..6=Saturday"""
    return dt.isoweekday() % 7


def _minute_of(dt: datetime) -> time:
    return time(dt.hour, dt.minute)


def _covered_days(start: datetime, end: datetime) -> Iterator[date]:
    """Local calendar dates from start to end inclusive"""
    day = start.date()
    while day <= end.date():
        yield day
        day += timedelta(days=1)


def is_within_opening_hours(venue: Venue, start_ts: int, end_ts: int) -> bool:
    """
    True when [start_ts, end_ts) fits the venue's opening hours.

    Every local day the interval touches must be an open day. The local
    start and end times must both lie inside [open_at, closed_at], which
    also rejects meetups that run past midnight into a closed window.
    """
    if start_ts >= end_ts:
        return False

    tz = load_timezone(venue.timezone)
    start_local = to_local(start_ts, tz)
    end_local = to_local(end_ts, tz)

    open_days = set(venue.open_days)
    for day in _covered_days(start_local, end_local):
        if weekday_index(day) not in open_days:
            return False

    open_at = parse_time_of_day(venue.open_at)
    closed_at = parse_time_of_day(venue.closed_at)

    start_minute = _minute_of(start_local)
    end_minute = _minute_of(end_local)
    if not (open_at <= start_minute <= closed_at):
        return False
    if not (open_at <= end_minute <= closed_at):
        return False
    return True


def ensure_within_opening_hours(venue: Venue, start_ts: int, end_ts: int) -> None:
    """Raise VenueIsClosedError unless the interval fits the opening hours"""
    if not is_within_opening_hours(venue, start_ts, end_ts):
        raise VenueIsClosedError()
