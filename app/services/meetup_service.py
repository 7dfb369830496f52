"""
Meetup lifecycle service
Create, update, cancel, join and leave meetups under venue capacity,
opening hours, per-user overlap and organizer-only rules
"""

import logging
from contextlib import asynccontextmanager
from typing import List, Optional

from app.core.clock import Clock, SystemClock
from app.core.exceptions import (
    ForbiddenError,
    InternalError,
    InvalidEventError,
    MaxPersonsLessThanJoinedPersonsError,
    MeetlyException,
    MeetupCancelledError,
    MeetupClosedError,
    MeetupFinishedError,
    MeetupNotFoundError,
    MeetupOverlapsError,
    MeetupStartedError,
    UserNotParticipantError,
    ValidationError,
)
from app.core.metrics import metrics_collector
from app.models.meetup import MeetupStatus
from app.repositories.base import (
    EventRepository,
    MeetupRepository,
    MembershipRepository,
    UserRepository,
    VenueRepository,
)
from app.schemas.meetup import (
    INCOMING_STATUSES,
    CancelMeetupResponse,
    CreateMeetupRequest,
    GetIncomingMeetupFilter,
    GetMeetupFilter,
    Meetup,
    MeetupEvent,
    MeetupOrganizer,
    MeetupRecord,
    MeetupSummary,
    MeetupVenue,
    UpdateMeetupRequest,
)
from app.services.capacity import ensure_capacity
from app.services.notification_service import Notifier
from app.services.opening_hours import ensure_within_opening_hours
from app.services.projection import project_for_viewer, to_cancellation, to_summary

logger = logging.getLogger(__name__)


class MeetupService:
    """
    Orchestrates the meetup lifecycle.

    Each write operation runs its read-phase checks first and then issues
    exactly one state-changing storage call. Notifications go out after the
    write; a failed send is reported to the caller.
    """

    def __init__(
        self,
        meetups: MeetupRepository,
        venues: VenueRepository,
        events: EventRepository,
        users: UserRepository,
        memberships: MembershipRepository,
        notifier: Notifier,
        clock: Optional[Clock] = None
    ):
        self.meetups = meetups
        self.venues = venues
        self.events = events
        self.users = users
        self.memberships = memberships
        self.notifier = notifier
        self.clock = clock or SystemClock()

    @asynccontextmanager
    async def _operation(self, name: str):
        """Track the operation and hide infrastructure failures behind InternalError"""
        async with metrics_collector.track_operation(name):
            try:
                yield
            except MeetlyException:
                raise
            except Exception as e:
                logger.exception(f"{name} failed on storage: {type(e).__name__}")
                raise InternalError(name) from e

    async def _load(self, meetup_id: int, user_id: int) -> Meetup:
        meetup, _ = await self.meetups.get(meetup_id, user_id)
        if meetup is None:
            raise MeetupNotFoundError(meetup_id)
        return meetup

    async def create_meetup(self, req: CreateMeetupRequest, organizer_id: int) -> Meetup:
        """
        Create a meetup organized by `organizer_id`.

        Raises:
            InvalidEventError: venue does not host the event
            ExceedVenueCapacityError: the time window is full
            VenueIsClosedError: outside the venue's opening hours
        """
        async with self._operation("create_meetup"):
            if not await self.venues.is_event_supported(req.venue_id, req.event_id):
                raise InvalidEventError()

            venue = await self.venues.get(req.venue_id)
            if venue is None:
                raise InvalidEventError()

            async with self.meetups.capacity_lock(req.venue_id, req.event_id):
                await ensure_capacity(
                    self.meetups,
                    self.venues,
                    req.venue_id,
                    req.event_id,
                    req.start_ts,
                    req.end_ts
                )
                ensure_within_opening_hours(venue, req.start_ts, req.end_ts)

                now = self.clock.timestamp()
                record = MeetupRecord(
                    name=req.name,
                    venue_id=req.venue_id,
                    event_id=req.event_id,
                    start_ts=req.start_ts,
                    end_ts=req.end_ts,
                    max_persons=req.max_persons,
                    organizer_id=organizer_id,
                    status=MeetupStatus.OPEN,
                    created_at=now,
                    updated_at=now
                )
                meetup_id = await self.meetups.save(record)

            event = await self.events.get(req.event_id)
            organizer = await self.users.get_by_id(organizer_id)

            logger.info(f"Meetup {meetup_id} created at venue {req.venue_id} by user {organizer_id}")

            return Meetup(
                id=meetup_id,
                name=record.name,
                venue=MeetupVenue(id=venue.id, name=venue.name),
                event=MeetupEvent(id=req.event_id, name=event.name if event else ""),
                start_ts=record.start_ts,
                end_ts=record.end_ts,
                max_persons=record.max_persons,
                organizer=MeetupOrganizer(
                    id=organizer_id,
                    username=organizer.username if organizer else "",
                    email=organizer.email if organizer else ""
                ),
                joined_persons=[],
                joined_persons_count=0,
                status=MeetupStatus.OPEN,
                created_at=record.created_at,
                updated_at=record.updated_at
            )

    async def get_meetups(self, filter: GetMeetupFilter) -> List[MeetupSummary]:
        """Open meetups, nearest first"""
        async with self._operation("get_meetups"):
            meetups = await self.meetups.list(filter)
            return [to_summary(meetup) for meetup in meetups]

    async def get_meetup(self, meetup_id: int, viewer_id: int) -> Meetup:
        async with self._operation("get_meetup"):
            meetup, privileged = await self.meetups.get(meetup_id, viewer_id)
            if meetup is None:
                raise MeetupNotFoundError(meetup_id)
            return project_for_viewer(meetup, privileged)

    async def update_meetup(self, meetup_id: int, req: UpdateMeetupRequest, user_id: int) -> Meetup:
        """
        Change name, interval or max persons. Venue and event stay as created
        and the new interval is re-checked against capacity and opening hours.
        """
        async with self._operation("update_meetup"):
            meetup = await self._load(meetup_id, user_id)
            if meetup.organizer.id != user_id:
                raise ForbiddenError()
            if meetup.is_cancelled:
                raise MeetupCancelledError()
            if req.max_persons < meetup.joined_persons_count:
                raise MaxPersonsLessThanJoinedPersonsError(req.max_persons, meetup.joined_persons_count)

            venue_id, event_id = meetup.venue.id, meetup.event.id
            if not await self.venues.is_event_supported(venue_id, event_id):
                raise InvalidEventError()

            venue = await self.venues.get(venue_id)
            if venue is None:
                raise InvalidEventError()

            async with self.meetups.capacity_lock(venue_id, event_id):
                await ensure_capacity(
                    self.meetups,
                    self.venues,
                    venue_id,
                    event_id,
                    req.start_ts,
                    req.end_ts,
                    exclude_meetup_id=meetup.id
                )
                ensure_within_opening_hours(venue, req.start_ts, req.end_ts)

                meetup.name = req.name
                meetup.start_ts = req.start_ts
                meetup.end_ts = req.end_ts
                meetup.max_persons = req.max_persons
                meetup.updated_at = self.clock.timestamp()
                await self.meetups.save(meetup.to_record())

            logger.info(f"Meetup {meetup.id} updated by user {user_id}")
            return project_for_viewer(meetup, privileged=True)

    async def cancel_meetup(self, meetup_id: int, user_id: int, reason: str) -> CancelMeetupResponse:
        """
        Cancel a meetup that has not started and email every joined person.
        The start check runs before the status check.
        """
        async with self._operation("cancel_meetup"):
            meetup = await self._load(meetup_id, user_id)
            if meetup.organizer.id != user_id:
                raise ForbiddenError()
            if self.clock.timestamp() >= meetup.start_ts:
                raise MeetupStartedError()
            if meetup.is_cancelled:
                raise MeetupCancelledError()
            if not reason or not reason.strip():
                raise ValidationError("cancelled reason is required", field="cancelled_reason")

            await self.meetups.cancel(meetup_id, reason, self.clock.timestamp())
            meetup = await self._load(meetup_id, user_id)

            joined_persons = await self.meetups.get_joined_persons(meetup_id)
            emails = [person.email for person in joined_persons if person.email]
            if emails:
                await self.notifier.send_cancellation_email(emails, reason)

            logger.info(f"Meetup {meetup_id} cancelled by user {user_id}, {len(emails)} member(s) notified")
            return to_cancellation(meetup)

    async def join_meetup(self, meetup_id: int, user_id: int) -> Meetup:
        """Join an open meetup that is not full and doesn't clash with the user's other meetups"""
        async with self._operation("join_meetup"):
            meetup = await self._load(meetup_id, user_id)
            now = self.clock.timestamp()
            if now >= meetup.end_ts:
                raise MeetupFinishedError()
            if meetup.is_cancelled:
                raise MeetupCancelledError()
            if meetup.joined_persons_count >= meetup.max_persons:
                raise MeetupClosedError()
            overlapping = await self.meetups.count_overlapping_for_user(user_id, meetup.start_ts, meetup.end_ts)
            if overlapping > 0:
                raise MeetupOverlapsError()

            await self.memberships.join(meetup_id, user_id, now)

            meetup, privileged = await self.meetups.get(meetup_id, user_id)
            if meetup is None:
                raise MeetupNotFoundError(meetup_id)

            joiner = await self.users.get_by_id(user_id)
            await self.notifier.notify_organizer(
                meetup.organizer.email,
                joiner.username if joiner else "",
                len(meetup.joined_persons or [])
            )

            logger.info(f"User {user_id} joined meetup {meetup_id}")
            return project_for_viewer(meetup, privileged)

    async def leave_meetup(self, meetup_id: int, user_id: int) -> None:
        async with self._operation("leave_meetup"):
            meetup = await self._load(meetup_id, user_id)
            if self.clock.timestamp() >= meetup.end_ts:
                raise MeetupFinishedError()
            if meetup.is_cancelled:
                raise MeetupCancelledError()
            if await self.memberships.count(meetup_id, user_id) == 0:
                raise UserNotParticipantError()

            await self.memberships.leave(meetup_id, user_id)
            logger.info(f"User {user_id} left meetup {meetup_id}")

    async def get_incoming_meetups(self, filter: GetIncomingMeetupFilter) -> List[Meetup]:
        """Meetups the user joined that haven't finished yet"""
        async with self._operation("get_incoming_meetups"):
            if filter.status not in INCOMING_STATUSES:
                raise ValidationError("status must be one of open, cancelled, all", field="status")
            return await self.meetups.get_incoming_for_user(filter, self.clock.timestamp())
