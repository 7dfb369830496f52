"""
Meetup lifecycle tests over the in-memory repositories
Covers capacity, opening hours, organizer rules, membership and notifications
"""

import asyncio

import pytest
from prometheus_client import REGISTRY

from app.core.exceptions import (
    ExceedVenueCapacityError,
    ForbiddenError,
    InternalError,
    InvalidEventError,
    MaxPersonsLessThanJoinedPersonsError,
    MeetupCancelledError,
    MeetupClosedError,
    MeetupFinishedError,
    MeetupNotFoundError,
    MeetupOverlapsError,
    MeetupStartedError,
    NotificationError,
    UserNotParticipantError,
    ValidationError,
    VenueIsClosedError,
)
from app.repositories.memory import InMemoryMeetupRepository
from app.schemas.meetup import GetIncomingMeetupFilter, GetMeetupFilter
from app.services.meetup_service import MeetupService

from helpers import ORGANIZER_ID, create_request, stored_state, ts, update_request


def operation_count(operation: str, outcome: str) -> float:
    value = REGISTRY.get_sample_value(
        "meetly_meetup_operations_total",
        {"operation": operation, "outcome": outcome}
    )
    return value or 0.0


@pytest.mark.unit
class TestCreateMeetup:
    """Creation rules"""

    @pytest.mark.asyncio
    async def test_create_meetup(self, service):
        meetup = await service.create_meetup(create_request(name="Monday Futsal"), ORGANIZER_ID)

        assert meetup.id == 1
        assert meetup.name == "Monday Futsal"
        assert meetup.venue.name == "Hall A"
        assert meetup.event.name == "Futsal"
        assert meetup.organizer.username == "organizer"
        assert meetup.organizer.email == "organizer@example.com"
        assert meetup.joined_persons == []
        assert meetup.joined_persons_count == 0
        assert meetup.status == "open"
        assert meetup.created_at == ts(1, 0)

    @pytest.mark.asyncio
    async def test_event_not_supported_by_venue(self, service):
        with pytest.raises(InvalidEventError):
            await service.create_meetup(create_request(event_id=2), ORGANIZER_ID)

    @pytest.mark.asyncio
    async def test_unknown_venue(self, service):
        with pytest.raises(InvalidEventError):
            await service.create_meetup(create_request(venue_id=99), ORGANIZER_ID)

    @pytest.mark.asyncio
    async def test_venue_capacity_is_enforced(self, service):
        """Hall A hosts two overlapping futsal meetups at most"""
        await service.create_meetup(create_request(start_ts=ts(1, 10), end_ts=ts(1, 12)), ORGANIZER_ID)
        await service.create_meetup(create_request(start_ts=ts(1, 11), end_ts=ts(1, 13)), ORGANIZER_ID)

        with pytest.raises(ExceedVenueCapacityError) as exc_info:
            await service.create_meetup(create_request(start_ts=ts(1, 11, 30), end_ts=ts(1, 12, 30)), ORGANIZER_ID)

        assert exc_info.value.status_code == 409

    @pytest.mark.asyncio
    async def test_touching_intervals_do_not_overlap(self, service):
        await service.create_meetup(create_request(venue_id=3, start_ts=ts(1, 10), end_ts=ts(1, 12)), ORGANIZER_ID)
        second = await service.create_meetup(
            create_request(venue_id=3, start_ts=ts(1, 12), end_ts=ts(1, 14)), ORGANIZER_ID
        )

        assert second.id == 2

    @pytest.mark.asyncio
    async def test_cancelled_meetup_frees_capacity(self, service):
        first = await service.create_meetup(create_request(venue_id=3), ORGANIZER_ID)
        await service.cancel_meetup(first.id, ORGANIZER_ID, "rain")

        second = await service.create_meetup(create_request(venue_id=3), ORGANIZER_ID)
        assert second.id == 2

    @pytest.mark.asyncio
    async def test_venue_closed_day(self, service):
        with pytest.raises(VenueIsClosedError):
            await service.create_meetup(create_request(start_ts=ts(2, 10), end_ts=ts(2, 12)), ORGANIZER_ID)

    @pytest.mark.asyncio
    async def test_end_before_start_is_closed(self, service):
        with pytest.raises(VenueIsClosedError):
            await service.create_meetup(create_request(start_ts=ts(1, 12), end_ts=ts(1, 10)), ORGANIZER_ID)

    @pytest.mark.asyncio
    async def test_capacity_checked_before_opening_hours(self, service):
        await service.create_meetup(create_request(venue_id=3, start_ts=ts(1, 16), end_ts=ts(1, 17)), ORGANIZER_ID)

        with pytest.raises(ExceedVenueCapacityError):
            await service.create_meetup(
                create_request(venue_id=3, start_ts=ts(1, 16, 30), end_ts=ts(1, 18)), ORGANIZER_ID
            )

    @pytest.mark.asyncio
    async def test_concurrent_creates_respect_capacity(self, service):
        results = await asyncio.gather(
            *[service.create_meetup(create_request(venue_id=3), ORGANIZER_ID) for _ in range(5)],
            return_exceptions=True
        )

        created = [r for r in results if not isinstance(r, Exception)]
        rejected = [r for r in results if isinstance(r, ExceedVenueCapacityError)]
        assert len(created) == 1
        assert len(rejected) == 4

    @pytest.mark.asyncio
    async def test_outcomes_are_counted(self, service):
        success_before = operation_count("create_meetup", "success")
        rejected_before = operation_count("create_meetup", "rejected")

        await service.create_meetup(create_request(), ORGANIZER_ID)
        with pytest.raises(InvalidEventError):
            await service.create_meetup(create_request(event_id=2), ORGANIZER_ID)

        assert operation_count("create_meetup", "success") == success_before + 1
        assert operation_count("create_meetup", "rejected") == rejected_before + 1


@pytest.mark.unit
class TestReadMeetups:
    """Listing and viewer projection"""

    @pytest.mark.asyncio
    async def test_list_open_meetups_nearest_first(self, service):
        late = await service.create_meetup(create_request(name="late", start_ts=ts(1, 14), end_ts=ts(1, 15)), ORGANIZER_ID)
        early = await service.create_meetup(create_request(name="early", venue_id=2), ORGANIZER_ID)
        cancelled = await service.create_meetup(create_request(name="off", venue_id=2, start_ts=ts(1, 9)), ORGANIZER_ID)
        await service.cancel_meetup(cancelled.id, ORGANIZER_ID, "no field")

        meetups = await service.get_meetups(GetMeetupFilter())

        assert [m.id for m in meetups] == [early.id, late.id]
        assert all(m.status == "open" for m in meetups)

    @pytest.mark.asyncio
    async def test_list_filters_and_limit(self, service):
        await service.create_meetup(create_request(start_ts=ts(1, 14), end_ts=ts(1, 15)), ORGANIZER_ID)
        board = await service.create_meetup(
            create_request(venue_id=5, event_id=2, start_ts=ts(1, 2), end_ts=ts(1, 4)), ORGANIZER_ID
        )
        await service.create_meetup(create_request(), ORGANIZER_ID)

        by_event = await service.get_meetups(GetMeetupFilter(event_id=2))
        limited = await service.get_meetups(GetMeetupFilter(limit=2))

        assert [m.id for m in by_event] == [board.id]
        assert [m.start_ts for m in limited] == [ts(1, 2), ts(1, 10)]

    @pytest.mark.asyncio
    async def test_get_meetup_not_found(self, service):
        with pytest.raises(MeetupNotFoundError) as exc_info:
            await service.get_meetup(42, viewer_id=1)

        assert exc_info.value.code == "ERR_MEETUP_NOT_FOUND"

    @pytest.mark.asyncio
    async def test_outsider_does_not_see_members(self, service):
        meetup = await service.create_meetup(create_request(), ORGANIZER_ID)
        await service.join_meetup(meetup.id, 1)

        seen = await service.get_meetup(meetup.id, viewer_id=2)

        assert seen.joined_persons is None
        assert seen.joined_persons_count == 1
        assert seen.is_joined is False

    @pytest.mark.asyncio
    async def test_member_and_organizer_see_members(self, service):
        meetup = await service.create_meetup(create_request(), ORGANIZER_ID)
        await service.join_meetup(meetup.id, 1)

        as_member = await service.get_meetup(meetup.id, viewer_id=1)
        as_organizer = await service.get_meetup(meetup.id, viewer_id=ORGANIZER_ID)

        assert [p.username for p in as_member.joined_persons] == ["user1"]
        assert as_member.is_joined is True
        assert [p.id for p in as_organizer.joined_persons] == [1]

    @pytest.mark.asyncio
    async def test_cancellation_details_hidden_from_outsider(self, service):
        meetup = await service.create_meetup(create_request(), ORGANIZER_ID)
        await service.cancel_meetup(meetup.id, ORGANIZER_ID, "storm")

        outsider = await service.get_meetup(meetup.id, viewer_id=2)
        organizer = await service.get_meetup(meetup.id, viewer_id=ORGANIZER_ID)

        assert outsider.status == "cancelled"
        assert outsider.cancelled_reason is None
        assert organizer.cancelled_reason == "storm"
        assert organizer.cancelled_at == ts(1, 0)

    @pytest.mark.asyncio
    async def test_storage_failure_is_internal(self, store, notifier, clock):
        class BrokenMeetupRepository(InMemoryMeetupRepository):
            async def list(self, filter):
                raise RuntimeError("connection reset")

        service = MeetupService(
            meetups=BrokenMeetupRepository(store),
            venues=None,
            events=None,
            users=None,
            memberships=None,
            notifier=notifier,
            clock=clock
        )

        with pytest.raises(InternalError) as exc_info:
            await service.get_meetups(GetMeetupFilter())

        assert exc_info.value.operation == "get_meetups"
        assert isinstance(exc_info.value.__cause__, RuntimeError)
        assert "connection reset" not in exc_info.value.message


@pytest.mark.unit
class TestUpdateMeetup:
    """Organizer-only updates"""

    @pytest.mark.asyncio
    async def test_update_meetup(self, service, clock):
        meetup = await service.create_meetup(create_request(), ORGANIZER_ID)
        clock.advance(60)

        updated = await service.update_meetup(
            meetup.id,
            update_request(name="Renamed", start_ts=ts(1, 13), end_ts=ts(1, 15), max_persons=4),
            ORGANIZER_ID
        )

        assert updated.name == "Renamed"
        assert updated.start_ts == ts(1, 13)
        assert updated.max_persons == 4
        assert updated.venue.id == 1
        assert updated.updated_at == ts(1, 0) + 60

        stored = await service.get_meetup(meetup.id, viewer_id=ORGANIZER_ID)
        assert stored.name == "Renamed"
        assert stored.end_ts == ts(1, 15)

    @pytest.mark.asyncio
    async def test_update_not_found(self, service):
        with pytest.raises(MeetupNotFoundError):
            await service.update_meetup(5, update_request(), ORGANIZER_ID)

    @pytest.mark.asyncio
    async def test_update_by_non_organizer(self, service):
        meetup = await service.create_meetup(create_request(), ORGANIZER_ID)
        before = stored_state(await service.get_meetup(meetup.id, viewer_id=ORGANIZER_ID))

        with pytest.raises(ForbiddenError) as exc_info:
            await service.update_meetup(meetup.id, update_request(name="mine now"), 1)

        assert exc_info.value.status_code == 403
        after = await service.get_meetup(meetup.id, viewer_id=ORGANIZER_ID)
        assert stored_state(after) == before

    @pytest.mark.asyncio
    async def test_update_cancelled_meetup(self, service):
        meetup = await service.create_meetup(create_request(), ORGANIZER_ID)
        await service.cancel_meetup(meetup.id, ORGANIZER_ID, "rain")

        with pytest.raises(MeetupCancelledError):
            await service.update_meetup(meetup.id, update_request(), ORGANIZER_ID)

    @pytest.mark.asyncio
    async def test_max_persons_below_joined(self, service, clock):
        meetup = await service.create_meetup(create_request(), ORGANIZER_ID)
        for user_id in (1, 2, 3):
            await service.join_meetup(meetup.id, user_id)
        before = stored_state(await service.get_meetup(meetup.id, viewer_id=ORGANIZER_ID))
        clock.advance(60)

        with pytest.raises(MaxPersonsLessThanJoinedPersonsError) as exc_info:
            await service.update_meetup(meetup.id, update_request(max_persons=2), ORGANIZER_ID)

        assert exc_info.value.details == {"max_persons": 2, "joined_persons_count": 3}
        after = await service.get_meetup(meetup.id, viewer_id=ORGANIZER_ID)
        assert stored_state(after) == before
        assert after.joined_persons_count == 3

    @pytest.mark.asyncio
    async def test_update_does_not_count_itself(self, service):
        meetup = await service.create_meetup(create_request(venue_id=3), ORGANIZER_ID)

        updated = await service.update_meetup(
            meetup.id, update_request(start_ts=ts(1, 11), end_ts=ts(1, 13)), ORGANIZER_ID
        )

        assert updated.start_ts == ts(1, 11)

    @pytest.mark.asyncio
    async def test_update_into_full_window(self, service, clock):
        await service.create_meetup(create_request(venue_id=3, start_ts=ts(1, 14), end_ts=ts(1, 16)), ORGANIZER_ID)
        meetup = await service.create_meetup(create_request(venue_id=3), ORGANIZER_ID)
        before = stored_state(await service.get_meetup(meetup.id, viewer_id=ORGANIZER_ID))
        clock.advance(60)

        with pytest.raises(ExceedVenueCapacityError):
            await service.update_meetup(
                meetup.id, update_request(start_ts=ts(1, 13), end_ts=ts(1, 15)), ORGANIZER_ID
            )

        after = await service.get_meetup(meetup.id, viewer_id=ORGANIZER_ID)
        assert stored_state(after) == before

    @pytest.mark.asyncio
    async def test_update_outside_opening_hours(self, service, clock):
        meetup = await service.create_meetup(create_request(), ORGANIZER_ID)
        before = stored_state(await service.get_meetup(meetup.id, viewer_id=ORGANIZER_ID))
        clock.advance(60)

        with pytest.raises(VenueIsClosedError):
            await service.update_meetup(
                meetup.id, update_request(start_ts=ts(1, 16), end_ts=ts(1, 18)), ORGANIZER_ID
            )

        after = await service.get_meetup(meetup.id, viewer_id=ORGANIZER_ID)
        assert stored_state(after) == before


@pytest.mark.unit
class TestCancelMeetup:
    """Cancellation and member notification"""

    @pytest.mark.asyncio
    async def test_cancel_notifies_members(self, service, notifier):
        meetup = await service.create_meetup(create_request(), ORGANIZER_ID)
        await service.join_meetup(meetup.id, 1)
        await service.join_meetup(meetup.id, 2)

        cancelled = await service.cancel_meetup(meetup.id, ORGANIZER_ID, "venue flooded")

        assert cancelled.status == "cancelled"
        assert cancelled.cancelled_reason == "venue flooded"
        assert cancelled.cancelled_at == ts(1, 0)
        assert notifier.cancellations == [
            (["user1@example.com", "user2@example.com"], "venue flooded")
        ]

    @pytest.mark.asyncio
    async def test_cancel_without_members_sends_nothing(self, service, notifier):
        meetup = await service.create_meetup(create_request(), ORGANIZER_ID)

        await service.cancel_meetup(meetup.id, ORGANIZER_ID, "nobody came")

        assert notifier.cancellations == []

    @pytest.mark.asyncio
    async def test_cancel_by_non_organizer(self, service):
        meetup = await service.create_meetup(create_request(), ORGANIZER_ID)

        with pytest.raises(ForbiddenError):
            await service.cancel_meetup(meetup.id, 1, "not mine")

    @pytest.mark.asyncio
    async def test_cancel_started_meetup(self, service, clock):
        meetup = await service.create_meetup(create_request(), ORGANIZER_ID)
        before = stored_state(await service.get_meetup(meetup.id, viewer_id=ORGANIZER_ID))
        clock.set(ts(1, 10))

        with pytest.raises(MeetupStartedError):
            await service.cancel_meetup(meetup.id, ORGANIZER_ID, "too late")

        after = await service.get_meetup(meetup.id, viewer_id=ORGANIZER_ID)
        assert stored_state(after) == before
        assert after.cancelled_reason is None

    @pytest.mark.asyncio
    async def test_cancel_twice(self, service):
        meetup = await service.create_meetup(create_request(), ORGANIZER_ID)
        await service.cancel_meetup(meetup.id, ORGANIZER_ID, "rain")

        with pytest.raises(MeetupCancelledError):
            await service.cancel_meetup(meetup.id, ORGANIZER_ID, "rain again")

    @pytest.mark.asyncio
    async def test_started_reported_before_cancelled(self, service, clock):
        meetup = await service.create_meetup(create_request(), ORGANIZER_ID)
        await service.cancel_meetup(meetup.id, ORGANIZER_ID, "rain")
        clock.set(ts(1, 11))

        with pytest.raises(MeetupStartedError):
            await service.cancel_meetup(meetup.id, ORGANIZER_ID, "rain again")

    @pytest.mark.asyncio
    async def test_cancel_requires_reason(self, service):
        meetup = await service.create_meetup(create_request(), ORGANIZER_ID)

        with pytest.raises(ValidationError):
            await service.cancel_meetup(meetup.id, ORGANIZER_ID, "   ")

        still_open = await service.get_meetup(meetup.id, viewer_id=ORGANIZER_ID)
        assert still_open.status == "open"

    @pytest.mark.asyncio
    async def test_failed_email_is_reported(self, service, notifier):
        meetup = await service.create_meetup(create_request(), ORGANIZER_ID)
        await service.join_meetup(meetup.id, 1)
        notifier.fail = True

        with pytest.raises(NotificationError):
            await service.cancel_meetup(meetup.id, ORGANIZER_ID, "rain")

        # The cancellation itself was written before sending
        stored = await service.get_meetup(meetup.id, viewer_id=ORGANIZER_ID)
        assert stored.status == "cancelled"


@pytest.mark.unit
class TestJoinAndLeave:
    """Membership rules"""

    @pytest.mark.asyncio
    async def test_join_meetup(self, service, notifier, clock):
        meetup = await service.create_meetup(create_request(), ORGANIZER_ID)
        clock.advance(30)

        joined = await service.join_meetup(meetup.id, 1)

        assert joined.is_joined is True
        assert joined.joined_persons_count == 1
        assert joined.joined_persons[0].username == "user1"
        assert joined.joined_persons[0].joined_at == ts(1, 0) + 30
        assert notifier.join_notices == [("organizer@example.com", "user1", 1)]

    @pytest.mark.asyncio
    async def test_join_full_meetup(self, service):
        meetup = await service.create_meetup(create_request(max_persons=1), ORGANIZER_ID)
        await service.join_meetup(meetup.id, 1)

        with pytest.raises(MeetupClosedError):
            await service.join_meetup(meetup.id, 2)

    @pytest.mark.asyncio
    async def test_join_overlapping_meetup(self, service):
        first = await service.create_meetup(create_request(), ORGANIZER_ID)
        second = await service.create_meetup(
            create_request(venue_id=2, start_ts=ts(1, 11), end_ts=ts(1, 13)), ORGANIZER_ID
        )
        await service.join_meetup(first.id, 1)

        with pytest.raises(MeetupOverlapsError):
            await service.join_meetup(second.id, 1)

    @pytest.mark.asyncio
    async def test_join_back_to_back_meetups(self, service):
        first = await service.create_meetup(create_request(), ORGANIZER_ID)
        second = await service.create_meetup(
            create_request(venue_id=2, start_ts=ts(1, 12), end_ts=ts(1, 14)), ORGANIZER_ID
        )
        await service.join_meetup(first.id, 1)

        joined = await service.join_meetup(second.id, 1)
        assert joined.is_joined is True

    @pytest.mark.asyncio
    async def test_cancelled_membership_still_blocks_join(self, service):
        first = await service.create_meetup(create_request(), ORGANIZER_ID)
        second = await service.create_meetup(create_request(venue_id=2), ORGANIZER_ID)
        await service.join_meetup(first.id, 1)
        await service.cancel_meetup(first.id, ORGANIZER_ID, "rain")

        with pytest.raises(MeetupOverlapsError):
            await service.join_meetup(second.id, 1)

        meetup = await service.get_meetup(second.id, ORGANIZER_ID)
        assert meetup.joined_persons_count == 0

    @pytest.mark.asyncio
    async def test_join_finished_meetup(self, service, clock):
        meetup = await service.create_meetup(create_request(), ORGANIZER_ID)
        clock.set(ts(1, 12))

        with pytest.raises(MeetupFinishedError):
            await service.join_meetup(meetup.id, 1)

    @pytest.mark.asyncio
    async def test_join_cancelled_meetup(self, service):
        meetup = await service.create_meetup(create_request(), ORGANIZER_ID)
        await service.cancel_meetup(meetup.id, ORGANIZER_ID, "rain")

        with pytest.raises(MeetupCancelledError):
            await service.join_meetup(meetup.id, 1)

    @pytest.mark.asyncio
    async def test_join_unknown_meetup(self, service):
        with pytest.raises(MeetupNotFoundError):
            await service.join_meetup(3, 1)

    @pytest.mark.asyncio
    async def test_join_started_meetup_is_allowed(self, service, clock):
        meetup = await service.create_meetup(create_request(), ORGANIZER_ID)
        clock.set(ts(1, 11))

        joined = await service.join_meetup(meetup.id, 1)
        assert joined.is_joined is True

    @pytest.mark.asyncio
    async def test_failed_join_notice_is_reported(self, service, notifier, store):
        meetup = await service.create_meetup(create_request(), ORGANIZER_ID)
        notifier.fail = True

        with pytest.raises(NotificationError):
            await service.join_meetup(meetup.id, 1)

        assert store.member_count(meetup.id) == 1

    @pytest.mark.asyncio
    async def test_leave_meetup(self, service):
        meetup = await service.create_meetup(create_request(), ORGANIZER_ID)
        await service.join_meetup(meetup.id, 1)

        await service.leave_meetup(meetup.id, 1)

        seen = await service.get_meetup(meetup.id, viewer_id=ORGANIZER_ID)
        assert seen.joined_persons == []
        assert seen.joined_persons_count == 0

    @pytest.mark.asyncio
    async def test_leave_without_joining(self, service):
        meetup = await service.create_meetup(create_request(), ORGANIZER_ID)

        with pytest.raises(UserNotParticipantError) as exc_info:
            await service.leave_meetup(meetup.id, 1)

        assert exc_info.value.status_code == 403

    @pytest.mark.asyncio
    async def test_leave_finished_meetup(self, service, clock):
        meetup = await service.create_meetup(create_request(), ORGANIZER_ID)
        await service.join_meetup(meetup.id, 1)
        clock.set(ts(1, 13))

        with pytest.raises(MeetupFinishedError):
            await service.leave_meetup(meetup.id, 1)

    @pytest.mark.asyncio
    async def test_leave_cancelled_meetup(self, service):
        meetup = await service.create_meetup(create_request(), ORGANIZER_ID)
        await service.join_meetup(meetup.id, 1)
        await service.cancel_meetup(meetup.id, ORGANIZER_ID, "rain")

        with pytest.raises(MeetupCancelledError):
            await service.leave_meetup(meetup.id, 1)


@pytest.mark.unit
class TestIncomingMeetups:
    """Meetups a user joined that haven't finished"""

    @pytest.fixture
    def incoming(self):
        return lambda **kwargs: GetIncomingMeetupFilter(user_id=1, **kwargs)

    async def _joined_three(self, service):
        futsal = await service.create_meetup(create_request(), ORGANIZER_ID)
        board = await service.create_meetup(
            create_request(venue_id=5, event_id=2, start_ts=ts(1, 2), end_ts=ts(1, 4)), ORGANIZER_ID
        )
        evening = await service.create_meetup(
            create_request(venue_id=2, start_ts=ts(1, 13), end_ts=ts(1, 15)), ORGANIZER_ID
        )
        for meetup in (futsal, board, evening):
            await service.join_meetup(meetup.id, 1)
        await service.cancel_meetup(evening.id, ORGANIZER_ID, "rain")
        return futsal, board, evening

    @pytest.mark.asyncio
    async def test_all_statuses_nearest_first(self, service, incoming):
        futsal, board, evening = await self._joined_three(service)

        meetups = await service.get_incoming_meetups(incoming())

        assert [m.id for m in meetups] == [board.id, futsal.id, evening.id]
        assert all(m.is_joined for m in meetups)

    @pytest.mark.asyncio
    async def test_status_filter(self, service, incoming):
        futsal, board, evening = await self._joined_three(service)

        open_meetups = await service.get_incoming_meetups(incoming(status="open"))
        cancelled = await service.get_incoming_meetups(incoming(status="cancelled"))

        assert [m.id for m in open_meetups] == [board.id, futsal.id]
        assert [m.id for m in cancelled] == [evening.id]

    @pytest.mark.asyncio
    async def test_id_filters(self, service, incoming):
        futsal, board, evening = await self._joined_three(service)

        by_event = await service.get_incoming_meetups(incoming(event_ids="2"))
        by_venue = await service.get_incoming_meetups(incoming(venue_ids="1, 2"))

        assert [m.id for m in by_event] == [board.id]
        assert [m.id for m in by_venue] == [futsal.id, evening.id]

    @pytest.mark.asyncio
    async def test_finished_meetups_are_dropped(self, service, clock, incoming):
        futsal, board, evening = await self._joined_three(service)
        clock.set(ts(1, 12))

        meetups = await service.get_incoming_meetups(incoming())

        assert [m.id for m in meetups] == [evening.id]

    @pytest.mark.asyncio
    async def test_other_users_meetups_are_excluded(self, service):
        await self._joined_three(service)

        meetups = await service.get_incoming_meetups(GetIncomingMeetupFilter(user_id=2))

        assert meetups == []

    @pytest.mark.asyncio
    async def test_unknown_status(self, service, incoming):
        with pytest.raises(ValidationError):
            await service.get_incoming_meetups(incoming(status="finished"))

    @pytest.mark.asyncio
    async def test_malformed_id_list(self, service, incoming):
        with pytest.raises(ValidationError):
            await service.get_incoming_meetups(incoming(event_ids="1,x"))
