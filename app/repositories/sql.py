"""
SQLAlchemy repositories over an AsyncSession.
Each write method commits its own single statement.
"""

import logging
from contextlib import asynccontextmanager
from typing import List, Optional, Tuple

from sqlalchemy import select, update, delete, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased, selectinload

from app.core.database import db_manager
from app.models.event import Event as EventModel
from app.models.meetup import Meetup as MeetupModel, MeetupUser, MeetupStatus
from app.models.user import User as UserModel
from app.models.venue import Venue as VenueModel, VenueEvent
from app.repositories.base import parse_id_list
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
from app.schemas.venue import SupportedEvent, Venue

logger = logging.getLogger(__name__)


def _overlaps(start_ts: int, end_ts: int):
    """Half-open overlap of a stored meetup with [start_ts, end_ts)"""
    return (MeetupModel.start_ts < end_ts) & (MeetupModel.end_ts > start_ts)


def _joined_count():
    return (
        select(func.count())
        .select_from(MeetupUser)
        .where(MeetupUser.meetup_id == MeetupModel.id)
        .correlate(MeetupModel)
        .scalar_subquery()
    )


def _is_member(user_id: int):
    return (
        select(MeetupUser.user_id)
        .where(MeetupUser.meetup_id == MeetupModel.id, MeetupUser.user_id == user_id)
        .correlate(MeetupModel)
        .exists()
    )


def _meetup_query(viewer_id: Optional[int] = None):
    """Meetup rows joined with venue, event and organizer names"""
    columns = [
        MeetupModel,
        VenueModel.name.label("venue_name"),
        EventModel.name.label("event_name"),
        UserModel.username.label("organizer_username"),
        UserModel.email.label("organizer_email"),
        _joined_count().label("joined_persons_count"),
    ]
    if viewer_id is not None:
        columns.append(_is_member(viewer_id).label("is_joined"))
    return (
        select(*columns)
        .select_from(MeetupModel)
        .join(VenueModel, MeetupModel.venue_id == VenueModel.id)
        .join(EventModel, MeetupModel.event_id == EventModel.id)
        .join(UserModel, MeetupModel.organizer_id == UserModel.id)
        .execution_options(populate_existing=True)
    )


def _row_to_meetup(row) -> Meetup:
    m = row[0]
    mapping = row._mapping
    return Meetup(
        id=m.id,
        name=m.name,
        venue=MeetupVenue(id=m.venue_id, name=row.venue_name),
        event=MeetupEvent(id=m.event_id, name=row.event_name),
        start_ts=m.start_ts,
        end_ts=m.end_ts,
        max_persons=m.max_persons,
        organizer=MeetupOrganizer(
            id=m.organizer_id,
            username=row.organizer_username,
            email=row.organizer_email,
        ),
        joined_persons_count=row.joined_persons_count or 0,
        is_joined=bool(mapping.get("is_joined", False)),
        status=m.status,
        cancelled_reason=m.cancelled_reason,
        cancelled_at=m.cancelled_at,
        created_at=m.created_at,
        updated_at=m.updated_at,
    )


def _venue_to_schema(venue: VenueModel) -> Venue:
    return Venue(
        id=venue.id,
        name=venue.name,
        open_days=venue.open_days_list,
        open_at=venue.open_at,
        closed_at=venue.closed_at,
        timezone=venue.timezone,
        supported_events=[
            SupportedEvent(
                id=link.event_id,
                name=link.event.name if link.event else "",
                meetups_capacity=link.meetups_capacity,
            )
            for link in venue.supported_events
        ],
    )


class SQLMeetupRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def count_overlapping_venue_event(
        self,
        venue_id: int,
        event_id: int,
        start_ts: int,
        end_ts: int,
        exclude_meetup_id: Optional[int] = None,
    ) -> int:
        query = select(func.count()).select_from(MeetupModel).where(
            MeetupModel.venue_id == venue_id,
            MeetupModel.event_id == event_id,
            MeetupModel.status == MeetupStatus.OPEN.value,
            _overlaps(start_ts, end_ts),
        )
        if exclude_meetup_id is not None:
            query = query.where(MeetupModel.id != exclude_meetup_id)
        result = await self.session.execute(query)
        return result.scalar_one()

    async def save(self, meetup: MeetupRecord) -> int:
        values = meetup.model_dump(exclude={"id"}, mode="json")
        row = None
        if meetup.id is not None:
            row = await self.session.get(MeetupModel, meetup.id)
        if row is None:
            row = MeetupModel(**values)
            if meetup.id is not None:
                row.id = meetup.id
            self.session.add(row)
        else:
            for key, value in values.items():
                setattr(row, key, value)
        await self.session.commit()
        logger.debug(f"Meetup saved: {row.id}")
        return row.id

    async def list(self, filter: GetMeetupFilter) -> List[Meetup]:
        query = _meetup_query().where(MeetupModel.status == MeetupStatus.OPEN.value)
        if filter.event_id is not None:
            query = query.where(MeetupModel.event_id == filter.event_id)
        query = query.order_by(MeetupModel.start_ts.asc(), MeetupModel.id.asc())
        if filter.limit is not None:
            query = query.limit(filter.limit)
        result = await self.session.execute(query)
        return [_row_to_meetup(row) for row in result.all()]

    async def get(self, meetup_id: int, viewer_id: int) -> Tuple[Optional[Meetup], bool]:
        query = _meetup_query(viewer_id).where(MeetupModel.id == meetup_id)
        result = await self.session.execute(query)
        row = result.first()
        if row is None:
            return None, False
        meetup = _row_to_meetup(row)
        meetup.joined_persons = await self.get_joined_persons(meetup_id)
        return meetup, meetup.organizer.id == viewer_id or meetup.is_joined

    async def cancel(self, meetup_id: int, reason: str, at: int) -> None:
        await self.session.execute(
            update(MeetupModel)
            .where(MeetupModel.id == meetup_id)
            .values(
                status=MeetupStatus.CANCELLED.value,
                cancelled_reason=reason,
                cancelled_at=at,
                updated_at=at,
            )
        )
        await self.session.commit()

    async def count_overlapping_for_user(self, user_id: int, start_ts: int, end_ts: int) -> int:
        query = (
            select(func.count())
            .select_from(MeetupUser)
            .join(MeetupModel, MeetupUser.meetup_id == MeetupModel.id)
            .where(
                MeetupUser.user_id == user_id,
                _overlaps(start_ts, end_ts),
            )
        )
        result = await self.session.execute(query)
        return result.scalar_one()

    async def get_incoming_for_user(self, filter: GetIncomingMeetupFilter, now: int) -> List[Meetup]:
        event_ids = parse_id_list(filter.event_ids, "event_ids")
        venue_ids = parse_id_list(filter.venue_ids, "venue_ids")

        member = aliased(MeetupUser)
        query = (
            _meetup_query(filter.user_id)
            .join(member, member.meetup_id == MeetupModel.id)
            .where(member.user_id == filter.user_id, MeetupModel.end_ts > now)
        )
        if filter.status != "all":
            query = query.where(MeetupModel.status == filter.status)
        if event_ids is not None:
            query = query.where(MeetupModel.event_id.in_(sorted(event_ids)))
        if venue_ids is not None:
            query = query.where(MeetupModel.venue_id.in_(sorted(venue_ids)))
        query = query.order_by(MeetupModel.start_ts.asc(), MeetupModel.id.asc())

        result = await self.session.execute(query)
        return [_row_to_meetup(row) for row in result.all()]

    async def get_joined_persons(self, meetup_id: int) -> List[JoinedPerson]:
        query = (
            select(MeetupUser.user_id, MeetupUser.joined_at, UserModel.username, UserModel.email)
            .join(UserModel, UserModel.id == MeetupUser.user_id)
            .where(MeetupUser.meetup_id == meetup_id)
            .order_by(MeetupUser.joined_at.asc(), MeetupUser.user_id.asc())
        )
        result = await self.session.execute(query)
        return [
            JoinedPerson(
                id=row.user_id,
                username=row.username,
                email=row.email,
                joined_at=row.joined_at,
            )
            for row in result.all()
        ]

    @asynccontextmanager
    async def capacity_lock(self, venue_id: int, event_id: int):
        """
        Transaction-scoped advisory lock on PostgreSQL, released by the
        commit of the save or by the rollback below.
        """
        if db_manager.supports_advisory_locks(self.session):
            lock_id = db_manager.generate_lock_id("venue_event", f"{venue_id}:{event_id}")
            await db_manager.acquire_xact_lock(self.session, lock_id)
        try:
            yield
        finally:
            if self.session.in_transaction():
                await self.session.rollback()


class SQLVenueRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def is_event_supported(self, venue_id: int, event_id: int) -> bool:
        return await self.get_event_capacity(venue_id, event_id) is not None

    async def get_event_capacity(self, venue_id: int, event_id: int) -> Optional[int]:
        result = await self.session.execute(
            select(VenueEvent.meetups_capacity).where(
                VenueEvent.venue_id == venue_id,
                VenueEvent.event_id == event_id,
            )
        )
        return result.scalar_one_or_none()

    async def get(self, venue_id: int) -> Optional[Venue]:
        result = await self.session.execute(
            select(VenueModel)
            .options(selectinload(VenueModel.supported_events))
            .where(VenueModel.id == venue_id)
        )
        venue = result.scalar_one_or_none()
        return _venue_to_schema(venue) if venue else None

    async def list(self, event_id: Optional[int] = None) -> List[Venue]:
        query = select(VenueModel).options(selectinload(VenueModel.supported_events))
        if event_id is not None:
            query = query.where(
                VenueModel.supported_events.any(VenueEvent.event_id == event_id)
            )
        query = query.order_by(VenueModel.id.asc())
        result = await self.session.execute(query)
        return [_venue_to_schema(venue) for venue in result.scalars().all()]


class SQLEventRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, event_id: int) -> Optional[Event]:
        event = await self.session.get(EventModel, event_id)
        return Event.model_validate(event) if event else None

    async def list(self) -> List[Event]:
        result = await self.session.execute(select(EventModel).order_by(EventModel.id.asc()))
        return [Event.model_validate(event) for event in result.scalars().all()]


class SQLUserRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, user_id: int) -> Optional[User]:
        user = await self.session.get(UserModel, user_id)
        return User.model_validate(user) if user else None

    async def get_by_username(self, username: str) -> Optional[User]:
        result = await self.session.execute(
            select(UserModel).where(UserModel.username == username)
        )
        user = result.scalar_one_or_none()
        return User.model_validate(user) if user else None


class SQLMembershipRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def join(self, meetup_id: int, user_id: int, joined_at: int) -> None:
        await self.session.merge(
            MeetupUser(meetup_id=meetup_id, user_id=user_id, joined_at=joined_at)
        )
        await self.session.commit()

    async def leave(self, meetup_id: int, user_id: int) -> None:
        await self.session.execute(
            delete(MeetupUser).where(
                MeetupUser.meetup_id == meetup_id,
                MeetupUser.user_id == user_id,
            )
        )
        await self.session.commit()

    async def count(self, meetup_id: int, user_id: int) -> int:
        result = await self.session.execute(
            select(func.count()).select_from(MeetupUser).where(
                MeetupUser.meetup_id == meetup_id,
                MeetupUser.user_id == user_id,
            )
        )
        return result.scalar_one()
