"""
Test configuration and fixtures
In-memory service fixtures, an aiosqlite database and an app client
"""

import os
import pytest
import pytest_asyncio
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool
from httpx import AsyncClient, ASGITransport

# Set test environment
os.environ["APP_ENV"] = "testing"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["JWT_SECRET_KEY"] = "meetly-test-secret-key-0123456789abcdef"
os.environ["NOTIFICATION_BACKEND"] = "log"
os.environ["LOG_FORMAT"] = "text"

# Import all models BEFORE creating fixtures (create_all needs them registered)
from app.core.database import Base
from app.core.clock import FrozenClock
from app.core.security import security_manager
from app.models.event import Event as EventModel
from app.models.user import User as UserModel
from app.models.venue import Venue as VenueModel, VenueEvent
from app.repositories.memory import (
    InMemoryStore,
    InMemoryEventRepository,
    InMemoryMeetupRepository,
    InMemoryMembershipRepository,
    InMemoryUserRepository,
    InMemoryVenueRepository,
)
from app.repositories.sql import (
    SQLEventRepository,
    SQLMeetupRepository,
    SQLMembershipRepository,
    SQLUserRepository,
    SQLVenueRepository,
)
from app.schemas.event import Event
from app.schemas.user import User
from app.schemas.venue import SupportedEvent, Venue
from app.services.meetup_service import MeetupService

from helpers import EVENTS, EVENT_NAMES, USERS, VENUES, RecordingNotifier, ts


@pytest.fixture
def clock():
    """Frozen at Monday 2024-01-01 00:00 UTC"""
    return FrozenClock(ts(1, 0))


@pytest.fixture
def notifier():
    return RecordingNotifier()


# In-memory backend
@pytest.fixture
def store():
    """In-memory store seeded with the shared catalog"""
    store = InMemoryStore()
    for event in EVENTS:
        store.add_event(Event(**event))
    for venue in VENUES:
        store.add_venue(
            Venue(
                id=venue["id"],
                name=venue["name"],
                open_days=venue["open_days"],
                open_at=venue["open_at"],
                closed_at=venue["closed_at"],
                timezone=venue["timezone"],
                supported_events=[
                    SupportedEvent(id=event_id, name=EVENT_NAMES[event_id], meetups_capacity=capacity)
                    for event_id, capacity in venue["capacities"].items()
                ],
            )
        )
    for user in USERS:
        store.add_user(User(**user))
    return store


@pytest.fixture
def service(store, notifier, clock) -> MeetupService:
    """Meetup service over the in-memory store"""
    return MeetupService(
        meetups=InMemoryMeetupRepository(store),
        venues=InMemoryVenueRepository(store),
        events=InMemoryEventRepository(store),
        users=InMemoryUserRepository(store),
        memberships=InMemoryMembershipRepository(store),
        notifier=notifier,
        clock=clock,
    )


# SQL backend
@pytest_asyncio.fixture
async def test_db():
    """aiosqlite in-memory engine with the schema and the shared catalog"""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_maker() as session:
        for event in EVENTS:
            session.add(EventModel(**event))
        for venue in VENUES:
            session.add(
                VenueModel(
                    id=venue["id"],
                    name=venue["name"],
                    open_days=",".join(str(day) for day in venue["open_days"]),
                    open_at=venue["open_at"],
                    closed_at=venue["closed_at"],
                    timezone=venue["timezone"],
                )
            )
            for event_id, capacity in venue["capacities"].items():
                session.add(VenueEvent(venue_id=venue["id"], event_id=event_id, meetups_capacity=capacity))
        for user in USERS:
            session.add(UserModel(password_hash="!", created_at=0, updated_at=0, **user))
        await session.commit()

    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(test_db):
    return async_sessionmaker(test_db, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_maker) -> AsyncGenerator[AsyncSession, None]:
    """Create database session for tests"""
    async with session_maker() as session:
        try:
            yield session
        finally:
            if session.in_transaction():
                await session.rollback()


@pytest.fixture
def sql_service(db_session, notifier, clock) -> MeetupService:
    """Meetup service over the SQL repositories"""
    return MeetupService(
        meetups=SQLMeetupRepository(db_session),
        venues=SQLVenueRepository(db_session),
        events=SQLEventRepository(db_session),
        users=SQLUserRepository(db_session),
        memberships=SQLMembershipRepository(db_session),
        notifier=notifier,
        clock=clock,
    )


# HTTP
@pytest_asyncio.fixture
async def client(session_maker, notifier, clock):
    """Create test client with dependency overrides"""
    from app.main import app
    from app.api.deps import get_clock
    from app.core.database import get_session
    from app.services.notification_service import get_notifier

    async def override_get_session():
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_notifier] = lambda: notifier
    app.dependency_overrides[get_clock] = lambda: clock

    try:
        transport = ASGITransport(app=app, raise_app_exceptions=False)
        async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
            yield ac
    finally:
        app.dependency_overrides.clear()


def auth_headers(user_id: int) -> dict:
    token, _ = security_manager.create_access_token(user_id)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def organizer_headers():
    from helpers import ORGANIZER_ID
    return auth_headers(ORGANIZER_ID)


@pytest.fixture
def member_headers():
    return auth_headers(1)


@pytest.fixture
def outsider_headers():
    return auth_headers(2)
