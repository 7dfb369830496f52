"""
Demo data seeding for an empty database
"""
import time

from sqlalchemy import select
from sqlalchemy.ext.asyncio import async_sessionmaker
import logging

from app.core.database import async_session
from app.core.security import get_password_hash
from app.models.event import Event
from app.models.user import User
from app.models.venue import Venue, VenueEvent

logger = logging.getLogger(__name__)


DEMO_EVENTS = [
    {"id": 1, "name": "Futsal"},
    {"id": 2, "name": "Board Games"},
    {"id": 3, "name": "Running"},
]

DEMO_VENUES = [
    {
        "id": 1,
        "name": "Jakarta Sports Hall",
        "open_days": "1,2,3,4,5,6",
        "open_at": "08:00",
        "closed_at": "22:00",
        "timezone": "Asia/Jakarta",
        # event_id -> meetups_capacity
        "supported_events": {1: 2, 3: 5},
    },
    {
        "id": 2,
        "name": "Riyadh Community Cafe",
        "open_days": "0,1,2,3,4,6",
        "open_at": "10:00",
        "closed_at": "23:00",
        "timezone": "Asia/Riyadh",
        "supported_events": {2: 3},
    },
    {
        "id": 3,
        "name": "Berlin Park Pavilion",
        "open_days": "0,6",
        "open_at": "07:00",
        "closed_at": "19:00",
        "timezone": "Europe/Berlin",
        "supported_events": {2: 1, 3: 4},
    },
]

DEMO_USERS = [
    {"id": 1, "username": "alice", "email": "alice@meetly.app", "password": "alice123"},
    {"id": 2, "username": "bob", "email": "bob@meetly.app", "password": "bob123"},
    {"id": 3, "username": "carol", "email": "carol@meetly.app", "password": "carol123"},
]


async def seed_if_empty(session_factory: async_sessionmaker = async_session) -> bool:
    """
    Seed events, venues and users only if the database has no events yet.

    Returns:
        True when demo data was inserted
    """
    async with session_factory() as session:
        result = await session.execute(select(Event).limit(1))
        if result.scalar_one_or_none():
            logger.info("Database already contains data, skipping seeding")
            return False

        logger.info("Empty database detected, starting auto-seeding...")
        now = int(time.time())

        try:
            for event in DEMO_EVENTS:
                session.add(Event(**event))

            for venue_data in DEMO_VENUES:
                venue_data = dict(venue_data)
                capacities = venue_data.pop("supported_events")
                session.add(Venue(**venue_data))
                for event_id, capacity in capacities.items():
                    session.add(
                        VenueEvent(
                            venue_id=venue_data["id"],
                            event_id=event_id,
                            meetups_capacity=capacity
                        )
                    )

            for user_data in DEMO_USERS:
                session.add(
                    User(
                        id=user_data["id"],
                        username=user_data["username"],
                        email=user_data["email"],
                        password_hash=get_password_hash(user_data["password"]),
                        created_at=now,
                        updated_at=now
                    )
                )

            await session.commit()
            logger.info(
                f"Seeded {len(DEMO_EVENTS)} events, {len(DEMO_VENUES)} venues "
                f"and {len(DEMO_USERS)} users"
            )
            return True

        except Exception as e:
            logger.error(f"Seeding failed: {e}")
            await session.rollback()
            raise
