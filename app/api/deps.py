"""
Request-scoped service wiring
"""

import asyncio
from typing import Awaitable, TypeVar

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.clock import Clock, SystemClock
from app.core.database import get_session
from app.core.security import SecurityManager, get_security_manager
from app.repositories.sql import (
    SQLEventRepository,
    SQLMeetupRepository,
    SQLMembershipRepository,
    SQLUserRepository,
    SQLVenueRepository,
)
from app.services.catalog_service import EventService, VenueService
from app.services.meetup_service import MeetupService
from app.services.notification_service import Notifier, get_notifier
from app.services.session_service import SessionService

T = TypeVar("T")

system_clock = SystemClock()


def get_clock() -> Clock:
    return system_clock


async def run_with_timeout(awaitable: Awaitable[T]) -> T:
    """
    Await a service call under REQUEST_TIMEOUT_SECONDS. On timeout the call
    is cancelled and asyncio.TimeoutError reaches the exception handler.
    """
    return await asyncio.wait_for(awaitable, timeout=settings.REQUEST_TIMEOUT_SECONDS)


def get_meetup_service(
    session: AsyncSession = Depends(get_session),
    notifier: Notifier = Depends(get_notifier),
    clock: Clock = Depends(get_clock),
) -> MeetupService:
    return MeetupService(
        meetups=SQLMeetupRepository(session),
        venues=SQLVenueRepository(session),
        events=SQLEventRepository(session),
        users=SQLUserRepository(session),
        memberships=SQLMembershipRepository(session),
        notifier=notifier,
        clock=clock,
    )


def get_event_service(session: AsyncSession = Depends(get_session)) -> EventService:
    return EventService(SQLEventRepository(session))


def get_venue_service(session: AsyncSession = Depends(get_session)) -> VenueService:
    return VenueService(SQLVenueRepository(session))


def get_session_service(
    session: AsyncSession = Depends(get_session),
    security: SecurityManager = Depends(get_security_manager),
    clock: Clock = Depends(get_clock),
) -> SessionService:
    return SessionService(SQLUserRepository(session), security, clock)
