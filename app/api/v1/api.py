"""
Main API Router
Aggregates all API endpoints for v1
"""

from fastapi import APIRouter
from app.api.v1.endpoints import (
    session,
    events,
    venues,
    meetups,
    incoming_meetups
)

api_router = APIRouter()

# Include all routers
api_router.include_router(session.router, prefix="/session", tags=["session"])
api_router.include_router(events.router, prefix="/events", tags=["events"])
api_router.include_router(venues.router, prefix="/venues", tags=["venues"])
api_router.include_router(meetups.router, prefix="/meetups", tags=["meetups"])
api_router.include_router(incoming_meetups.router, prefix="/incoming-meetups", tags=["incoming-meetups"])
