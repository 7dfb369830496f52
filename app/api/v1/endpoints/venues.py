"""
Venue catalog endpoints
"""

from typing import Any, List, Optional
from fastapi import APIRouter, Depends, Query
from pydantic import ValidationError as PydanticValidationError

from app.api.deps import get_venue_service, run_with_timeout
from app.core.exceptions import ValidationError
from app.core.security import get_current_user_id
from app.schemas.response import SuccessResponse
from app.schemas.venue import Venue, VenueFilter
from app.services.catalog_service import VenueService

router = APIRouter()


@router.get("", response_model=SuccessResponse[List[Venue]])
async def get_venues(
    event_id: Optional[int] = Query(None),
    meetup_start_ts: Optional[int] = Query(None, gt=0),
    meetup_end_ts: Optional[int] = Query(None, gt=0),
    user_id: int = Depends(get_current_user_id),
    service: VenueService = Depends(get_venue_service)
) -> Any:
    """
    List venues, optionally those hosting an event and open for a time window
    """
    try:
        venue_filter = VenueFilter(
            event_id=event_id,
            meetup_start_ts=meetup_start_ts,
            meetup_end_ts=meetup_end_ts
        )
    except PydanticValidationError:
        raise ValidationError("meetup_start_ts and meetup_end_ts must be given together")

    venues = await run_with_timeout(service.get_venues(venue_filter))
    return SuccessResponse(data=venues)


@router.get("/{venue_id}", response_model=SuccessResponse[Venue])
async def get_venue(
    venue_id: int,
    user_id: int = Depends(get_current_user_id),
    service: VenueService = Depends(get_venue_service)
) -> Any:
    """
    Get venue details with supported events and capacities
    """
    venue = await run_with_timeout(service.get_venue(venue_id))
    return SuccessResponse(data=venue)
