"""
Event catalog endpoints
"""

from typing import Any, List
from fastapi import APIRouter, Depends

from app.api.deps import get_event_service, run_with_timeout
from app.core.security import get_current_user_id
from app.schemas.event import Event
from app.schemas.response import SuccessResponse
from app.services.catalog_service import EventService

router = APIRouter()


@router.get("", response_model=SuccessResponse[List[Event]])
async def get_events(
    user_id: int = Depends(get_current_user_id),
    service: EventService = Depends(get_event_service)
) -> Any:
    """
    List every event a meetup can be organized for
    """
    events = await run_with_timeout(service.get_events())
    return SuccessResponse(data=events)
