"""
Incoming meetup endpoints: meetups the current user joins, joined or leaves
"""

from typing import Any, List, Optional
from fastapi import APIRouter, Depends, Query

from app.api.deps import get_meetup_service, run_with_timeout
from app.core.security import get_current_user_id
from app.schemas.meetup import GetIncomingMeetupFilter, Meetup
from app.schemas.response import SuccessResponse
from app.services.meetup_service import MeetupService

router = APIRouter()


@router.get("", response_model=SuccessResponse[List[Meetup]], response_model_exclude_none=True)
async def get_incoming_meetups(
    status: str = Query("all"),
    event_ids: Optional[str] = Query(None),
    venue_ids: Optional[str] = Query(None),
    user_id: int = Depends(get_current_user_id),
    service: MeetupService = Depends(get_meetup_service)
) -> Any:
    """
    Meetups the current user joined that haven't finished.
    status is one of open, cancelled, all; id filters are comma-separated.
    """
    incoming_filter = GetIncomingMeetupFilter(
        user_id=user_id,
        status=status,
        event_ids=event_ids,
        venue_ids=venue_ids
    )
    meetups = await run_with_timeout(service.get_incoming_meetups(incoming_filter))
    return SuccessResponse(data=meetups)


@router.put("/{meetup_id}", response_model=SuccessResponse[Meetup], response_model_exclude_none=True)
async def join_meetup(
    meetup_id: int,
    user_id: int = Depends(get_current_user_id),
    service: MeetupService = Depends(get_meetup_service)
) -> Any:
    """
    Join a meetup
    """
    meetup = await run_with_timeout(service.join_meetup(meetup_id, user_id=user_id))
    return SuccessResponse(data=meetup)


@router.delete("/{meetup_id}", response_model=SuccessResponse[None], response_model_exclude_none=True)
async def leave_meetup(
    meetup_id: int,
    user_id: int = Depends(get_current_user_id),
    service: MeetupService = Depends(get_meetup_service)
) -> Any:
    """
    Leave a joined meetup
    """
    await run_with_timeout(service.leave_meetup(meetup_id, user_id=user_id))
    return SuccessResponse()
