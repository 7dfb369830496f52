"""
Meetup endpoints
"""

from typing import Any, List, Optional
from fastapi import APIRouter, Depends, Query

from app.api.deps import get_meetup_service, run_with_timeout
from app.config import settings
from app.core.security import get_current_user_id
from app.schemas.meetup import (
    CancelMeetupResponse,
    CreateMeetupRequest,
    GetMeetupFilter,
    Meetup,
    MeetupSummary,
    UpdateMeetupRequest,
)
from app.schemas.response import SuccessResponse
from app.services.meetup_service import MeetupService

router = APIRouter()


@router.post("", response_model=SuccessResponse[Meetup], response_model_exclude_none=True)
async def create_meetup(
    meetup_data: CreateMeetupRequest,
    user_id: int = Depends(get_current_user_id),
    service: MeetupService = Depends(get_meetup_service)
) -> Any:
    """
    Create a meetup organized by the current user
    """
    meetup = await run_with_timeout(service.create_meetup(meetup_data, organizer_id=user_id))
    return SuccessResponse(data=meetup)


@router.get("", response_model=SuccessResponse[List[MeetupSummary]])
async def get_meetups(
    event_id: Optional[int] = Query(None),
    limit: Optional[int] = Query(None, ge=1),
    user_id: int = Depends(get_current_user_id),
    service: MeetupService = Depends(get_meetup_service)
) -> Any:
    """
    List open meetups, nearest first
    """
    meetup_filter = GetMeetupFilter(
        event_id=event_id,
        limit=limit if limit is not None else settings.MEETUPS_DEFAULT_LIMIT
    )
    meetups = await run_with_timeout(service.get_meetups(meetup_filter))
    return SuccessResponse(data=meetups)


@router.get("/{meetup_id}", response_model=SuccessResponse[Meetup], response_model_exclude_none=True)
async def get_meetup(
    meetup_id: int,
    user_id: int = Depends(get_current_user_id),
    service: MeetupService = Depends(get_meetup_service)
) -> Any:
    """
    Get meetup details; joined persons and cancellation details are only
    shown to the organizer and members
    """
    meetup = await run_with_timeout(service.get_meetup(meetup_id, viewer_id=user_id))
    return SuccessResponse(data=meetup)


@router.put("/{meetup_id}", response_model=SuccessResponse[Meetup], response_model_exclude_none=True)
async def update_meetup(
    meetup_id: int,
    meetup_data: UpdateMeetupRequest,
    user_id: int = Depends(get_current_user_id),
    service: MeetupService = Depends(get_meetup_service)
) -> Any:
    """
    Update name, time window or max persons (organizer only)
    """
    meetup = await run_with_timeout(service.update_meetup(meetup_id, meetup_data, user_id=user_id))
    return SuccessResponse(data=meetup)


@router.delete("/{meetup_id}", response_model=SuccessResponse[CancelMeetupResponse])
async def cancel_meetup(
    meetup_id: int,
    cancelled_reason: str = Query(""),
    user_id: int = Depends(get_current_user_id),
    service: MeetupService = Depends(get_meetup_service)
) -> Any:
    """
    Cancel a meetup that hasn't started (organizer only)
    """
    cancelled = await run_with_timeout(
        service.cancel_meetup(meetup_id, user_id=user_id, reason=cancelled_reason)
    )
    return SuccessResponse(data=cancelled)
