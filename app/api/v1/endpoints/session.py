"""
Session endpoints
"""

from typing import Any
from fastapi import APIRouter, Depends

from app.api.deps import get_session_service, run_with_timeout
from app.schemas.response import SuccessResponse
from app.schemas.user import SessionCreate, SessionResponse
from app.services.session_service import SessionService

router = APIRouter()


@router.post("", response_model=SuccessResponse[SessionResponse])
async def create_session(
    credentials: SessionCreate,
    service: SessionService = Depends(get_session_service)
) -> Any:
    """
    Login with username and password, returns a bearer access token
    """
    session = await run_with_timeout(
        service.create_session(credentials.username, credentials.password)
    )
    return SuccessResponse(data=session)
