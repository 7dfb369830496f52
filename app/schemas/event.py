"""
Event schemas
"""

from pydantic import Field

from app.schemas.base import IDSchema


class Event(IDSchema):
    """Event catalog entry"""
    name: str = Field(..., min_length=1, max_length=255)
