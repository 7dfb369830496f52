"""
User and session schemas
"""

from typing import Optional
from pydantic import ConfigDict, Field

from app.schemas.base import BaseSchema, IDSchema


class User(IDSchema):
    """User identity; the password hash never leaves the service layer"""
    username: str
    email: str
    password_hash: Optional[str] = Field(default=None, exclude=True, repr=False)


class SessionCreate(BaseSchema):
    """Login request"""
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "username": "alice",
                "password": "alice123"
            }
        }
    )


class SessionResponse(BaseSchema):
    """Issued access token"""
    user_id: int
    username: str
    email: str
    access_token: str
    exp: int
