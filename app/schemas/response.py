"""
Generic response schemas
"""

import time
from pydantic import BaseModel, Field
from typing import Generic, Optional, TypeVar

T = TypeVar('T')


def _epoch_now() -> int:
    return int(time.time())


class SuccessResponse(BaseModel, Generic[T]):
    """Generic success envelope"""
    ok: bool = True
    data: Optional[T] = None
    ts: int = Field(default_factory=_epoch_now)


class ErrorResponse(BaseModel):
    """Generic error envelope"""
    ok: bool = False
    err: str
    msg: str
    ts: int = Field(default_factory=_epoch_now)
