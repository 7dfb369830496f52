"""
Clock abstraction so "started" and "finished" checks can run on frozen time
"""

from datetime import datetime, timezone
from typing import Protocol


class Clock(Protocol):
    def now(self) -> datetime:
        ...

    def timestamp(self) -> int:
        ...


class SystemClock:
    """Wall clock, UTC"""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    def timestamp(self) -> int:
        return int(self.now().timestamp())


class FrozenClock:
    """
    Clock pinned to an epoch second; moves only when told to
    """

    def __init__(self, ts: int):
        self._ts = int(ts)

    def now(self) -> datetime:
        return datetime.fromtimestamp(self._ts, tz=timezone.utc)

    def timestamp(self) -> int:
        return self._ts

    def set(self, ts: int) -> None:
        self._ts = int(ts)

    def advance(self, seconds: int) -> None:
        self._ts += int(seconds)
