"""
Custom application exceptions
"""

from typing import Optional, Dict, Any


class MeetlyException(Exception):
    """Base exception for Meetly application"""

    def __init__(
        self,
        message: str,
        code: str,
        status_code: int = 400,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class DomainError(MeetlyException):
    """Business rule rejection, reported to the caller verbatim"""


class MeetupNotFoundError(DomainError):
    def __init__(self, meetup_id: Any = None):
        super().__init__(
            message="meetup is not found",
            code="ERR_MEETUP_NOT_FOUND",
            status_code=404,
            details={"meetup_id": meetup_id} if meetup_id is not None else None
        )


class VenueNotFoundError(DomainError):
    def __init__(self, venue_id: Any = None):
        super().__init__(
            message="venue is not found",
            code="ERR_VENUE_NOT_FOUND",
            status_code=404,
            details={"venue_id": venue_id} if venue_id is not None else None
        )


class InvalidEventError(DomainError):
    def __init__(self):
        super().__init__(
            message="event is not supported by the venue",
            code="ERR_INVALID_EVENT",
            status_code=400
        )


class ExceedVenueCapacityError(DomainError):
    def __init__(self):
        super().__init__(
            message="venue capacity is full on the designated meetup time",
            code="ERR_EXCEED_VENUE_CAPACITY",
            status_code=409
        )


class VenueIsClosedError(DomainError):
    def __init__(self):
        super().__init__(
            message="venue is closed on the designated meetup time",
            code="ERR_VENUE_IS_CLOSED",
            status_code=409
        )


class ForbiddenError(DomainError):
    def __init__(self):
        super().__init__(
            message="user doesn't have enough authorization",
            code="ERR_FORBIDDEN_ACCESS",
            status_code=403
        )


class MaxPersonsLessThanJoinedPersonsError(DomainError):
    def __init__(self, max_persons: int, joined_persons_count: int):
        super().__init__(
            message="max persons is less than number of joined persons",
            code="ERR_MAX_PERSONS_LESS_THAN_JOINED_PERSONS",
            status_code=409,
            details={
                "max_persons": max_persons,
                "joined_persons_count": joined_persons_count
            }
        )


class MeetupStartedError(DomainError):
    def __init__(self):
        super().__init__(
            message="meetup is already started",
            code="ERR_MEETUP_STARTED",
            status_code=409
        )


class MeetupFinishedError(DomainError):
    def __init__(self):
        super().__init__(
            message="meetup is already finished",
            code="ERR_MEETUP_FINISHED",
            status_code=409
        )


class MeetupCancelledError(DomainError):
    def __init__(self):
        super().__init__(
            message="meetup is cancelled",
            code="ERR_MEETUP_CANCELLED",
            status_code=409
        )


class MeetupClosedError(DomainError):
    def __init__(self):
        super().__init__(
            message="meetup has reached its maximum number of persons",
            code="ERR_MEETUP_CLOSED",
            status_code=409
        )


class MeetupOverlapsError(DomainError):
    def __init__(self):
        super().__init__(
            message="meetup overlaps with other meetup that user already joined",
            code="ERR_MEETUP_OVERLAPS",
            status_code=409
        )


class UserNotParticipantError(DomainError):
    def __init__(self):
        super().__init__(
            message="user is not a participant of the meetup",
            code="ERR_USER_NOT_PARTICIPANT",
            status_code=403
        )


class ValidationError(MeetlyException):
    """Validation errors"""

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(
            message=message,
            code="ERR_BAD_REQUEST",
            status_code=400,
            details=details
        )


class AuthenticationError(MeetlyException):
    """Authentication related errors"""

    def __init__(
        self,
        message: str = "invalid access token",
        code: str = "ERR_INVALID_ACCESS_TOKEN",
        status_code: int = 401
    ):
        super().__init__(
            message=message,
            code=code,
            status_code=status_code
        )


class InvalidCredentialsError(AuthenticationError):
    def __init__(self):
        super().__init__(
            message="invalid username or password",
            code="ERR_INVALID_CREDS",
            status_code=400
        )


class InternalError(MeetlyException):
    """Infrastructure failure, the cause is chained but never rendered"""

    def __init__(self, operation: str, message: str = "an internal error occurred"):
        super().__init__(
            message=message,
            code="ERR_INTERNAL_ERROR",
            status_code=500,
            details={"operation": operation}
        )
        self.operation = operation


class ExternalServiceError(InternalError):
    """External service error"""

    def __init__(self, service: str, operation: str, message: Optional[str] = None):
        super().__init__(
            operation=operation,
            message=message or f"external service {service} is unavailable"
        )
        self.code = "ERR_EXTERNAL_SERVICE"
        self.status_code = 503
        self.details["service"] = service


class NotificationError(ExternalServiceError):
    def __init__(self, operation: str, message: Optional[str] = None):
        super().__init__(service="email", operation=operation, message=message)
