"""
Read-side shaping of meetups
"""

from app.schemas.meetup import CancelMeetupResponse, Meetup, MeetupSummary


def project_for_viewer(meetup: Meetup, privileged: bool) -> Meetup:
    """
    Organizers and members see the joined persons list and cancellation
    details. Anyone else gets them removed; status stays visible.
    """
    projected = meetup.model_copy(deep=True)
    if privileged:
        if projected.joined_persons is None:
            projected.joined_persons = []
        return projected

    projected.joined_persons = None
    projected.cancelled_reason = None
    projected.cancelled_at = None
    return projected


def to_summary(meetup: Meetup) -> MeetupSummary:
    return MeetupSummary(
        id=meetup.id,
        name=meetup.name,
        venue=meetup.venue,
        event=meetup.event,
        start_ts=meetup.start_ts,
        end_ts=meetup.end_ts,
        max_persons=meetup.max_persons,
        organizer=meetup.organizer,
        joined_persons_count=meetup.joined_persons_count,
        status=meetup.status,
    )


def to_cancellation(meetup: Meetup) -> CancelMeetupResponse:
    return CancelMeetupResponse(
        id=meetup.id,
        name=meetup.name,
        venue=meetup.venue,
        event=meetup.event,
        start_ts=meetup.start_ts,
        end_ts=meetup.end_ts,
        max_persons=meetup.max_persons,
        organizer=meetup.organizer,
        status=meetup.status,
        cancelled_reason=meetup.cancelled_reason or "",
        cancelled_at=meetup.cancelled_at or 0,
    )
