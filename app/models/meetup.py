"""
Meetup and MeetupUser models
"""

import enum

from sqlalchemy import Column, String, Integer, BigInteger, ForeignKey, Text, CheckConstraint, Index
from sqlalchemy.orm import relationship

from app.core.database import Base
from app.models.base import BaseModel, EpochTimestampMixin


class MeetupStatus(str, enum.Enum):
    OPEN = "open"
    CANCELLED = "cancelled"


class Meetup(EpochTimestampMixin, BaseModel):
    """
    A gathering at one venue for one event between two epoch timestamps
    """
    __tablename__ = "meetup"

    name = Column(String(255), nullable=False)
    venue_id = Column(Integer, ForeignKey("venue.id"), nullable=False)
    event_id = Column(Integer, ForeignKey("event.id"), nullable=False)
    start_ts = Column(BigInteger, nullable=False)
    end_ts = Column(BigInteger, nullable=False)
    max_persons = Column(Integer, nullable=False)
    organizer_id = Column(Integer, ForeignKey("user.id"), nullable=False)
    # Stored as plain text so every dialect compares it the same way
    status = Column(String(16), nullable=False, default=MeetupStatus.OPEN.value)
    cancelled_reason = Column(Text)
    cancelled_at = Column(BigInteger)

    # Relationships
    venue = relationship("Venue")
    event = relationship("Event")
    organizer = relationship("User", back_populates="organized_meetups")
    members = relationship("MeetupUser", back_populates="meetup", cascade="all, delete-orphan")

    __table_args__ = (
        CheckConstraint("start_ts > 0 AND start_ts < end_ts", name="ck_meetup_interval"),
        CheckConstraint("max_persons > 0", name="ck_meetup_max_persons_positive"),
        Index("ix_meetup_venue_event_interval", "venue_id", "event_id", "start_ts", "end_ts"),
        Index("ix_meetup_status_start", "status", "start_ts"),
    )

    def __repr__(self):
        return f"<Meetup(id={self.id}, name={self.name}, status={self.status})>"


class MeetupUser(Base):
    """
    Membership of a user in a meetup; kept when the meetup is cancelled
    """
    __tablename__ = "meetup_user"

    meetup_id = Column(Integer, ForeignKey("meetup.id"), primary_key=True)
    user_id = Column(Integer, ForeignKey("user.id"), primary_key=True, index=True)
    joined_at = Column(BigInteger, nullable=False)

    # Relationships
    meetup = relationship("Meetup", back_populates="members")
    user = relationship("User")

    def __repr__(self):
        return f"<MeetupUser(meetup_id={self.meetup_id}, user_id={self.user_id})>"
