"""
Venue and VenueEvent models
"""

from typing import List

from sqlalchemy import Column, String, Integer, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship

from app.core.database import Base
from app.models.base import BaseModel


class Venue(BaseModel):
    """
    Physical location with opening hours and a local timezone
    """
    __tablename__ = "venue"

    name = Column(String(255), nullable=False)
    open_days = Column(String(32), nullable=False)  # comma-separated, 0=Sunday..6=Saturday
    open_at = Column(String(5), nullable=False)  # HH:MM
    closed_at = Column(String(5), nullable=False)  # HH:MM
    timezone = Column(String(64), nullable=False)

    # Relationships
    supported_events = relationship(
        "VenueEvent",
        back_populates="venue",
        cascade="all, delete-orphan",
        order_by="VenueEvent.event_id"
    )

    __table_args__ = (
        CheckConstraint("open_at < closed_at", name="ck_venue_open_before_close"),
    )

    @property
    def open_days_list(self) -> List[int]:
        return [int(day) for day in self.open_days.split(",") if day.strip()]

    def __repr__(self):
        return f"<Venue(id={self.id}, name={self.name}, timezone={self.timezone})>"


class VenueEvent(Base):
    """
    Events a venue supports and how many overlapping meetups of each it takes
    """
    __tablename__ = "venue_event"

    venue_id = Column(Integer, ForeignKey("venue.id"), primary_key=True)
    event_id = Column(Integer, ForeignKey("event.id"), primary_key=True)
    meetups_capacity = Column(Integer, nullable=False)

    # Relationships
    venue = relationship("Venue", back_populates="supported_events")
    event = relationship("Event", back_populates="venue_links", lazy="joined")

    __table_args__ = (
        CheckConstraint("meetups_capacity > 0", name="ck_venue_event_capacity_positive"),
    )

    def __repr__(self):
        return f"<VenueEvent(venue_id={self.venue_id}, event_id={self.event_id}, capacity={self.meetups_capacity})>"
