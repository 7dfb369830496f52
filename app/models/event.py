"""
Event model
"""

from sqlalchemy import Column, String
from sqlalchemy.orm import relationship

from app.models.base import BaseModel


class Event(BaseModel):
    """
    Catalog of activities a meetup can be an instance of
    """
    __tablename__ = "event"

    name = Column(String(255), nullable=False)

    # Relationships
    venue_links = relationship("VenueEvent", back_populates="event", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Event(id={self.id}, name={self.name})>"
