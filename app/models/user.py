"""
User model
"""

from sqlalchemy import Column, String
from sqlalchemy.orm import relationship

from app.models.base import BaseModel, EpochTimestampMixin


class User(EpochTimestampMixin, BaseModel):
    """
    User model for authentication and display
    """
    __tablename__ = "user"

    username = Column(String(64), unique=True, nullable=False, index=True)
    email = Column(String(255), nullable=False)
    password_hash = Column(String(255), nullable=False)

    # Relationships
    organized_meetups = relationship("Meetup", back_populates="organizer")

    def __repr__(self):
        return f"<User(id={self.id}, username={self.username})>"
