"""
Base model classes with common fields
"""

from sqlalchemy import Column, Integer, BigInteger

from app.core.database import Base


class BaseModel(Base):
    """
    Abstract base model with an auto-incremented integer id
    """
    __abstract__ = True

    id = Column(
        Integer,
        primary_key=True,
        autoincrement=True,
        nullable=False
    )


class EpochTimestampMixin:
    """
    created_at / updated_at stored as epoch seconds, set by the caller
    """
    created_at = Column(BigInteger, nullable=False)
    updated_at = Column(BigInteger, nullable=False)
