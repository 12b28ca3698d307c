"""Signup model definitions."""

from datetime import datetime, timezone

from sqlalchemy import JSON, Boolean, Column, DateTime, Float, Integer, String
from slotbook.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Signup(Base):
    """Represents a visitor's booking or interest request."""
    __tablename__ = "signups"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    email = Column(String, nullable=False)
    phone = Column(String)
    experience = Column(Float)
    location = Column(String)
    availability = Column(String)
    selected_slots = Column(JSON, nullable=False, default=list)  # snapshot at submission time
    no_availability = Column(Boolean, nullable=False, default=False)
    message = Column(String)
    created_at = Column(DateTime(timezone=True), default=_utcnow, index=True)
