"""Time slot model definitions."""

from enum import Enum

from sqlalchemy import Column, Date, ForeignKey, Integer, String, Time, UniqueConstraint
from slotbook.database import Base


class SlotStatus(str, Enum):
    AVAILABLE = 'available'
    PENDING = 'pending'
    CONFIRMED = 'confirmed'


class TimeSlot(Base):
    """Represents a bookable time slot and its current claim."""
    __tablename__ = "time_slots"
    __table_args__ = (
        UniqueConstraint("date", "start_time", name="uq_time_slots_date_start"),
    )

    id = Column(Integer, primary_key=True)
    date = Column(Date, nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    status = Column(String, nullable=False, default=SlotStatus.AVAILABLE.value)
    booked_by = Column(Integer, ForeignKey("signups.id"), nullable=True)
