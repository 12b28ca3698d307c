"""Setting model definitions."""

from sqlalchemy import Column, Integer, String, Text
from slotbook.database import Base


class Setting(Base):
    """Represents a single key/value site setting."""
    __tablename__ = "settings"

    id = Column(Integer, primary_key=True)
    key = Column(String, unique=True, nullable=False)
    value = Column(Text)
