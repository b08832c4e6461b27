"""SQLAlchemy ORM models for MenuTimer."""

from datetime import datetime
from sqlalchemy import Column, String, Text, DateTime
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


class Preference(Base):
    """One key-value entry.  ``value`` holds JSON text."""

    __tablename__ = "preferences"

    key = Column(String(64), primary_key=True)
    value = Column(Text, nullable=False)
    updated_at = Column(
        DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow,
    )

    def __repr__(self) -> str:
        return f"<Preference key={self.key} bytes={len(self.value or '')}>"
