# app/db/models/availability.py
import json

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, Integer, String, Text, Time
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.db.base import Base


class AvailabilitySlot(Base):
    """
    Recurring weekly availability window for a companion.
    day_of_week: lower-case weekday name, "monday" .. "sunday"
    start_time, end_time: local times of day
    """
    __tablename__ = "companion_availability"
    __table_args__ = (
        Index("ix_availability_companion_day", "companion_id", "day_of_week", "start_time"),
    )

    id = Column(Integer, primary_key=True, index=True)
    companion_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    day_of_week = Column(String(9), nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    is_available = Column(Boolean, nullable=False, default=True)
    services_offered_json = Column("services_offered", Text, nullable=True)

    companion = relationship("User", back_populates="availabilities")

    @property
    def services_offered(self):
        if not self.services_offered_json:
            return []
        return json.loads(self.services_offered_json)

    @services_offered.setter
    def services_offered(self, value):
        self.services_offered_json = json.dumps(list(value or []))


class AvailabilityAudit(Base):
    """Snapshot of a companion's schedule before and after each replacement."""
    __tablename__ = "availability_audit_log"

    id = Column(Integer, primary_key=True, index=True)
    companion_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    actor_id = Column(Integer, nullable=True)
    old_snapshot = Column(Text, nullable=False)
    new_snapshot = Column(Text, nullable=False)
    origin = Column(String, nullable=True)   # client address of the request
    created_at = Column(DateTime(timezone=True), server_default=func.now())
