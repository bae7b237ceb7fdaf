# app/db/models/booking.py
from datetime import datetime

from sqlalchemy import Column, Date, DateTime, Float, ForeignKey, Index, Integer, Numeric, String, Text, Time
from sqlalchemy.orm import relationship
from app.db.base import Base


class Booking(Base):
    __tablename__ = "bookings"
    __table_args__ = (
        # conflict checks and slot resolution both filter on these
        Index("ix_bookings_companion_date_status", "companion_id", "booking_date", "status"),
    )

    id = Column(Integer, primary_key=True, index=True)

    client_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    companion_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    service_category_id = Column(Integer, ForeignKey("service_categories.id"), nullable=True)

    booking_date = Column(Date, nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    duration_hours = Column(Float, nullable=False)
    total_amount = Column(Numeric(10, 2), nullable=False)

    status = Column(String, nullable=False, default="pending")

    custom_service_name = Column(String, nullable=True)
    custom_service_description = Column(Text, nullable=True)
    special_requests = Column(Text, nullable=True)
    meeting_location = Column(String, nullable=True)
    meeting_location_lat = Column(Float, nullable=True)
    meeting_location_lon = Column(Float, nullable=True)
    meeting_type = Column(String, nullable=False, default="in_person")

    cancelled_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    cancellation_reason = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # relationships
    client = relationship("User", foreign_keys=[client_id])
    companion = relationship("User", foreign_keys=[companion_id])
    service_category = relationship("ServiceCategory", foreign_keys=[service_category_id])
