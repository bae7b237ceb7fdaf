# app/api/deps.py
from fastapi import Depends
from sqlalchemy.orm import Session

from app.db.base import SessionLocal, get_db
from app.services.availability_service import AvailabilityService
from app.services.booking_service import BookingService
from app.services.notifications import NotificationSender
from app.services.review_service import ReviewService
from app.services.slot_resolver import SlotResolver


def get_availability_service(db: Session = Depends(get_db)) -> AvailabilityService:
    return AvailabilityService(db)


def get_slot_resolver(db: Session = Depends(get_db)) -> SlotResolver:
    return SlotResolver(db)


def get_booking_service(db: Session = Depends(get_db)) -> BookingService:
    return BookingService(db)


def get_review_service(db: Session = Depends(get_db)) -> ReviewService:
    return ReviewService(db)


def get_notifier() -> NotificationSender:
    return NotificationSender(SessionLocal)
