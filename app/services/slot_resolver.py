# app/services/slot_resolver.py
from datetime import date, timedelta
from typing import List

from sqlalchemy.orm import Session

from app.core.config import MAX_CALENDAR_DAYS
from app.core.errors import ValidationError
from app.repositories.availability import AvailabilityRepository
from app.repositories.booking import BookingRepository
from app.services.availability_service import weekday_name


def overlaps(start1, end1, start2, end2):
    return start1 < end2 and end1 > start2


class SlotResolver:
    """
    Maps a companion's weekly pattern onto concrete dates.

    A booking that touches any part of an availability window blocks the
    whole window; windows are never split around bookings.
    """

    def __init__(self, db: Session):
        self.db = db
        self.availability = AvailabilityRepository()
        self.bookings = BookingRepository()

    def _resolve(self, companion_id: int, day: date, bookings=None):
        slots = self.availability.get_slots(self.db, companion_id, day_of_week=weekday_name(day))
        if bookings is None:
            bookings = self.bookings.active_on_date(self.db, companion_id, day)

        open_slots = []
        for slot in slots:
            blocked = any(
                overlaps(slot.start_time, slot.end_time, b.start_time, b.end_time)
                for b in bookings
            )
            if not blocked:
                open_slots.append({"start_time": slot.start_time, "end_time": slot.end_time})
        return slots, open_slots

    def get_open_slots(self, companion_id: int, day: date) -> List[dict]:
        _, open_slots = self._resolve(companion_id, day)
        return open_slots

    def get_availability_calendar(self, companion_id: int, start_date: date, end_date: date) -> List[dict]:
        if start_date > end_date:
            raise ValidationError("start_date must be on or before end_date")
        span = (end_date - start_date).days + 1
        if span > MAX_CALENDAR_DAYS:
            raise ValidationError(f"Date range cannot exceed {MAX_CALENDAR_DAYS} days")

        by_date = {}
        for b in self.bookings.active_in_range(self.db, companion_id, start_date, end_date):
            by_date.setdefault(b.booking_date, []).append(b)

        days = []
        for offset in range(span):
            day = start_date + timedelta(days=offset)
            slots, open_slots = self._resolve(companion_id, day, by_date.get(day, []))
            days.append({
                "date": day,
                "day_of_week": weekday_name(day),
                "total_slots": len(slots),
                "available_slots": len(open_slots),
                "booked_slots": len(slots) - len(open_slots),
                "is_available": len(open_slots) > 0,
                "open_slots": open_slots,
            })
        return days

    def get_bookings_in_range(self, companion_id: int, start_date: date, end_date: date):
        if start_date > end_date:
            raise ValidationError("start_date must be on or before end_date")
        return self.bookings.active_in_range(self.db, companion_id, start_date, end_date)
