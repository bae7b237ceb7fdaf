"""Weekly availability - replace and read a companion's recurring schedule"""

import logging
from collections import OrderedDict
from datetime import date
from typing import Dict, Iterable, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.errors import AuthorizationError, ConflictError, ValidationError
from app.core.security import CurrentUser
from app.repositories.availability import AvailabilityRepository

logger = logging.getLogger(__name__)

WEEKDAYS = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]


def weekday_name(day: date) -> str:
    return WEEKDAYS[day.weekday()]


def _snapshot(slots) -> List[dict]:
    return [
        {
            "day_of_week": s.day_of_week,
            "start_time": s.start_time.strftime("%H:%M"),
            "end_time": s.end_time.strftime("%H:%M"),
            "is_available": s.is_available,
            "services_offered": s.services_offered,
        }
        for s in slots
    ]


def normalize_slots(slots: Iterable) -> List[dict]:
    """
    Validate a submitted weekly schedule and return it as plain dicts.

    Each slot needs a known weekday and start_time < end_time. Active slots
    on the same day must not overlap: they are sorted by start time and each
    adjacent pair is compared. The first problem found is raised and
    nothing is returned.
    """
    cleaned = []
    for slot in slots:
        day = (slot.day_of_week or "").strip().lower()
        if day not in WEEKDAYS:
            raise ValidationError(
                f"Invalid day of week: {slot.day_of_week!r}",
                errors={"day_of_week": f"{slot.day_of_week!r} is not a weekday name"},
            )
        if slot.start_time >= slot.end_time:
            raise ValidationError(
                f"Start time must be before end time on {day}",
                errors={day: "start_time must be before end_time"},
            )
        cleaned.append({
            "day_of_week": day,
            "start_time": slot.start_time,
            "end_time": slot.end_time,
            "is_available": slot.is_available,
            "services_offered": [s.strip() for s in slot.services_offered if s and s.strip()],
        })

    by_day: Dict[str, List[dict]] = {}
    for slot in cleaned:
        if slot["is_available"]:
            by_day.setdefault(slot["day_of_week"], []).append(slot)

    for day, day_slots in by_day.items():
        day_slots.sort(key=lambda s: s["start_time"])
        for prev, nxt in zip(day_slots, day_slots[1:]):
            if prev["end_time"] > nxt["start_time"]:
                raise ConflictError(
                    f"Overlapping availability on {day}: "
                    f"{prev['start_time']:%H:%M}-{prev['end_time']:%H:%M} and "
                    f"{nxt['start_time']:%H:%M}-{nxt['end_time']:%H:%M}",
                    errors={day: "time slots overlap"},
                )

    return cleaned


class AvailabilityService:

    def __init__(self, db: Session):
        self.db = db
        self.repo = AvailabilityRepository()

    def set_weekly_availability(self, user: CurrentUser, slots, origin: Optional[str] = None) -> Dict[str, list]:
        if user.role != "companion":
            raise AuthorizationError("Only companions can set availability")

        companion_id = user.id
        cleaned = normalize_slots(slots)

        old = _snapshot(self.repo.get_slots(self.db, companion_id, active_only=False))
        try:
            rows = self.repo.replace_slots(self.db, companion_id, cleaned)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
        logger.info(f"Availability replaced for companion {companion_id}: {len(rows)} slots")

        # audit is best-effort; the schedule above is already committed
        try:
            self.repo.add_audit(self.db, companion_id, user.id, old, _snapshot(rows), origin)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to write availability audit for companion {companion_id}: {e}")

        return self.get_weekly_availability(companion_id)

    def get_weekly_availability(self, companion_id: int, on_date: Optional[date] = None) -> Dict[str, list]:
        """Active slots grouped by weekday, Monday first, each day by start time."""
        day = weekday_name(on_date) if on_date else None
        slots = self.repo.get_slots(self.db, companion_id, day_of_week=day)

        grouped: "OrderedDict[str, list]" = OrderedDict()
        for name in WEEKDAYS:
            day_slots = [s for s in slots if s.day_of_week == name]
            if day_slots:
                grouped[name] = sorted(day_slots, key=lambda s: s.start_time)
        return grouped
