"""Availability repository - database operations for weekly availability"""

import json
from typing import List, Optional

from sqlalchemy.orm import Session

from app.db.models.availability import AvailabilityAudit, AvailabilitySlot


class AvailabilityRepository:
    """Repository for a companion's recurring weekly schedule"""

    @staticmethod
    def get_slots(db: Session, companion_id: int, day_of_week: Optional[str] = None, active_only: bool = True) -> List[AvailabilitySlot]:
        query = db.query(AvailabilitySlot).filter(AvailabilitySlot.companion_id == companion_id)
        if day_of_week is not None:
            query = query.filter(AvailabilitySlot.day_of_week == day_of_week)
        if active_only:
            query = query.filter(AvailabilitySlot.is_available.is_(True))
        return query.order_by(AvailabilitySlot.start_time).all()

    @staticmethod
    def replace_slots(db: Session, companion_id: int, slots: List[dict]) -> List[AvailabilitySlot]:
        """Delete every slot for the companion and insert the new set. Caller commits."""
        db.query(AvailabilitySlot).filter(
            AvailabilitySlot.companion_id == companion_id
        ).delete()

        rows = []
        for slot in slots:
            row = AvailabilitySlot(
                companion_id=companion_id,
                day_of_week=slot["day_of_week"],
                start_time=slot["start_time"],
                end_time=slot["end_time"],
                is_available=slot["is_available"],
            )
            row.services_offered = slot["services_offered"]
            rows.append(row)
        db.add_all(rows)
        db.flush()
        return rows

    @staticmethod
    def add_audit(db: Session, companion_id: int, actor_id: Optional[int], old: list, new: list, origin: Optional[str]) -> AvailabilityAudit:
        audit = AvailabilityAudit(
            companion_id=companion_id,
            actor_id=actor_id,
            old_snapshot=json.dumps(old),
            new_snapshot=json.dumps(new),
            origin=origin,
        )
        db.add(audit)
        db.commit()
        return audit
