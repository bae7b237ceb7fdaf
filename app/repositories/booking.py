"""Booking repository - database operations for bookings"""

from datetime import date, time
from typing import List, Optional

from sqlalchemy import or_, update
from sqlalchemy.orm import Session

from app.db.models.booking import Booking
from app.db.models.user import User

ACTIVE_STATUSES = ("pending", "confirmed")


class BookingRepository:
    """Repository for booking records"""

    @staticmethod
    def get_by_id(db: Session, booking_id: int) -> Optional[Booking]:
        return db.query(Booking).filter(Booking.id == booking_id).first()

    @staticmethod
    def get_for_party(db: Session, booking_id: int, user_id: int) -> Optional[Booking]:
        return (
            db.query(Booking)
            .filter(
                Booking.id == booking_id,
                or_(Booking.client_id == user_id, Booking.companion_id == user_id),
            )
            .first()
        )

    @staticmethod
    def list_for_user(db: Session, user_id: int, as_companion: bool, status: Optional[str], limit: int, offset: int) -> List[Booking]:
        column = Booking.companion_id if as_companion else Booking.client_id
        query = db.query(Booking).filter(column == user_id)
        if status:
            query = query.filter(Booking.status == status)
        return (
            query.order_by(Booking.booking_date.desc(), Booking.start_time.desc())
            .limit(limit)
            .offset(offset)
            .all()
        )

    @staticmethod
    def active_on_date(db: Session, companion_id: int, booking_date: date) -> List[Booking]:
        return (
            db.query(Booking)
            .filter(
                Booking.companion_id == companion_id,
                Booking.booking_date == booking_date,
                Booking.status.in_(ACTIVE_STATUSES),
            )
            .order_by(Booking.start_time)
            .all()
        )

    @staticmethod
    def active_in_range(db: Session, companion_id: int, start_date: date, end_date: date) -> List[Booking]:
        return (
            db.query(Booking)
            .filter(
                Booking.companion_id == companion_id,
                Booking.booking_date >= start_date,
                Booking.booking_date <= end_date,
                Booking.status.in_(ACTIVE_STATUSES),
            )
            .order_by(Booking.booking_date, Booking.start_time)
            .all()
        )

    @staticmethod
    def overlapping(
        db: Session,
        companion_id: int,
        booking_date: date,
        start_time: time,
        end_time: time,
        statuses=ACTIVE_STATUSES,
        exclude_id: Optional[int] = None,
    ) -> List[Booking]:
        """Bookings whose [start, end) intersects the given interval."""
        query = db.query(Booking).filter(
            Booking.companion_id == companion_id,
            Booking.booking_date == booking_date,
            Booking.status.in_(statuses),
            Booking.start_time < end_time,
            Booking.end_time > start_time,
        )
        if exclude_id is not None:
            query = query.filter(Booking.id != exclude_id)
        return query.all()

    @staticmethod
    def lock_companion(db: Session, companion_id: int) -> Optional[User]:
        """Lock the companion row so concurrent writers serialize on their booking set.

        SQLite ignores FOR UPDATE and only takes its write lock on the first
        write, so there a no-op UPDATE on the row takes the lock up front.
        """
        if db.get_bind().dialect.name == "sqlite":
            db.execute(
                update(User).where(User.id == companion_id).values(id=User.id),
                execution_options={"synchronize_session": False},
            )
            return db.query(User).filter(User.id == companion_id).first()
        return db.query(User).filter(User.id == companion_id).with_for_update().first()

    @staticmethod
    def add(db: Session, booking: Booking) -> Booking:
        db.add(booking)
        db.flush()
        return booking
