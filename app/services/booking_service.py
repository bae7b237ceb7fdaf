"""Booking lifecycle - creation, status transitions, approval"""

import logging
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Callable, List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import DEFAULT_HOURLY_RATE, MAX_BOOKING_HOURS, MIN_BOOKING_HOURS
from app.core.errors import AuthorizationError, ConflictError, NotFoundError, ValidationError
from app.core.security import CurrentUser
from app.db.models.booking import Booking
from app.repositories.booking import BookingRepository
from app.repositories.directory import DirectoryRepository
from app.schemas.booking import BookingCreate
from app.services.address_validator import validate_meeting_location

logger = logging.getLogger(__name__)

STATUSES = ("pending", "confirmed", "cancelled", "completed", "no_show")
MEETING_TYPES = ("in_person", "virtual")

# (from, to) -> parties allowed to make the move
TRANSITIONS = {
    ("pending", "confirmed"): {"companion"},
    ("pending", "cancelled"): {"client", "companion"},
    ("confirmed", "cancelled"): {"client", "companion"},
    ("confirmed", "completed"): {"companion"},
    ("confirmed", "no_show"): {"companion"},
}

AUTO_CANCEL_REASON = "Time slot was booked by another client"


def check_transition(current: str, new: str, party: str) -> None:
    """Raise AuthorizationError unless `party` may move a booking from `current` to `new`."""
    allowed = TRANSITIONS.get((current, new), set())
    if party not in allowed:
        raise AuthorizationError(
            f"Cannot change booking status from {current} to {new} as {party}",
            errors={"status": f"{current}->{new} not allowed"},
        )


def duration_hours(booking_date, start_time, end_time) -> float:
    start = datetime.combine(booking_date, start_time)
    end = datetime.combine(booking_date, end_time)
    return (end - start).total_seconds() / 3600


def price(hours: float, hourly_rate) -> Decimal:
    amount = Decimal(str(hours)) * Decimal(str(hourly_rate))
    return amount.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


class BookingService:

    def __init__(
        self,
        db: Session,
        address_validator=validate_meeting_location,
        now: Callable[[], datetime] = datetime.now,
    ):
        self.db = db
        self.repo = BookingRepository()
        self.directory = DirectoryRepository()
        self.address_validator = address_validator
        self.now = now

    # ------------------------------------------------------------------
    # creation
    # ------------------------------------------------------------------
    def create_booking(self, client_id: int, params: BookingCreate) -> Booking:
        missing = [
            name for name in ("companion_id", "booking_date", "start_time", "end_time")
            if getattr(params, name) is None
        ]
        if missing:
            raise ValidationError(
                "Please provide all required fields: companion_id, booking_date, start_time, end_time",
                errors={name: "required" for name in missing},
            )

        if client_id == params.companion_id:
            raise ValidationError("You cannot book yourself as a companion")

        if datetime.combine(params.booking_date, params.start_time) <= self.now():
            raise ValidationError(
                "Booking date and time must be in the future",
                errors={"booking_date": "must be in the future"},
            )

        if not self.directory.is_bookable_companion(self.db, params.companion_id):
            raise NotFoundError("Companion not found or not approved")

        if params.service_category_id is not None and params.custom_service is not None:
            raise ValidationError(
                "Choose either a service category or a custom service, not both",
                errors={"service_category_id": "cannot be combined with custom_service"},
            )

        hourly_rate = DEFAULT_HOURLY_RATE
        if params.service_category_id is not None:
            category = self.directory.get_active_category(self.db, params.service_category_id)
            if not category:
                raise NotFoundError("Service category not found or inactive")
            hourly_rate = category.base_price

        if params.custom_service is not None and not params.custom_service.name.strip():
            raise ValidationError("Custom service name is required", errors={"custom_service.name": "required"})

        meeting_type = params.meeting_type or "in_person"
        if meeting_type not in MEETING_TYPES:
            raise ValidationError(
                "Invalid meeting type. Must be in_person or virtual",
                errors={"meeting_type": "must be in_person or virtual"},
            )

        address = self.address_validator(
            params.meeting_location, meeting_type, params.meeting_location_lat, params.meeting_location_lon,
        )
        if not address.is_valid:
            raise ValidationError(
                "Invalid meeting location: " + "; ".join(address.errors),
                errors={"meeting_location": "; ".join(address.errors)},
            )
        for warning in address.warnings:
            logger.warning(f"Meeting location warning for client {client_id}: {warning}")

        if params.end_time <= params.start_time:
            raise ValidationError("End time must be after start time", errors={"end_time": "must be after start_time"})

        hours = duration_hours(params.booking_date, params.start_time, params.end_time)
        if hours < MIN_BOOKING_HOURS:
            raise ValidationError(
                f"Booking duration must be at least {MIN_BOOKING_HOURS:g} hour(s)",
                errors={"end_time": "duration too short"},
            )
        if hours > MAX_BOOKING_HOURS:
            raise ValidationError(
                f"Booking duration cannot exceed {MAX_BOOKING_HOURS:g} hours",
                errors={"end_time": "duration too long"},
            )

        try:
            # the conflict check must see every committed booking for this
            # companion, so it runs last and under the companion row lock
            self.repo.lock_companion(self.db, params.companion_id)
            conflicts = self.repo.overlapping(
                self.db, params.companion_id, params.booking_date, params.start_time, params.end_time,
            )
            if conflicts:
                raise ConflictError("Time slot is already booked", errors={"start_time": "slot taken"})

            booking = Booking(
                client_id=client_id,
                companion_id=params.companion_id,
                service_category_id=params.service_category_id,
                booking_date=params.booking_date,
                start_time=params.start_time,
                end_time=params.end_time,
                duration_hours=hours,
                total_amount=price(hours, hourly_rate),
                status="pending",
                custom_service_name=params.custom_service.name.strip() if params.custom_service else None,
                custom_service_description=params.custom_service.description if params.custom_service else None,
                special_requests=params.special_requests,
                meeting_location=params.meeting_location,
                meeting_location_lat=params.meeting_location_lat,
                meeting_location_lon=params.meeting_location_lon,
                meeting_type=meeting_type,
            )
            self.repo.add(self.db, booking)
            self.db.commit()
        except (ConflictError, SQLAlchemyError):
            self.db.rollback()
            raise

        self.db.refresh(booking)
        logger.info(
            f"Booking {booking.id} created: client {client_id} -> companion {booking.companion_id} "
            f"on {booking.booking_date} {booking.start_time}-{booking.end_time}"
        )
        return booking

    # ------------------------------------------------------------------
    # reads
    # ------------------------------------------------------------------
    def list_bookings(self, user: CurrentUser, status: Optional[str] = None, limit: int = 20, offset: int = 0) -> List[Booking]:
        if status is not None and status not in STATUSES:
            raise ValidationError("Invalid status. Must be one of: " + ", ".join(STATUSES))
        return self.repo.list_for_user(self.db, user.id, user.role == "companion", status, limit, offset)

    def get_booking(self, user: CurrentUser, booking_id: int) -> Booking:
        booking = self.repo.get_for_party(self.db, booking_id, user.id)
        if not booking:
            raise NotFoundError("Booking not found or access denied")
        return booking

    # ------------------------------------------------------------------
    # transitions
    # ------------------------------------------------------------------
    def _party(self, booking: Booking, user_id: int) -> str:
        if user_id == booking.client_id:
            return "client"
        if user_id == booking.companion_id:
            return "companion"
        raise AuthorizationError("You are not a party to this booking")

    def _load(self, booking_id: int) -> Booking:
        booking = self.repo.get_by_id(self.db, booking_id)
        if not booking:
            raise NotFoundError("Booking not found")
        return booking

    def update_booking_status(
        self, user: CurrentUser, booking_id: int, new_status: str, reason: Optional[str] = None,
    ) -> Tuple[Booking, List[Booking]]:
        """Apply a status change and return the booking plus any bookings it auto-cancelled."""
        if new_status not in STATUSES:
            raise ValidationError(
                "Invalid status. Must be one of: " + ", ".join(STATUSES),
                errors={"status": "unknown status"},
            )

        booking = self._load(booking_id)
        party = self._party(booking, user.id)
        current = booking.status
        try:
            check_transition(current, new_status, party)
        except AuthorizationError:
            logger.warning(f"User {user.id} ({party}) tried {current}->{new_status} on booking {booking_id}")
            raise

        if new_status == "confirmed":
            return self._confirm(booking, user.id)

        booking.status = new_status
        if new_status == "cancelled":
            booking.cancelled_by = user.id
            booking.cancellation_reason = reason
        try:
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
        self.db.refresh(booking)
        logger.info(f"Booking {booking_id} moved {current}->{new_status} by {party} {user.id}")
        return booking, []

    def _confirm(self, booking: Booking, actor_id: int) -> Tuple[Booking, List[Booking]]:
        """Confirm and cancel any other pending request that overlaps it."""
        try:
            self.repo.lock_companion(self.db, booking.companion_id)
            self.db.refresh(booking)
            if booking.status != "pending":
                raise ConflictError(f"Booking is already {booking.status}")

            taken = self.repo.overlapping(
                self.db, booking.companion_id, booking.booking_date, booking.start_time, booking.end_time,
                statuses=("confirmed",), exclude_id=booking.id,
            )
            if taken:
                raise ConflictError("Another booking is already confirmed for this time")

            booking.status = "confirmed"
            losers = self.repo.overlapping(
                self.db, booking.companion_id, booking.booking_date, booking.start_time, booking.end_time,
                statuses=("pending",), exclude_id=booking.id,
            )
            for other in losers:
                other.status = "cancelled"
                other.cancelled_by = actor_id
                other.cancellation_reason = AUTO_CANCEL_REASON
            self.db.commit()
        except (ConflictError, SQLAlchemyError):
            self.db.rollback()
            raise

        self.db.refresh(booking)
        for other in losers:
            self.db.refresh(other)
        logger.info(
            f"Booking {booking.id} confirmed; auto-cancelled {[b.id for b in losers] or 'none'}"
        )
        return booking, losers

    def approve_booking(self, user: CurrentUser, booking_id: int) -> Tuple[Booking, List[Booking]]:
        booking = self._load(booking_id)
        if booking.companion_id != user.id:
            raise AuthorizationError("Only the booked companion can approve this booking")
        check_transition(booking.status, "confirmed", "companion")
        return self._confirm(booking, user.id)

    def reject_booking(self, user: CurrentUser, booking_id: int, reason: Optional[str] = None) -> Booking:
        booking = self._load(booking_id)
        if booking.companion_id != user.id:
            raise AuthorizationError("Only the booked companion can reject this booking")
        if booking.status != "pending":
            raise AuthorizationError(
                f"Cannot change booking status from {booking.status} to cancelled by rejection",
                errors={"status": f"{booking.status}->cancelled not allowed"},
            )
        booking, _ = self.update_booking_status(user, booking_id, "cancelled", reason)
        return booking
