"""In-app notifications for booking events.

Sends run as background tasks after the booking transaction has committed,
on their own session. A failed send is logged and never reaches the caller.
"""

import logging
from typing import Callable

from sqlalchemy.orm import Session

from app.db.models.booking import Booking
from app.db.models.notification import Notification

logger = logging.getLogger(__name__)


def booking_summary(booking: Booking) -> dict:
    """Plain copy of the fields a message needs, safe to use after the session closes."""
    return {
        "id": booking.id,
        "client_id": booking.client_id,
        "companion_id": booking.companion_id,
        "date": booking.booking_date.isoformat(),
        "start_time": booking.start_time.strftime("%H:%M"),
        "end_time": booking.end_time.strftime("%H:%M"),
        "status": booking.status,
        "total_amount": str(booking.total_amount),
    }


class NotificationSender:

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    def notify(self, recipient_id: int, type: str, title: str, message: str, action_url: str = None) -> None:
        db = None
        try:
            db = self.session_factory()
            db.add(Notification(
                user_id=recipient_id,
                type=type,
                title=title,
                message=message,
                action_url=action_url,
            ))
            db.commit()
            logger.info(f"Notification '{type}' sent to user {recipient_id}")
        except Exception as e:
            if db is not None:
                db.rollback()
            logger.error(f"Failed to send '{type}' notification to user {recipient_id}: {e}")
        finally:
            if db is not None:
                db.close()

    def booking_requested(self, summary: dict) -> None:
        self.notify(
            summary["companion_id"],
            "booking_request",
            "New booking request",
            f"You have a new booking request for {summary['date']} "
            f"{summary['start_time']}-{summary['end_time']}.",
            action_url=f"/bookings/{summary['id']}",
        )

    def booking_confirmed(self, summary: dict) -> None:
        self.notify(
            summary["client_id"],
            "booking_confirmed",
            "Booking confirmed",
            f"Your booking on {summary['date']} at {summary['start_time']} was confirmed.",
            action_url=f"/bookings/{summary['id']}",
        )

    def booking_cancelled(self, summary: dict, recipient_id: int, reason: str = None) -> None:
        message = f"The booking on {summary['date']} at {summary['start_time']} was cancelled."
        if reason:
            message += f" Reason: {reason}"
        self.notify(
            recipient_id,
            "booking_cancelled",
            "Booking cancelled",
            message,
            action_url=f"/bookings/{summary['id']}",
        )
