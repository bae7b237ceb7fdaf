"""Booking reviews - one immutable review per completed booking"""

import logging
from typing import Dict

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.errors import AuthorizationError, ConflictError, NotFoundError, ValidationError
from app.db.models.booking import Booking
from app.db.models.review import BookingReview
from app.db.models.user import User
from app.repositories.booking import BookingRepository

logger = logging.getLogger(__name__)

MIN_TEXT_LENGTH = 10
MAX_TEXT_LENGTH = 500


class ReviewService:

    def __init__(self, db: Session):
        self.db = db

    def _recalculate_rating(self, reviewee_id: int) -> None:
        avg, count = (
            self.db.query(func.avg(BookingReview.rating), func.count(BookingReview.id))
            .filter(BookingReview.reviewee_id == reviewee_id)
            .one()
        )
        user = self.db.query(User).filter(User.id == reviewee_id).first()
        user.avg_rating = round(float(avg), 1) if count else 0.0
        user.review_count = int(count)

    def create_review(self, reviewer_id: int, booking_id: int, rating: int, text: str) -> BookingReview:
        if rating is None or not 1 <= rating <= 5:
            raise ValidationError("Rating must be between 1 and 5", errors={"rating": "must be 1-5"})
        text = (text or "").strip()
        if not MIN_TEXT_LENGTH <= len(text) <= MAX_TEXT_LENGTH:
            raise ValidationError(
                f"Review text must be between {MIN_TEXT_LENGTH} and {MAX_TEXT_LENGTH} characters",
                errors={"review_text": f"length must be {MIN_TEXT_LENGTH}-{MAX_TEXT_LENGTH}"},
            )

        booking = self.db.query(Booking).filter(Booking.id == booking_id).first()
        if not booking:
            raise NotFoundError("Booking not found")
        if booking.client_id != reviewer_id:
            raise AuthorizationError("Only the client of a booking can review it")
        if booking.status != "completed":
            raise ValidationError("Can only review completed bookings", errors={"booking_id": "booking not completed"})

        if self.has_review(booking_id):
            raise ConflictError("A review already exists for this booking")

        review = BookingReview(
            booking_id=booking.id,
            reviewer_id=reviewer_id,
            reviewee_id=booking.companion_id,
            rating=rating,
            review_text=text,
        )
        try:
            self.db.add(review)
            self.db.flush()
            self._recalculate_rating(booking.companion_id)
            self.db.commit()
        except IntegrityError:
            # lost a race with another submission for the same booking
            self.db.rollback()
            raise ConflictError("A review already exists for this booking")
        except SQLAlchemyError:
            self.db.rollback()
            raise

        self.db.refresh(review)
        logger.info(f"Review {review.id} created for booking {booking_id} (rating {rating})")
        return review

    def has_review(self, booking_id: int) -> bool:
        return self.db.query(BookingReview.id).filter(BookingReview.booking_id == booking_id).first() is not None

    def _party_booking(self, user_id: int, booking_id: int) -> Booking:
        booking = BookingRepository.get_for_party(self.db, booking_id, user_id)
        if not booking:
            raise NotFoundError("Booking not found or access denied")
        return booking

    def booking_has_review(self, user_id: int, booking_id: int) -> bool:
        """Whether a review exists, answered only to the booking's client or companion."""
        self._party_booking(user_id, booking_id)
        return self.has_review(booking_id)

    def get_booking_review(self, user_id: int, booking_id: int) -> BookingReview:
        self._party_booking(user_id, booking_id)
        review = self.db.query(BookingReview).filter(BookingReview.booking_id == booking_id).first()
        if not review:
            raise NotFoundError("No review found for this booking")
        return review

    def get_reviews(self, companion_id: int, page: int = 1, page_size: int = 10) -> Dict:
        if page < 1 or page_size < 1:
            raise ValidationError("page and page_size must be positive")

        base = self.db.query(BookingReview).filter(BookingReview.reviewee_id == companion_id)
        total = base.count()
        reviews = (
            base.order_by(BookingReview.created_at.desc(), BookingReview.id.desc())
            .offset((page - 1) * page_size)
            .limit(page_size)
            .all()
        )

        distribution = {star: 0 for star in range(1, 6)}
        rows = (
            self.db.query(BookingReview.rating, func.count(BookingReview.id))
            .filter(BookingReview.reviewee_id == companion_id)
            .group_by(BookingReview.rating)
            .all()
        )
        for star, count in rows:
            distribution[int(star)] = int(count)

        companion = self.db.query(User).filter(User.id == companion_id).first()
        return {
            "companion_id": companion_id,
            "page": page,
            "page_size": page_size,
            "total": total,
            "average_rating": float(companion.avg_rating or 0) if companion else 0.0,
            "review_count": int(companion.review_count or 0) if companion else 0,
            "rating_distribution": distribution,
            "reviews": reviews,
        }
