# app/api/routes/review.py
from fastapi import APIRouter, Depends, Query, status

from app.api.deps import get_review_service
from app.core.security import CurrentUser, get_current_user
from app.schemas.common import ApiResponse
from app.schemas.review import ReviewCreate, ReviewExists, ReviewPage, ReviewResponse
from app.services.review_service import ReviewService

router = APIRouter(prefix="/reviews", tags=["reviews"])

# Create review (client of a completed booking)
@router.post("", response_model=ApiResponse[ReviewResponse], status_code=status.HTTP_201_CREATED)
def create_review(
    review_in: ReviewCreate,
    service: ReviewService = Depends(get_review_service),
    current_user: CurrentUser = Depends(get_current_user),
):
    review = service.create_review(current_user.id, review_in.booking_id, review_in.rating, review_in.review_text)
    return ApiResponse(message="Review submitted", data=ReviewResponse.model_validate(review))

# List reviews for a companion (public)
@router.get("/companions/{companion_id}", response_model=ApiResponse[ReviewPage])
def list_companion_reviews(
    companion_id: int,
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=50),
    service: ReviewService = Depends(get_review_service),
):
    result = service.get_reviews(companion_id, page, page_size)
    result["reviews"] = [ReviewResponse.model_validate(r) for r in result["reviews"]]
    return ApiResponse(data=ReviewPage(**result))

@router.get("/bookings/{booking_id}/exists", response_model=ApiResponse[ReviewExists])
def review_exists(
    booking_id: int,
    service: ReviewService = Depends(get_review_service),
    current_user: CurrentUser = Depends(get_current_user),
):
    has_review = service.booking_has_review(current_user.id, booking_id)
    return ApiResponse(data=ReviewExists(booking_id=booking_id, has_review=has_review))

# The review left on a booking (either party)
@router.get("/bookings/{booking_id}", response_model=ApiResponse[ReviewResponse])
def get_booking_review(
    booking_id: int,
    service: ReviewService = Depends(get_review_service),
    current_user: CurrentUser = Depends(get_current_user),
):
    review = service.get_booking_review(current_user.id, booking_id)
    return ApiResponse(data=ReviewResponse.model_validate(review))
