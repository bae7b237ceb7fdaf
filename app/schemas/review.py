# app/schemas/review.py
from pydantic import BaseModel
from typing import Dict, List
from datetime import datetime

class ReviewCreate(BaseModel):
    booking_id: int
    rating: int
    review_text: str

class ReviewResponse(BaseModel):
    id: int
    booking_id: int
    reviewer_id: int
    reviewee_id: int
    rating: int
    review_text: str
    created_at: datetime

    class Config:
        from_attributes = True

class ReviewPage(BaseModel):
    companion_id: int
    page: int
    page_size: int
    total: int
    average_rating: float
    review_count: int
    rating_distribution: Dict[int, int]
    reviews: List[ReviewResponse]

class ReviewExists(BaseModel):
    booking_id: int
    has_review: bool
