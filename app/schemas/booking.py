from pydantic import BaseModel, Field
from datetime import date, time, datetime
from decimal import Decimal
from typing import List, Optional


class CustomService(BaseModel):
    name: str
    description: Optional[str] = None


# --- CREATE ---
# fields are optional here; the booking service reports what is missing
class BookingCreate(BaseModel):
    companion_id: Optional[int] = None
    booking_date: Optional[date] = None
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    service_category_id: Optional[int] = None
    custom_service: Optional[CustomService] = None
    special_requests: Optional[str] = None
    meeting_location: Optional[str] = None
    meeting_location_lat: Optional[float] = None
    meeting_location_lon: Optional[float] = None
    meeting_type: Optional[str] = None


# --- UPDATE (client or companion) ---
class BookingStatusUpdate(BaseModel):
    status: str = Field(..., description="Allowed values: pending, confirmed, cancelled, completed, no_show")
    cancellation_reason: Optional[str] = None


class BookingReject(BaseModel):
    reason: Optional[str] = None


# --- RESPONSE ---
class BookingResponse(BaseModel):
    id: int
    client_id: int
    companion_id: int
    service_category_id: Optional[int]
    booking_date: date
    start_time: time
    end_time: time
    duration_hours: float
    total_amount: Decimal
    status: str
    custom_service_name: Optional[str]
    custom_service_description: Optional[str]
    special_requests: Optional[str]
    meeting_location: Optional[str]
    meeting_type: str
    cancelled_by: Optional[int]
    cancellation_reason: Optional[str]
    created_at: datetime
    updated_at: Optional[datetime]

    class Config:
        from_attributes = True


class ApprovalResponse(BaseModel):
    booking: BookingResponse
    auto_cancelled_ids: List[int]
