# app/api/routes/availability.py
from fastapi import APIRouter, Depends, Query, Request
from datetime import date
from typing import List, Optional

from app.api.deps import get_availability_service, get_slot_resolver
from app.core.security import CurrentUser, get_current_user
from app.schemas.availability import (
    AvailabilitySlotResponse,
    BookedInterval,
    CalendarResponse,
    OpenSlotsResponse,
    WeeklyAvailabilityResponse,
    WeeklyAvailabilityUpdate,
)
from app.schemas.common import ApiResponse
from app.services.availability_service import AvailabilityService
from app.services.slot_resolver import SlotResolver

router = APIRouter(prefix="/availability", tags=["availability"])


def _days(grouped) -> dict:
    return {
        day: [AvailabilitySlotResponse.model_validate(s) for s in slots]
        for day, slots in grouped.items()
    }


# Companion replaces their whole weekly schedule

@router.put("/me", response_model=ApiResponse[WeeklyAvailabilityResponse])
def set_weekly_availability(
    payload: WeeklyAvailabilityUpdate,
    request: Request,
    service: AvailabilityService = Depends(get_availability_service),
    current_user: CurrentUser = Depends(get_current_user),
):
    origin = request.client.host if request.client else None
    grouped = service.set_weekly_availability(current_user, payload.availability, origin=origin)
    return ApiResponse(
        message="Availability updated successfully",
        data=WeeklyAvailabilityResponse(companion_id=current_user.id, days=_days(grouped)),
    )


@router.get("/companions/{companion_id}", response_model=ApiResponse[WeeklyAvailabilityResponse])
def get_weekly_availability(
    companion_id: int,
    on_date: Optional[date] = Query(None, alias="date", description="only the weekday of this date"),
    service: AvailabilityService = Depends(get_availability_service),
):
    grouped = service.get_weekly_availability(companion_id, on_date=on_date)
    return ApiResponse(data=WeeklyAvailabilityResponse(companion_id=companion_id, days=_days(grouped)))


# Slot resolution

@router.get("/companions/{companion_id}/slots", response_model=ApiResponse[OpenSlotsResponse])
def get_open_slots(
    companion_id: int,
    on_date: date = Query(..., alias="date", description="date in YYYY-MM-DD"),
    resolver: SlotResolver = Depends(get_slot_resolver),
):
    slots = resolver.get_open_slots(companion_id, on_date)
    return ApiResponse(data=OpenSlotsResponse(date=on_date, available_slots=slots))


@router.get("/companions/{companion_id}/calendar", response_model=ApiResponse[CalendarResponse])
def get_availability_calendar(
    companion_id: int,
    start_date: date = Query(...),
    end_date: date = Query(...),
    resolver: SlotResolver = Depends(get_slot_resolver),
):
    days = resolver.get_availability_calendar(companion_id, start_date, end_date)
    return ApiResponse(data=CalendarResponse(
        companion_id=companion_id, start_date=start_date, end_date=end_date, days=days,
    ))


@router.get("/companions/{companion_id}/bookings", response_model=ApiResponse[List[BookedInterval]])
def get_companion_bookings_in_range(
    companion_id: int,
    start_date: date = Query(...),
    end_date: date = Query(...),
    resolver: SlotResolver = Depends(get_slot_resolver),
):
    bookings = resolver.get_bookings_in_range(companion_id, start_date, end_date)
    return ApiResponse(data=[BookedInterval.model_validate(b) for b in bookings])
