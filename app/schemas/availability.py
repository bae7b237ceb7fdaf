# app/schemas/availability.py
from pydantic import BaseModel, Field
from typing import Dict, List
from datetime import time, date

class AvailabilitySlotIn(BaseModel):
    day_of_week: str = Field(..., description="monday, tuesday, …, sunday")
    start_time: time
    end_time: time
    is_available: bool = True
    services_offered: List[str] = Field(default_factory=list)

class WeeklyAvailabilityUpdate(BaseModel):
    availability: List[AvailabilitySlotIn]

class AvailabilitySlotResponse(BaseModel):
    day_of_week: str
    start_time: time
    end_time: time
    is_available: bool
    services_offered: List[str]

    class Config:
        from_attributes = True

class WeeklyAvailabilityResponse(BaseModel):
    companion_id: int
    days: Dict[str, List[AvailabilitySlotResponse]]

class OpenSlot(BaseModel):
    start_time: time
    end_time: time

class OpenSlotsResponse(BaseModel):
    date: date
    available_slots: List[OpenSlot]

class CalendarDay(BaseModel):
    date: date
    day_of_week: str
    total_slots: int
    available_slots: int
    booked_slots: int
    is_available: bool
    open_slots: List[OpenSlot]

class CalendarResponse(BaseModel):
    companion_id: int
    start_date: date
    end_date: date
    days: List[CalendarDay]

class BookedInterval(BaseModel):
    id: int
    booking_date: date
    start_time: time
    end_time: time
    status: str

    class Config:
        from_attributes = True

