from fastapi import APIRouter, BackgroundTasks, Depends, Query, status
from typing import List, Optional

from app.api.deps import get_booking_service, get_notifier
from app.core.security import CurrentUser, get_current_user
from app.schemas.booking import (
    ApprovalResponse,
    BookingCreate,
    BookingReject,
    BookingResponse,
    BookingStatusUpdate,
)
from app.schemas.common import ApiResponse
from app.services.booking_service import BookingService
from app.services.notifications import NotificationSender, booking_summary

router = APIRouter(prefix="/bookings", tags=["bookings"])


def _notify_cancelled(background_tasks, notifier, booking, actor_id):
    summary = booking_summary(booking)
    # tell whichever party did not cancel
    recipient = booking.companion_id if actor_id == booking.client_id else booking.client_id
    background_tasks.add_task(notifier.booking_cancelled, summary, recipient, booking.cancellation_reason)


def _notify_confirmed(background_tasks, notifier, booking, auto_cancelled):
    background_tasks.add_task(notifier.booking_confirmed, booking_summary(booking))
    for other in auto_cancelled:
        background_tasks.add_task(
            notifier.booking_cancelled, booking_summary(other), other.client_id, other.cancellation_reason,
        )


# Client creates booking

@router.post("", response_model=ApiResponse[BookingResponse], status_code=status.HTTP_201_CREATED)
def create_booking(
    booking: BookingCreate,
    background_tasks: BackgroundTasks,
    service: BookingService = Depends(get_booking_service),
    notifier: NotificationSender = Depends(get_notifier),
    current_user: CurrentUser = Depends(get_current_user),
):
    new_booking = service.create_booking(current_user.id, booking)
    background_tasks.add_task(notifier.booking_requested, booking_summary(new_booking))
    return ApiResponse(message="Booking created successfully", data=BookingResponse.model_validate(new_booking))


# Caller's bookings, as client or companion depending on the session role

@router.get("", response_model=ApiResponse[List[BookingResponse]])
def list_my_bookings(
    status_filter: Optional[str] = Query(None, alias="status"),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    service: BookingService = Depends(get_booking_service),
    current_user: CurrentUser = Depends(get_current_user),
):
    bookings = service.list_bookings(current_user, status=status_filter, limit=limit, offset=offset)
    return ApiResponse(data=[BookingResponse.model_validate(b) for b in bookings])


@router.get("/{booking_id}", response_model=ApiResponse[BookingResponse])
def get_booking(
    booking_id: int,
    service: BookingService = Depends(get_booking_service),
    current_user: CurrentUser = Depends(get_current_user),
):
    booking = service.get_booking(current_user, booking_id)
    return ApiResponse(data=BookingResponse.model_validate(booking))


# Either party moves the booking through its lifecycle

@router.patch("/{booking_id}/status", response_model=ApiResponse[BookingResponse])
def update_booking_status(
    booking_id: int,
    payload: BookingStatusUpdate,
    background_tasks: BackgroundTasks,
    service: BookingService = Depends(get_booking_service),
    notifier: NotificationSender = Depends(get_notifier),
    current_user: CurrentUser = Depends(get_current_user),
):
    booking, auto_cancelled = service.update_booking_status(
        current_user, booking_id, payload.status, payload.cancellation_reason,
    )
    if booking.status == "confirmed":
        _notify_confirmed(background_tasks, notifier, booking, auto_cancelled)
    elif booking.status == "cancelled":
        _notify_cancelled(background_tasks, notifier, booking, current_user.id)
    return ApiResponse(message="Booking status updated successfully", data=BookingResponse.model_validate(booking))


# Companion accepts booking

@router.post("/{booking_id}/approve", response_model=ApiResponse[ApprovalResponse])
def approve_booking(
    booking_id: int,
    background_tasks: BackgroundTasks,
    service: BookingService = Depends(get_booking_service),
    notifier: NotificationSender = Depends(get_notifier),
    current_user: CurrentUser = Depends(get_current_user),
):
    booking, auto_cancelled = service.approve_booking(current_user, booking_id)
    _notify_confirmed(background_tasks, notifier, booking, auto_cancelled)
    return ApiResponse(
        message="Booking approved",
        data=ApprovalResponse(
            booking=BookingResponse.model_validate(booking),
            auto_cancelled_ids=[b.id for b in auto_cancelled],
        ),
    )


# Companion rejects booking

@router.post("/{booking_id}/reject", response_model=ApiResponse[BookingResponse])
def reject_booking(
    booking_id: int,
    background_tasks: BackgroundTasks,
    payload: Optional[BookingReject] = None,
    service: BookingService = Depends(get_booking_service),
    notifier: NotificationSender = Depends(get_notifier),
    current_user: CurrentUser = Depends(get_current_user),
):
    reason = payload.reason if payload else None
    booking = service.reject_booking(current_user, booking_id, reason)
    _notify_cancelled(background_tasks, notifier, booking, current_user.id)
    return ApiResponse(message="Booking rejected", data=BookingResponse.model_validate(booking))
