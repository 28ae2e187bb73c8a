"""
Booking endpoints: reserve a lesson and cancel it.
"""

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from lesson_booking.db.session import get_db
from lesson_booking.schemas.booking import (
    BookTimeSlotRequest,
    BookTimeSlotResponse,
    BookingRecord,
    CancelBookingRequest,
    CancelBookingResponse,
    CancelledBooking,
)
from lesson_booking.services.booking_service import book_time_slot, cancel_booking
from lesson_booking.services.interfaces.notifier import Notifier
from lesson_booking.services.strategy_factory import get_notifier

router = APIRouter(tags=["Bookings"])


@router.post("/book-time-slot", response_model=BookTimeSlotResponse)
async def book_time_slot_endpoint(
    booking_data: BookTimeSlotRequest,
    db: AsyncSession = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
):
    """
    Book a lesson from a package into a time slot.

    Seat and lesson counters change in the same transaction as the booking
    insert, so a full slot or an empty package can never be overdrawn.
    """
    outcome = await book_time_slot(db, booking_data, notifier)
    return BookTimeSlotResponse(
        booking_id=outcome.booking.id,
        lessons_remaining=outcome.lessons_remaining,
        booking=BookingRecord.from_models(outcome.booking, outcome.time_slot),
    )


@router.post("/cancel-booking", response_model=CancelBookingResponse)
async def cancel_booking_endpoint(
    cancel_data: CancelBookingRequest,
    db: AsyncSession = Depends(get_db),
):
    """Cancel a booking and return its lesson to the package."""
    booking = await cancel_booking(db, cancel_data.booking_id, cancel_data.customer_email)
    return CancelBookingResponse(
        cancelled_booking=CancelledBooking(
            id=booking.id,
            package_code=booking.package_code,
            time_slot_id=booking.time_slot_id,
        ),
    )


@router.options("/book-time-slot", include_in_schema=False)
@router.options("/cancel-booking", include_in_schema=False)
async def bookings_preflight():
    return Response(status_code=200)
