"""
Error kinds raised by the booking and package services.

Every error is an HTTPException so FastAPI routes can let them propagate;
the handlers in main.py render them as {"error": ..., "details": ...}.

  400  ValidationError and every business-rule violation
  404  BookingNotFound (also covers bookings owned by someone else)
  500  ServerError (store failures during a write)
"""

from typing import Optional

from fastapi import HTTPException, status


class BookingAPIError(HTTPException):
    code = "error"
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Request failed"

    def __init__(self, message: Optional[str] = None, details: Optional[str] = None):
        super().__init__(status_code=self.status_code, detail=message or self.message)
        self.details = details


class ValidationError(BookingAPIError):
    code = "validation_error"
    message = "Missing required fields"


class MissingCancelFields(ValidationError):
    message = "Missing booking ID or customer email"


class PackageNotFound(BookingAPIError):
    code = "package_not_found"
    message = "Invalid package code or payment not yet confirmed. Please try again in a moment."


class NoLessonsRemaining(BookingAPIError):
    code = "no_lessons_remaining"
    message = "No remaining lessons in this package"


class InvalidTimeSlot(BookingAPIError):
    code = "invalid_time_slot"
    message = "Invalid time slot"


class SlotFull(BookingAPIError):
    code = "slot_full"
    message = "This time slot is full"


class DuplicateBooking(BookingAPIError):
    """Keyed on (slot, package, customer email); siblings booked by one
    customer from one package collide even though the wording says student."""

    code = "duplicate_booking"
    message = "This student is already booked for this time slot"


class InvalidPromoCode(BookingAPIError):
    code = "invalid_promo_code"
    message = "Invalid promo code for free package"


class BookingNotFound(BookingAPIError):
    code = "booking_not_found"
    status_code = status.HTTP_404_NOT_FOUND
    message = "Booking not found or access denied"


class ServerError(BookingAPIError):
    code = "server_error"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "Internal server error"
