from lesson_booking.schemas.booking import (
    BookTimeSlotRequest, BookTimeSlotResponse, BookingRecord, TimeSlotRecord,
    CancelBookingRequest, CancelBookingResponse, CancelledBooking,
)
from lesson_booking.schemas.package import AdminPackageRequest, PromoPackageRequest, PackageIssuedResponse

__all__ = [
    "BookTimeSlotRequest", "BookTimeSlotResponse", "BookingRecord", "TimeSlotRecord",
    "CancelBookingRequest", "CancelBookingResponse", "CancelledBooking",
    "AdminPackageRequest", "PromoPackageRequest", "PackageIssuedResponse",
]
