from lesson_booking.models.package import Package
from lesson_booking.models.time_slot import TimeSlot
from lesson_booking.models.booking import Booking
from lesson_booking.models.customer import Customer

__all__ = ["Package", "TimeSlot", "Booking", "Customer"]
