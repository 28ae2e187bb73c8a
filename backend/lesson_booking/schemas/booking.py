"""
Pydantic schemas for booking request/response validation.

Request and response bodies use camelCase keys on the wire; the nested
booking and time slot records are echoed with their column names.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, EmailStr, Field


class BookTimeSlotRequest(BaseModel):
    package_code: str = Field(..., alias="packageCode", min_length=1, max_length=64)
    time_slot_id: int = Field(..., alias="timeSlotId", gt=0)
    student_name: str = Field(..., alias="studentName", min_length=1, max_length=255)
    student_age: Optional[int] = Field(None, alias="studentAge", ge=0, le=120)
    customer_name: str = Field(..., alias="customerName", min_length=1, max_length=255)
    customer_email: EmailStr = Field(..., alias="customerEmail")
    customer_phone: Optional[str] = Field(None, alias="customerPhone", max_length=50)
    notes: Optional[str] = Field(None, max_length=2000)

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)


class CancelBookingRequest(BaseModel):
    booking_id: int = Field(..., alias="bookingId", gt=0)
    customer_email: EmailStr = Field(..., alias="customerEmail")

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)


class TimeSlotRecord(BaseModel):
    id: int
    program: Optional[str]
    starts_at: Optional[datetime]
    location: Optional[str]
    max_capacity: int
    current_enrollment: int

    model_config = ConfigDict(from_attributes=True)


class BookingRecord(BaseModel):
    id: int
    time_slot_id: int
    package_code: str
    customer_email: str
    customer_name: str
    customer_phone: Optional[str]
    student_name: Optional[str]
    student_age: Optional[int]
    notes: Optional[str]
    status: str
    booking_date: datetime
    created_at: datetime
    time_slot: TimeSlotRecord = Field(..., alias="timeSlot")

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def from_models(cls, booking, time_slot) -> "BookingRecord":
        """Echo a booking row merged with the slot it was booked into."""
        columns = {name: getattr(booking, name) for name in cls.model_fields if name != "time_slot"}
        return cls(**columns, time_slot=TimeSlotRecord.model_validate(time_slot))


class BookTimeSlotResponse(BaseModel):
    success: bool = True
    booking_id: int = Field(..., alias="bookingId")
    lessons_remaining: int = Field(..., alias="lessonsRemaining")
    booking: BookingRecord

    model_config = ConfigDict(populate_by_name=True)


class CancelledBooking(BaseModel):
    id: int
    package_code: str = Field(..., alias="packageCode")
    time_slot_id: int = Field(..., alias="timeSlotId")

    model_config = ConfigDict(populate_by_name=True)


class CancelBookingResponse(BaseModel):
    success: bool = True
    message: str = "Booking cancelled successfully"
    cancelled_booking: CancelledBooking = Field(..., alias="cancelledBooking")

    model_config = ConfigDict(populate_by_name=True)
