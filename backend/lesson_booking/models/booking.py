"""
Booking model: one package credit spent on one time slot.

Key design decisions:
- Unique constraint on (time_slot_id, package_code, customer_email) prevents
  the same student being booked twice into a slot from one package
- Cancellation is a hard delete; there is no 'cancelled' status
"""

from sqlalchemy import Column, Integer, String, DateTime, Text, ForeignKey, UniqueConstraint

from lesson_booking.db.base import Base, TimestampMixin, utcnow

BOOKING_STATUS_CONFIRMED = "confirmed"


class Booking(Base, TimestampMixin):
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)
    time_slot_id = Column(Integer, ForeignKey("time_slots.id"), nullable=False, index=True)
    package_code = Column(String(64), ForeignKey("packages.code"), nullable=False, index=True)
    customer_email = Column(String(255), nullable=False, index=True)
    customer_name = Column(String(255), nullable=False)
    customer_phone = Column(String(50), nullable=True)
    student_name = Column(String(255), nullable=True)
    student_age = Column(Integer, nullable=True)
    notes = Column(Text, nullable=True)
    status = Column(String(20), nullable=False, default=BOOKING_STATUS_CONFIRMED)
    booking_date = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (
        UniqueConstraint("time_slot_id", "package_code", "customer_email", name="uq_slot_package_customer"),
    )

    def __repr__(self) -> str:
        return f"<Booking(id={self.id}, slot={self.time_slot_id}, package={self.package_code})>"
