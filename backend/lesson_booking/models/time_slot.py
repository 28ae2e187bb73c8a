"""
TimeSlot model: one bookable session with a fixed capacity.

`current_enrollment` is denormalized (avoids COUNT on bookings) and is
adjusted in the same transaction as each booking insert/delete.
"""

from sqlalchemy import Column, Integer, String, DateTime, CheckConstraint

from lesson_booking.db.base import Base, TimestampMixin


class TimeSlot(Base, TimestampMixin):
    __tablename__ = "time_slots"

    id = Column(Integer, primary_key=True, index=True)
    program = Column(String(100), nullable=True)
    starts_at = Column(DateTime(timezone=True), nullable=True, index=True)
    location = Column(String(255), nullable=True)
    max_capacity = Column(Integer, nullable=False)
    current_enrollment = Column(Integer, nullable=False, default=0)

    __table_args__ = (
        CheckConstraint("max_capacity > 0", name="check_max_capacity_positive"),
        CheckConstraint("current_enrollment >= 0", name="check_enrollment_non_negative"),
        CheckConstraint("current_enrollment <= max_capacity", name="check_enrollment_lte_capacity"),
    )

    def __repr__(self) -> str:
        return f"<TimeSlot(id={self.id}, enrolled={self.current_enrollment}/{self.max_capacity})>"
