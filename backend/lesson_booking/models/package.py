"""
Package model: a bundle of lesson credits identified by a public code.

Key design decisions:
- `code` is the external identifier; bookings reference it, not `id`
- `lessons_remaining` is only ever changed by guarded UPDATEs in the
  booking service, and the CHECK constraints are the final safety net
- `status` starts as 'pending' for card purchases until the payment webhook
  marks it 'paid'; promo packages are created 'paid'
"""

from sqlalchemy import Column, Integer, String, Numeric, Index, CheckConstraint

from lesson_booking.db.base import Base, TimestampMixin

PACKAGE_STATUS_PENDING = "pending"
PACKAGE_STATUS_PAID = "paid"


class Package(Base, TimestampMixin):
    __tablename__ = "packages"

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String(64), unique=True, index=True, nullable=False)
    program = Column(String(100), nullable=False)
    lessons_total = Column(Integer, nullable=False)
    lessons_remaining = Column(Integer, nullable=False)
    amount_paid = Column(Numeric(10, 2), nullable=False, default=0)
    payment_intent_id = Column(String(255), nullable=True)
    status = Column(String(20), nullable=False, default=PACKAGE_STATUS_PENDING)

    __table_args__ = (
        CheckConstraint("lessons_total > 0", name="check_lessons_total_positive"),
        CheckConstraint("lessons_remaining >= 0", name="check_lessons_remaining_non_negative"),
        CheckConstraint("lessons_remaining <= lessons_total", name="check_lessons_remaining_lte_total"),
        CheckConstraint("status IN ('pending', 'paid')", name="check_package_status"),
        # Lookup used by the pending grace-window query
        Index("ix_packages_code_status", "code", "status"),
    )

    def __repr__(self) -> str:
        return f"<Package(code={self.code}, status={self.status}, remaining={self.lessons_remaining}/{self.lessons_total})>"
