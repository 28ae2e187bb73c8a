"""
Customer contact record keyed by email. Upserted, never deleted.
"""

from sqlalchemy import Column, Integer, String

from lesson_booking.db.base import Base, TimestampMixin


class Customer(Base, TimestampMixin):
    __tablename__ = "customers"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    name = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)

    def __repr__(self) -> str:
        return f"<Customer(email={self.email})>"
