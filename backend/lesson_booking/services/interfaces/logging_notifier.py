"""
Logging notifier - no external delivery.
Default backend for development and for deployments without an email key.
"""

from lesson_booking.core.logging import get_logger
from lesson_booking.models.booking import Booking
from lesson_booking.models.time_slot import TimeSlot
from lesson_booking.services.interfaces.notifier import Notifier

logger = get_logger(__name__)


class LoggingNotifier(Notifier):
    """Record the confirmation in the log instead of sending it."""

    async def send_booking_confirmation(self, booking: Booking, time_slot: TimeSlot) -> None:
        logger.info(
            "booking_confirmation_logged",
            booking_id=booking.id,
            customer_email=booking.customer_email,
            time_slot_id=time_slot.id,
            starts_at=time_slot.starts_at.isoformat() if time_slot.starts_at else None,
        )
